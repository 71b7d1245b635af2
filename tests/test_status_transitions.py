import pytest

from app.services.status_transitions import (
    InvalidTransitionError,
    can_confirm_handover,
    can_decide,
    can_schedule_pickup,
    can_transition_order,
    get_allowed_order_transitions,
    is_terminal_order_status,
    validate_order_transition,
)


@pytest.mark.parametrize(
    "current,new",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "packed"),
        ("confirmed", "cancelled"),
        ("packed", "shipped"),
        ("packed", "cancelled"),
        ("shipped", "delivered"),
        ("delivered", "returned"),
    ],
)
def test_forward_order_transitions_allowed(current, new):
    assert can_transition_order(current, new)
    validate_order_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [
        ("pending", "shipped"),
        ("shipped", "cancelled"),
        ("delivered", "pending"),
        ("cancelled", "confirmed"),
        ("returned", "delivered"),
    ],
)
def test_invalid_order_transitions_name_both_states(current, new):
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_order_transition(current, new)
    err = exc_info.value
    assert err.current == current
    assert err.requested == new
    assert current in err.message and new in err.message


def test_terminal_order_statuses():
    assert is_terminal_order_status("cancelled")
    assert is_terminal_order_status("returned")
    assert get_allowed_order_transitions("cancelled") == []
    assert not is_terminal_order_status("delivered")


def test_return_request_guards():
    assert can_decide("pending")
    assert not can_decide("approved")
    assert not can_decide("rejected")

    assert can_schedule_pickup("approved", pickup_scheduled=False)
    assert not can_schedule_pickup("approved", pickup_scheduled=True)
    assert not can_schedule_pickup("pending", pickup_scheduled=False)

    assert can_confirm_handover("approved", pickup_scheduled=True, user_handed_over=False)
    assert not can_confirm_handover("approved", pickup_scheduled=False, user_handed_over=False)
    assert not can_confirm_handover("approved", pickup_scheduled=True, user_handed_over=True)
