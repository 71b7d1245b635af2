from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.services.eligibility import (
    EligibilityError,
    assert_can_cancel,
    assert_can_return,
    can_cancel,
    can_return,
    eligibility_summary,
    is_in_contact_window,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def order(status: str, age: timedelta = timedelta(0)):
    return SimpleNamespace(status=status, updated_at=NOW - age)


@pytest.mark.parametrize("status", ["pending", "confirmed"])
@pytest.mark.parametrize("age", [timedelta(0), timedelta(days=3), timedelta(days=30)])
def test_early_orders_can_only_be_cancelled(status, age):
    o = order(status, age)
    assert can_cancel(o, NOW) is True
    assert can_return(o, NOW) is False
    assert is_in_contact_window(o, NOW) is False


@pytest.mark.parametrize("status", ["shipped", "delivered"])
def test_return_window_open_at_a_day_and_a_half(status):
    o = order(status, timedelta(days=1.5))
    assert can_return(o, NOW) is True
    assert is_in_contact_window(o, NOW) is False
    assert can_cancel(o, NOW) is False


def test_contact_window_after_return_window_lapses():
    o = order("shipped", timedelta(days=2.5))
    assert can_return(o, NOW) is False
    assert is_in_contact_window(o, NOW) is True


def test_everything_closed_after_a_week():
    o = order("shipped", timedelta(days=8))
    assert can_return(o, NOW) is False
    assert is_in_contact_window(o, NOW) is False
    assert can_cancel(o, NOW) is False


def test_window_boundaries_use_elapsed_time():
    assert can_return(order("delivered", timedelta(hours=48)), NOW) is True
    assert can_return(order("delivered", timedelta(hours=48, seconds=1)), NOW) is False
    assert is_in_contact_window(order("delivered", timedelta(hours=48, seconds=1)), NOW) is True
    assert is_in_contact_window(order("delivered", timedelta(days=7)), NOW) is True
    assert is_in_contact_window(order("delivered", timedelta(days=7, seconds=1)), NOW) is False


@pytest.mark.parametrize("status", ["packed", "cancelled", "returned"])
def test_other_statuses_offer_nothing(status):
    o = order(status, timedelta(hours=1))
    assert not can_cancel(o, NOW)
    assert not can_return(o, NOW)
    assert not is_in_contact_window(o, NOW)


@pytest.mark.parametrize(
    "status,age",
    [
        (s, timedelta(hours=h))
        for s in ["pending", "confirmed", "packed", "shipped", "delivered", "cancelled", "returned"]
        for h in [0, 24, 49, 100, 170, 200]
    ],
)
def test_predicates_are_mutually_exclusive(status, age):
    o = order(status, age)
    flags = [can_cancel(o, NOW), can_return(o, NOW), is_in_contact_window(o, NOW)]
    assert sum(flags) <= 1


def test_naive_timestamps_are_treated_as_utc():
    o = SimpleNamespace(status="shipped", updated_at=(NOW - timedelta(hours=10)).replace(tzinfo=None))
    assert can_return(o, NOW) is True


def test_summary_messages():
    assert "cancelled" in eligibility_summary(order("pending"), NOW).message
    closed = eligibility_summary(order("delivered", timedelta(days=3)), NOW)
    assert closed.in_contact_window is True
    assert "contact support" in closed.message
    assert "no longer be cancelled" in eligibility_summary(order("packed"), NOW).message
    assert eligibility_summary(order("returned"), NOW).to_dict()["can_return"] is False


def test_assert_helpers_raise_with_details():
    with pytest.raises(EligibilityError) as exc_info:
        assert_can_cancel(order("shipped"), NOW)
    assert exc_info.value.details == {"action": "cancel", "order_status": "shipped"}

    with pytest.raises(EligibilityError) as exc_info:
        assert_can_return(order("delivered", timedelta(days=3)), NOW)
    assert "expired" in exc_info.value.message

    with pytest.raises(EligibilityError):
        assert_can_return(order("pending"), NOW)

    assert_can_return(order("delivered", timedelta(hours=5)), NOW)
