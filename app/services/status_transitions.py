"""
Order and Return Request State Machines

All status changes for orders and return requests are validated here.
The two machines are tracked independently: approving a return request
never moves its parent order, and moving an order to RETURNED is a
separate admin action.
"""

from typing import Dict, List

from app.models.order import OrderStatus
from app.models.return_request import ReturnRequestStatus


class InvalidTransitionError(Exception):
    """A transition was attempted from an incompatible source state."""
    def __init__(self, current: str, requested: str, details: Dict = None):
        self.current = current
        self.requested = requested
        self.message = f"Cannot move from '{current}' to '{requested}'"
        self.details = {"current": current, "requested": requested, **(details or {})}
        super().__init__(self.message)


# =============================================================================
# ORDER TRANSITIONS
# =============================================================================

# Format: current_status -> [list of allowed next statuses]
ORDER_TRANSITIONS: Dict[str, List[str]] = {
    OrderStatus.PENDING.value: [
        OrderStatus.CONFIRMED.value,
        OrderStatus.CANCELLED.value,
    ],
    OrderStatus.CONFIRMED.value: [
        OrderStatus.PACKED.value,
        OrderStatus.CANCELLED.value,
    ],
    OrderStatus.PACKED.value: [
        OrderStatus.SHIPPED.value,
        OrderStatus.CANCELLED.value,
    ],
    OrderStatus.SHIPPED.value: [
        OrderStatus.DELIVERED.value,
    ],
    OrderStatus.DELIVERED.value: [
        OrderStatus.RETURNED.value,
    ],
    OrderStatus.CANCELLED.value: [],    # Terminal
    OrderStatus.RETURNED.value: [],     # Terminal
}


def get_allowed_order_transitions(current_status: str) -> List[str]:
    return ORDER_TRANSITIONS.get(current_status, [])


def can_transition_order(current_status: str, new_status: str) -> bool:
    return new_status in get_allowed_order_transitions(current_status)


def validate_order_transition(current_status: str, new_status: str) -> None:
    """Raise InvalidTransitionError unless current -> new is an allowed order move."""
    if not can_transition_order(current_status, new_status):
        raise InvalidTransitionError(
            current_status,
            new_status,
            details={"allowed": get_allowed_order_transitions(current_status)},
        )


def is_terminal_order_status(status: str) -> bool:
    return status in (OrderStatus.CANCELLED.value, OrderStatus.RETURNED.value)


# =============================================================================
# RETURN REQUEST TRANSITIONS
# =============================================================================

# Requested-state names used in errors; the stored status only ever holds
# pending/approved/rejected, pickup and hand-over are flags on an approved request.
PICKUP_SCHEDULED = "pickup_scheduled"
HANDED_OVER = "handed_over"

DECISIONS = (ReturnRequestStatus.APPROVED.value, ReturnRequestStatus.REJECTED.value)


def can_decide(status: str) -> bool:
    """Only pending requests can be approved or rejected."""
    return status == ReturnRequestStatus.PENDING.value


def can_schedule_pickup(status: str, pickup_scheduled: bool) -> bool:
    return status == ReturnRequestStatus.APPROVED.value and not pickup_scheduled


def can_confirm_handover(status: str, pickup_scheduled: bool, user_handed_over: bool) -> bool:
    return (
        status == ReturnRequestStatus.APPROVED.value
        and pickup_scheduled
        and not user_handed_over
    )
