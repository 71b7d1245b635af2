"""
Order self-service eligibility.

Pure functions of (order status, last status change time, now) deciding
whether a customer may cancel or return an order, or should be pointed at
support instead. Windows are measured in elapsed wall-clock time, never by
calendar day.

    status            elapsed since updated_at     cancel  return  contact
    pending/confirmed any                          yes     no      no
    shipped/delivered <= 48h                       no      yes     no
    shipped/delivered 48h < t <= 7d                no      no      yes
    anything else, or older than 7d                no      no      no
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Any

from app.config import settings
from app.models.order import OrderStatus


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value})
RETURNABLE_STATUSES = frozenset({OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value})

RETURN_WINDOW = timedelta(hours=settings.RETURN_WINDOW_HOURS)
CONTACT_WINDOW = timedelta(days=settings.SUPPORT_CONTACT_WINDOW_DAYS)


class EligibilityError(Exception):
    """Requested cancel/return action is not allowed for the order right now."""
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


@dataclass(frozen=True)
class EligibilitySummary:
    can_cancel: bool
    can_return: bool
    in_contact_window: bool
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _status_of(order) -> str:
    status = order.status
    return status.value if isinstance(status, OrderStatus) else str(status)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _elapsed(order, now: Optional[datetime]) -> timedelta:
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    return now - _as_utc(order.updated_at)


def can_cancel(order, now: Optional[datetime] = None) -> bool:
    """Only orders that have not started fulfilment can be cancelled."""
    return _status_of(order) in CANCELLABLE_STATUSES


def can_return(order, now: Optional[datetime] = None) -> bool:
    """Shipped/delivered orders can be returned within the return window."""
    if _status_of(order) not in RETURNABLE_STATUSES:
        return False
    return _elapsed(order, now) <= RETURN_WINDOW


def is_in_contact_window(order, now: Optional[datetime] = None) -> bool:
    """Return window lapsed but the support banner is still offered."""
    if _status_of(order) not in RETURNABLE_STATUSES:
        return False
    elapsed = _elapsed(order, now)
    return RETURN_WINDOW < elapsed <= CONTACT_WINDOW


def eligibility_summary(order, now: Optional[datetime] = None) -> EligibilitySummary:
    """All three predicates for one instant, plus the message shown to the customer."""
    now = now or datetime.now(timezone.utc)
    status = _status_of(order)
    cancel = can_cancel(order, now)
    ret = can_return(order, now)
    contact = is_in_contact_window(order, now)

    if cancel:
        message = "This order can be cancelled until it is packed."
    elif ret:
        message = (
            f"This order can be returned within {settings.RETURN_WINDOW_HOURS} hours "
            "of shipment or delivery."
        )
    elif contact:
        message = "Return window closed. Please contact support for help with this order."
    elif status in (OrderStatus.CANCELLED.value, OrderStatus.RETURNED.value):
        message = f"This order has been {status}. No further actions are available."
    elif status in RETURNABLE_STATUSES:
        message = "This order is no longer eligible for return."
    else:
        message = "This order can no longer be cancelled."

    return EligibilitySummary(
        can_cancel=cancel,
        can_return=ret,
        in_contact_window=contact,
        message=message,
    )


def assert_can_cancel(order, now: Optional[datetime] = None) -> None:
    if not can_cancel(order, now):
        raise EligibilityError(
            "This order can no longer be cancelled",
            details={"action": "cancel", "order_status": _status_of(order)},
        )


def assert_can_return(order, now: Optional[datetime] = None) -> None:
    if can_return(order, now):
        return

    status = _status_of(order)
    if is_in_contact_window(order, now):
        message = "Return window has expired. Please contact support"
    elif status in RETURNABLE_STATUSES:
        message = "Return window has expired"
    else:
        message = f"Orders in '{status}' status cannot be returned"

    raise EligibilityError(
        message,
        details={"action": "return", "order_status": status},
    )
