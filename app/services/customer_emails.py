"""
Transactional emails to customers: order confirmation, order status
updates, and return request decisions.

Messages are built from ORM objects inside the request, then sent from a
background task. A failed send is logged and never reaches the request
that triggered it.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Tuple

from app.models.order import OrderStatus
from app.models.return_request import ReturnRequestStatus
from app.services.admin_notifications.templates import render_message
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)

CUSTOMER_FOOTER = "Thank you for choosing Sky Electro Tech. Contact our support team with any questions."

STATUS_MESSAGES = {
    OrderStatus.CONFIRMED.value: "Your order has been confirmed and is being processed.",
    OrderStatus.PACKED.value: "Your order has been packed and is ready for shipment.",
    OrderStatus.SHIPPED.value: "Your order has been shipped and is on its way to you.",
    OrderStatus.DELIVERED.value: "Your order has been delivered successfully.",
    OrderStatus.CANCELLED.value: "Your order has been cancelled.",
    OrderStatus.RETURNED.value: "Your returned item has been received.",
}

REASON_LABELS = {
    "defective": "Defective Product",
    "wrong_item": "Wrong Item Received",
    "not_as_described": "Not as Described",
    "quality_issue": "Quality Issue",
    "incompatible": "Product Not Compatible",
    "missing_parts": "Missing Parts/Accessories",
    "changed_mind": "Changed Mind",
    "duplicate_order": "Duplicate Order",
    "other": "Other",
}


@dataclass(frozen=True)
class CustomerEmail:
    to_email: str
    subject: str
    html: str
    text: str


def _build(to_email: str, subject: str, heading: str, intro: str,
           rows: List[Tuple[str, str]], action_path: str) -> CustomerEmail:
    html, text = render_message(
        heading,
        rows,
        action_path,
        intro,
        button_label="View Order",
        footer=CUSTOMER_FOOTER,
    )
    return CustomerEmail(to_email=to_email, subject=subject, html=html, text=text)


def order_confirmation(order, user) -> CustomerEmail:
    rows = [("Order", order.order_number), ("Total", f"₹{order.total_amount}")]
    for item in order.items or []:
        rows.append(("Item", f"{item.get('name')} x {item.get('quantity')}"))
    return _build(
        user.email,
        f"Order Confirmation #{order.order_number} - Sky Electro Tech",
        f"Thank you for your order, {user.name}!",
        "We'll send you updates about your order status. You can also track it in your account.",
        rows,
        f"/orders/{order.id}",
    )


def order_status_update(order, user, new_status: str) -> CustomerEmail:
    new_status = getattr(new_status, "value", new_status)
    return _build(
        user.email,
        f"Order #{order.order_number} Status Update - {new_status.capitalize()}",
        f"Hi {user.name},",
        STATUS_MESSAGES.get(new_status, "Your order status has been updated."),
        [("Order", order.order_number), ("Status", new_status.capitalize()), ("Total", f"₹{order.total_amount}")],
        f"/orders/{order.id}",
    )


def return_decision(return_request, order, user) -> CustomerEmail:
    """Approved or rejected; any other status is a caller error."""
    rows = [
        ("Order", order.order_number),
        ("Return request", f"#{return_request.request_number}"),
        ("Reason", REASON_LABELS.get(return_request.reason, return_request.reason)),
        ("Description", return_request.description),
    ]
    if return_request.admin_notes:
        rows.append(("Admin notes", return_request.admin_notes))

    if return_request.status == ReturnRequestStatus.APPROVED.value:
        return _build(
            user.email,
            f"Return Request Approved - Order {order.order_number}",
            "Return Request Approved",
            f"Dear {user.name}, your return request for order {order.order_number} has been approved. "
            "Schedule a pickup from your order page.",
            rows,
            f"/orders/{order.id}",
        )
    if return_request.status == ReturnRequestStatus.REJECTED.value:
        return _build(
            user.email,
            f"Return Request Status - Order {order.order_number}",
            "Return Request Status",
            f"Dear {user.name}, your return request for order {order.order_number} "
            "could not be approved at this time.",
            rows,
            f"/orders/{order.id}",
        )
    raise ValueError(f"Return request {return_request.id} has no decision yet")


class CustomerMailer:
    """Sends prepared customer emails off the event loop."""

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def send(self, message: CustomerEmail) -> bool:
        try:
            sent, error = await asyncio.to_thread(
                self.email_service.send_email,
                message.to_email,
                message.subject,
                message.html,
                message.text,
            )
        except Exception as e:
            logger.error(f"Customer email '{message.subject}' to {message.to_email} raised: {e}")
            return False

        if not sent:
            logger.warning(f"Customer email '{message.subject}' to {message.to_email} failed: {error}")
        return sent
