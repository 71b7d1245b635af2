"""
Admin notification events.

One frozen payload class per event type. Each payload carries exactly what
its email and wall message need and knows how to build both; the dispatcher
passes payloads through untouched.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional


class EventType(str, Enum):
    """Event types admins can be notified about."""
    NEW_ORDER = "newOrder"
    RETURN_REQUEST = "returnRequest"
    PROJECT_REQUEST = "projectRequest"
    RETURN_HANDOVER = "returnHandover"


@dataclass(frozen=True)
class WallMessage:
    """Shape of an in-app notification."""
    title: str
    message: str
    action_url: str
    data: Dict[str, Any] = field(default_factory=dict)
    notification_type: str = "system"
    priority: str = "high"


@dataclass(frozen=True)
class NewOrderPayload:
    event_type: ClassVar[EventType] = EventType.NEW_ORDER

    order_id: uuid.UUID
    order_number: str
    customer_name: Optional[str]
    customer_email: Optional[str]
    total_amount: Decimal
    items: List[Dict[str, Any]] = field(default_factory=list)
    placed_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order, user) -> "NewOrderPayload":
        return cls(
            order_id=order.id,
            order_number=order.order_number,
            customer_name=user.name if user else None,
            customer_email=user.email if user else None,
            total_amount=Decimal(str(order.total_amount)),
            items=[dict(item) for item in order.items or []],
            placed_at=order.created_at,
        )

    def email_subject(self) -> str:
        return f"New Order Received - {self.order_number}"

    def wall_message(self) -> WallMessage:
        return WallMessage(
            title="New Order Received",
            message=f"Order {self.order_number} has been placed by {self.customer_name or 'Guest'}",
            action_url=f"/admin/orders/{self.order_id}",
            data={
                "orderId": str(self.order_id),
                "orderNumber": self.order_number,
                "customerName": self.customer_name,
                "totalAmount": str(self.total_amount),
            },
        )


@dataclass(frozen=True)
class ReturnRequestPayload:
    event_type: ClassVar[EventType] = EventType.RETURN_REQUEST

    return_request_id: uuid.UUID
    request_number: int
    order_id: uuid.UUID
    order_number: str
    customer_name: Optional[str]
    reason: str
    condition: str
    description: str

    @classmethod
    def from_return_request(cls, return_request, order, user) -> "ReturnRequestPayload":
        return cls(
            return_request_id=return_request.id,
            request_number=return_request.request_number,
            order_id=order.id,
            order_number=order.order_number,
            customer_name=user.name if user else None,
            reason=return_request.reason,
            condition=return_request.condition,
            description=return_request.description,
        )

    def email_subject(self) -> str:
        return f"Return Request Received - Order {self.order_number}"

    def wall_message(self) -> WallMessage:
        return WallMessage(
            title="Return Request Received",
            message=f"Return request for order {self.order_number}",
            action_url=f"/admin/returns/{self.return_request_id}",
            data={
                "returnId": str(self.return_request_id),
                "orderNumber": self.order_number,
                "reason": self.reason,
            },
        )


@dataclass(frozen=True)
class ProjectRequestPayload:
    event_type: ClassVar[EventType] = EventType.PROJECT_REQUEST

    service_request_id: uuid.UUID
    request_number: str
    service_type: str
    title: str
    customer_name: str
    customer_email: str
    phone: Optional[str] = None
    budget: Optional[str] = None
    timeline: Optional[str] = None
    description: str = ""

    @classmethod
    def from_service_request(cls, service_request) -> "ProjectRequestPayload":
        return cls(
            service_request_id=service_request.id,
            request_number=service_request.request_number,
            service_type=service_request.service_type,
            title=service_request.project_type,
            customer_name=service_request.name,
            customer_email=service_request.email,
            phone=service_request.phone,
            budget=service_request.budget,
            timeline=service_request.timeline,
            description=service_request.description,
        )

    def email_subject(self) -> str:
        return f"New Project Request - {self.title}"

    def wall_message(self) -> WallMessage:
        return WallMessage(
            title="New Project Request",
            message=f"Project request: {self.title}",
            action_url=f"/admin/projects/{self.service_request_id}",
            data={
                "projectId": str(self.service_request_id),
                "title": self.title,
                "customerName": self.customer_name,
            },
        )


@dataclass(frozen=True)
class ReturnHandoverPayload:
    event_type: ClassVar[EventType] = EventType.RETURN_HANDOVER

    return_request_id: uuid.UUID
    order_id: uuid.UUID
    order_number: str
    customer_name: Optional[str]
    handed_over_at: datetime
    pickup_date: Optional[datetime] = None

    @classmethod
    def from_return_request(cls, return_request, order, user) -> "ReturnHandoverPayload":
        return cls(
            return_request_id=return_request.id,
            order_id=order.id,
            order_number=order.order_number,
            customer_name=user.name if user else None,
            handed_over_at=return_request.handed_over_at,
            pickup_date=return_request.pickup_date,
        )

    def email_subject(self) -> str:
        return f"Return Item Handed Over - {self.order_number}"

    def wall_message(self) -> WallMessage:
        return WallMessage(
            title="Return Item Handed Over",
            message=(
                "Customer has marked return item as handed over for order "
                f"{self.order_number}"
            ),
            action_url=f"/admin/orders/{self.order_id}",
            data={
                "orderId": str(self.order_id),
                "orderNumber": self.order_number,
                "customerName": self.customer_name,
                "returnRequestId": str(self.return_request_id),
                "handedOverAt": self.handed_over_at.isoformat() if self.handed_over_at else None,
            },
        )


NotificationPayload = (
    NewOrderPayload | ReturnRequestPayload | ProjectRequestPayload | ReturnHandoverPayload
)
