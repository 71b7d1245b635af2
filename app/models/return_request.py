"""
Return request model.

A return request is a customer-initiated sub-entity of an order. An order may
carry several of them (partial or repeat returns); each one moves through its
own lifecycle:

    pending -> approved -> pickup scheduled -> handed over
    pending -> rejected
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, List

from sqlalchemy import String, Integer, Text, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.db_types import JSONType, UUIDType

if TYPE_CHECKING:
    from app.models.order import Order
    from app.models.user import User


class ReturnRequestStatus(str, Enum):
    """Return request decision status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReturnReason(str, Enum):
    """Reasons a customer may give for a return."""
    DEFECTIVE = "defective"
    WRONG_ITEM = "wrong_item"
    NOT_AS_DESCRIBED = "not_as_described"
    QUALITY_ISSUE = "quality_issue"
    INCOMPATIBLE = "incompatible"
    MISSING_PARTS = "missing_parts"
    CHANGED_MIND = "changed_mind"
    DUPLICATE_ORDER = "duplicate_order"
    OTHER = "other"


class ItemCondition(str, Enum):
    """Declared condition of the item being returned."""
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ReturnRequest(Base):
    """Customer return request scoped to a single order."""
    __tablename__ = "return_requests"
    __table_args__ = (
        UniqueConstraint('order_id', 'request_number', name='uq_return_request_order_number'),
        Index('ix_return_request_status_requested', 'status', 'requested_at'),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Sequence within the parent order, starting at 1
    request_number: Mapped[int] = mapped_column(Integer, nullable=False)

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )

    # Customer submission
    reason: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        comment="defective, wrong_item, not_as_described, quality_issue, incompatible, "
                "missing_parts, changed_mind, duplicate_order, other"
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    condition: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="good, fair, poor"
    )
    # Evidence image URLs, 0-5 entries
    images: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    pickup_address: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    # Admin decision
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReturnRequestStatus.PENDING.value,
        index=True
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Pickup / hand-over
    pickup_scheduled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pickup_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    user_handed_over: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    handed_over_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    order: Mapped["Order"] = relationship("Order", back_populates="return_requests")
    user: Mapped["User"] = relationship("User")

    @property
    def stage(self) -> str:
        """Lifecycle stage combining status and pickup flags."""
        if self.status != ReturnRequestStatus.APPROVED.value:
            return self.status
        if self.user_handed_over:
            return "handed_over"
        if self.pickup_scheduled:
            return "pickup_scheduled"
        return "approved"

    def __repr__(self) -> str:
        return f"<ReturnRequest(order_id='{self.order_id}', number={self.request_number}, status='{self.status}')>"
