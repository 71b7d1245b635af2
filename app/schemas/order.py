"""Pydantic schemas for orders."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.order import OrderStatus
from app.schemas.base import BaseResponseSchema, BaseCreateSchema, PaginatedResponse


class OrderItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1, le=100)


class OrderCreate(BaseCreateSchema):
    """Checkout payload."""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderCancelRequest(BaseCreateSchema):
    reason: str = Field(..., max_length=500)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Cancellation reason is required")
        return v


class OrderStatusUpdate(BaseCreateSchema):
    """Admin status change."""
    status: OrderStatus
    notes: Optional[str] = Field(None, max_length=500)


class OrderStatusHistoryResponse(BaseResponseSchema):
    from_status: Optional[str] = None
    to_status: str
    changed_by: Optional[UUID] = None
    notes: Optional[str] = None
    created_at: datetime


class OrderResponse(BaseResponseSchema):
    id: UUID
    order_number: str
    user_id: UUID
    status: str
    total_amount: Decimal
    items: List[dict]
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderDetailResponse(OrderResponse):
    status_history: List[OrderStatusHistoryResponse] = []


class EligibilityResponse(BaseModel):
    """Self-service options for an order at the time of the request."""
    order_id: UUID
    status: str
    can_cancel: bool
    can_return: bool
    in_contact_window: bool
    message: Optional[str] = None


class OrderListResponse(PaginatedResponse):
    items: List[OrderResponse]
