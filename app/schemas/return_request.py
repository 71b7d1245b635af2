"""Pydantic schemas for return requests."""
from datetime import datetime
from typing import Optional, List, Literal, Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.return_request import ReturnReason, ItemCondition
from app.schemas.base import BaseResponseSchema, BaseCreateSchema, PaginatedResponse


MAX_RETURN_IMAGES = 5


class ReturnRequestCreate(BaseCreateSchema):
    """Customer submission for a return."""
    reason: ReturnReason
    description: str = Field(..., min_length=10, max_length=1000)
    condition: ItemCondition
    images: List[str] = Field(default_factory=list, max_length=MAX_RETURN_IMAGES)
    pickup_address: Optional[Dict[str, Any]] = None


class ReturnDecisionRequest(BaseCreateSchema):
    decision: Literal["approved", "rejected"]
    admin_notes: Optional[str] = Field(None, max_length=1000)


class PickupScheduleRequest(BaseCreateSchema):
    pickup_date: datetime


class ReturnRequestResponse(BaseResponseSchema):
    id: UUID
    request_number: int
    order_id: UUID
    user_id: UUID
    reason: str
    description: str
    condition: str
    images: List[str] = []
    pickup_address: Optional[Dict[str, Any]] = None
    status: str
    stage: str
    admin_notes: Optional[str] = None
    processed_by: Optional[UUID] = None
    processed_at: Optional[datetime] = None
    pickup_scheduled: bool
    pickup_date: Optional[datetime] = None
    user_handed_over: bool
    handed_over_at: Optional[datetime] = None
    requested_at: datetime
    updated_at: datetime


class ReturnRequestListResponse(PaginatedResponse):
    items: List[ReturnRequestResponse]
