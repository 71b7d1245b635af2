"""Pydantic schemas for wall notifications and admin notification settings."""
from datetime import datetime
from typing import Optional, List, Dict, Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import BaseResponseSchema, BaseCreateSchema, PaginatedResponse


# ==================== Wall Notification Schemas ====================

class NotificationResponse(BaseResponseSchema):
    """Response schema for a wall notification."""
    id: UUID
    user_id: UUID
    notification_type: str
    priority: str
    title: str
    message: str
    action_url: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None
    is_read: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationListResponse(PaginatedResponse):
    items: List[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class NotificationMarkRead(BaseModel):
    """Mark specific notifications, or all of them, as read."""
    notification_ids: List[UUID] = Field(default_factory=list)
    mark_all: bool = False


# ==================== Notification Settings Schemas ====================

class AdminRecipientResponse(BaseModel):
    id: UUID
    name: str
    email: str


class NotificationSettingsResponse(BaseModel):
    admin_recipients: List[AdminRecipientResponse]
    preferences: Dict[str, bool]
    updated_at: Optional[datetime] = None


class NotificationSettingsUpdate(BaseCreateSchema):
    """
    Partial update. Omitted fields are left unchanged; the recipient list is
    replaced wholesale when given.
    """
    admin_recipient_ids: Optional[List[UUID]] = None
    preferences: Optional[Dict[str, bool]] = None
