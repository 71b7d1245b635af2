import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.db_types import JSONType, UUIDType


MAX_ADMIN_RECIPIENTS = 2

# Event types an admin can toggle; anything unset counts as enabled
NOTIFICATION_EVENT_TYPES = ("newOrder", "returnRequest", "projectRequest", "returnHandover")


def default_preferences() -> dict:
    return {event_type: True for event_type in NOTIFICATION_EVENT_TYPES}


class NotificationSettings(Base):
    """
    Admin notification configuration.
    A single row holds the ordered admin recipient list and the per-event
    preference map.
    """
    __tablename__ = "notification_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType,
        primary_key=True,
        default=uuid.uuid4
    )

    # Ordered list of user id strings, at most MAX_ADMIN_RECIPIENTS entries
    admin_recipient_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    preferences: Mapped[dict] = mapped_column(JSONType, nullable=False, default=default_preferences)

    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(UUIDType, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<NotificationSettings(recipients={len(self.admin_recipient_ids or [])})>"
