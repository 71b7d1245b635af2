"""
Channel adapters: deliver one notification to one recipient.

Adapters hold no per-call state. Each wall delivery opens its own database
session and each email runs in its own worker thread, so concurrent calls
never share anything mutable.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from app.core.realtime import LiveSessionHub, PushError
from app.models.notifications import Notification
from app.services.admin_notifications.resolver import Recipient
from app.services.admin_notifications.templates import render_email
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    EMAIL = "email"
    WALL = "wall"


@dataclass(frozen=True)
class DeliveryOutcome:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "DeliveryOutcome":
        return cls(success=True)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryOutcome":
        return cls(success=False, error=reason)


class ChannelAdapter(ABC):
    """Delivers a single notification to a single recipient."""

    channel: Channel

    def accepts(self, recipient: Recipient) -> bool:
        return True

    @abstractmethod
    async def deliver(self, event_type: str, recipient: Recipient, payload) -> DeliveryOutcome:
        ...


class EmailChannel(ChannelAdapter):
    channel = Channel.EMAIL

    def __init__(self, email_service: EmailService):
        self.email_service = email_service

    async def deliver(self, event_type: str, recipient: Recipient, payload) -> DeliveryOutcome:
        subject, html_content, text_content = render_email(payload)
        # smtplib blocks; keep it off the event loop
        sent, error = await asyncio.to_thread(
            self.email_service.send_email,
            recipient.email,
            subject,
            html_content,
            text_content,
        )
        if sent:
            return DeliveryOutcome.ok()
        return DeliveryOutcome.failed(error or "Email delivery failed")


class WallChannel(ChannelAdapter):
    """Persists an in-app notification, then pushes it to open sessions."""

    channel = Channel.WALL

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hub: Optional[LiveSessionHub] = None,
    ):
        self.session_factory = session_factory
        self.hub = hub

    def accepts(self, recipient: Recipient) -> bool:
        return recipient.has_wall

    async def deliver(self, event_type: str, recipient: Recipient, payload) -> DeliveryOutcome:
        if not recipient.has_wall:
            return DeliveryOutcome.failed("Recipient has no user account for wall notifications")

        wall = payload.wall_message()
        try:
            async with self.session_factory() as session:
                notification = Notification(
                    user_id=recipient.user_id,
                    notification_type=wall.notification_type,
                    priority=wall.priority,
                    title=wall.title,
                    message=wall.message,
                    action_url=wall.action_url,
                    extra_data={"eventType": event_type, **wall.data},
                    is_read=False,
                    created_at=datetime.now(timezone.utc),
                )
                session.add(notification)
                await session.flush()
                message = {
                    "type": "notification",
                    "notification": {
                        "id": str(notification.id),
                        "title": notification.title,
                        "message": notification.message,
                        "actionUrl": notification.action_url,
                        "priority": notification.priority,
                        "data": notification.extra_data,
                        "createdAt": notification.created_at.isoformat(),
                    },
                }
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Could not store wall notification for {recipient.identity}: {e}")
            return DeliveryOutcome.failed(f"Could not store wall notification: {e}")

        if self.hub is not None:
            try:
                await self.hub.push(str(recipient.user_id), message)
            except PushError as e:
                return DeliveryOutcome.failed(str(e))

        return DeliveryOutcome.ok()
