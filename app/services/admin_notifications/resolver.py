"""Turns a settings snapshot and an event type into the list of people to notify."""
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

from app.models.notification_settings import MAX_ADMIN_RECIPIENTS
from app.services.admin_notifications.settings_provider import SettingsSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipient:
    """
    Someone to notify. `user_id` is None for the environment fallback
    address, which can only be reached by email.
    """
    email: str
    name: str
    user_id: Optional[uuid.UUID] = None

    @property
    def identity(self) -> str:
        return str(self.user_id) if self.user_id else self.email

    @property
    def has_wall(self) -> bool:
        return self.user_id is not None


def resolve_recipients(
    event_type: str,
    snapshot: SettingsSnapshot,
    fallback_email: Optional[str] = None,
) -> List[Recipient]:
    """
    1. An explicit False preference for the event means nobody.
    2. Otherwise the configured admins, at most MAX_ADMIN_RECIPIENTS.
    3. With no admins configured, the fallback address alone (email only).
    4. With no fallback address either, nobody.
    """
    if not snapshot.is_enabled(event_type):
        logger.info(f"Admin notifications for {event_type} are disabled")
        return []

    admins = list(snapshot.admin_recipients)
    if len(admins) > MAX_ADMIN_RECIPIENTS:
        logger.warning(
            f"{len(admins)} admin recipients configured, only the first "
            f"{MAX_ADMIN_RECIPIENTS} will be notified"
        )
        admins = admins[:MAX_ADMIN_RECIPIENTS]

    if admins:
        return [Recipient(email=admin.email, name=admin.name, user_id=admin.id) for admin in admins]

    if fallback_email:
        logger.info(f"No admin recipients configured, using fallback address for {event_type}")
        return [Recipient(email=fallback_email, name="Admin")]

    logger.info(f"No admin recipients or fallback address for {event_type}")
    return []
