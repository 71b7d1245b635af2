"""Read-only snapshot of admin notification settings, fetched once per dispatch."""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from app.models.notification_settings import NotificationSettings
from app.models.user import User

logger = logging.getLogger(__name__)


class SettingsUnavailable(Exception):
    """Settings could not be loaded; callers fall back to defaults."""
    pass


@dataclass(frozen=True)
class AdminRecipient:
    id: uuid.UUID
    name: str
    email: str


@dataclass(frozen=True)
class SettingsSnapshot:
    admin_recipients: Tuple[AdminRecipient, ...] = ()
    preferences: Dict[str, bool] = field(default_factory=dict)

    @classmethod
    def defaults(cls) -> "SettingsSnapshot":
        """No recipients, every event enabled."""
        return cls()

    def is_enabled(self, event_type: str) -> bool:
        # Only an explicit False disables an event
        return self.preferences.get(event_type) is not False


class DatabaseSettingsProvider:
    """Loads the settings row and its recipient users in a dedicated session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_snapshot(self) -> SettingsSnapshot:
        try:
            async with self.session_factory() as session:
                row = (await session.execute(
                    select(NotificationSettings).order_by(NotificationSettings.updated_at).limit(1)
                )).scalar_one_or_none()
                if row is None:
                    return SettingsSnapshot.defaults()

                ids = []
                for raw in row.admin_recipient_ids or []:
                    try:
                        ids.append(uuid.UUID(str(raw)))
                    except ValueError:
                        logger.warning(f"Ignoring malformed admin recipient id {raw!r}")

                users = {}
                if ids:
                    result = await session.execute(select(User).where(User.id.in_(ids)))
                    users = {user.id: user for user in result.scalars().all()}

                recipients = tuple(
                    AdminRecipient(id=users[user_id].id, name=users[user_id].name, email=users[user_id].email)
                    for user_id in ids
                    if user_id in users and users[user_id].is_active
                )
                return SettingsSnapshot(
                    admin_recipients=recipients,
                    preferences=dict(row.preferences or {}),
                )
        except SQLAlchemyError as e:
            raise SettingsUnavailable(f"Could not load notification settings: {e}") from e
