"""Admin notification settings: recipient list and per-event preferences."""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification_settings import (
    NotificationSettings,
    MAX_ADMIN_RECIPIENTS,
    NOTIFICATION_EVENT_TYPES,
    default_preferences,
)
from app.models.user import User, UserRole
from app.schemas.notifications import NotificationSettingsUpdate

logger = logging.getLogger(__name__)


class NotificationSettingsError(Exception):
    """Rejected settings update."""
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotificationSettingsService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_settings(self) -> NotificationSettings:
        """Load the settings row, creating the default one on first use."""
        result = await self.db.execute(
            select(NotificationSettings).order_by(NotificationSettings.updated_at).limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = NotificationSettings(admin_recipient_ids=[], preferences=default_preferences())
            self.db.add(row)
            await self.db.flush()
        return row

    async def get_recipient_users(self, row: NotificationSettings) -> List[User]:
        """Recipient users in configured order; ids that no longer resolve are dropped."""
        ids = []
        for raw in row.admin_recipient_ids or []:
            try:
                ids.append(uuid.UUID(str(raw)))
            except ValueError:
                logger.warning(f"Ignoring malformed admin recipient id {raw!r}")
        if not ids:
            return []

        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        by_id = {user.id: user for user in result.scalars().all()}
        return [by_id[user_id] for user_id in ids if user_id in by_id]

    async def get_settings_view(self) -> Dict[str, Any]:
        row = await self.get_settings()
        users = await self.get_recipient_users(row)
        preferences = default_preferences()
        preferences.update(row.preferences or {})
        return {
            "admin_recipients": [
                {"id": user.id, "name": user.name, "email": user.email} for user in users
            ],
            "preferences": preferences,
            "updated_at": row.updated_at,
        }

    async def _validate_recipients(self, recipient_ids: List[uuid.UUID]) -> None:
        if len(recipient_ids) > MAX_ADMIN_RECIPIENTS:
            raise NotificationSettingsError(
                f"At most {MAX_ADMIN_RECIPIENTS} admin recipients can be configured",
                details={"count": len(recipient_ids), "max": MAX_ADMIN_RECIPIENTS},
            )
        if len(set(recipient_ids)) != len(recipient_ids):
            raise NotificationSettingsError("Admin recipients must be unique")
        if not recipient_ids:
            return

        result = await self.db.execute(select(User).where(User.id.in_(recipient_ids)))
        users = {user.id: user for user in result.scalars().all()}

        missing = [str(user_id) for user_id in recipient_ids if user_id not in users]
        if missing:
            raise NotificationSettingsError("Unknown admin recipients", details={"user_ids": missing})

        not_admin = [
            str(user.id) for user in users.values()
            if user.role != UserRole.ADMIN.value or not user.is_active
        ]
        if not_admin:
            raise NotificationSettingsError(
                "Admin recipients must be active admin users",
                details={"user_ids": not_admin},
            )

    def _validate_preferences(self, preferences: Dict[str, bool]) -> None:
        unknown = sorted(set(preferences) - set(NOTIFICATION_EVENT_TYPES))
        if unknown:
            raise NotificationSettingsError(
                "Unknown notification event types",
                details={"event_types": unknown, "allowed": list(NOTIFICATION_EVENT_TYPES)},
            )

    async def update_settings(
        self,
        data: NotificationSettingsUpdate,
        updated_by: Optional[uuid.UUID] = None,
    ) -> NotificationSettings:
        """
        Apply a partial update. Everything is validated before the row is
        touched, so a rejected update leaves the stored settings unchanged.
        """
        if data.admin_recipient_ids is not None:
            await self._validate_recipients(data.admin_recipient_ids)
        if data.preferences is not None:
            self._validate_preferences(data.preferences)

        row = await self.get_settings()
        if data.admin_recipient_ids is not None:
            row.admin_recipient_ids = [str(user_id) for user_id in data.admin_recipient_ids]
        if data.preferences is not None:
            merged = dict(row.preferences or {})
            merged.update(data.preferences)
            row.preferences = merged
        row.updated_by = updated_by
        row.updated_at = datetime.now(timezone.utc)

        await self.db.commit()
        logger.info(
            f"Notification settings updated: {len(row.admin_recipient_ids)} recipient(s), "
            f"preferences={row.preferences}"
        )
        return row
