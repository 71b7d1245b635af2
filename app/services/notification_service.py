"""
Wall Notification Service

Read side of in-app notifications: a user's wall, unread counts and
read markers. Notifications are written by the admin notification
wall channel.
"""
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notifications import Notification

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_notifications(
        self,
        user_id: uuid.UUID,
        unread_only: bool = False,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Notification], int, int]:
        """Newest first. Returns (items, total, pages)."""
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.is_read.is_(False))

        total = (await self.db.execute(
            select(func.count(Notification.id)).where(*conditions)
        )).scalar() or 0

        result = await self.db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc())
            .offset((page - 1) * size)
            .limit(size)
        )
        pages = math.ceil(total / size) if total else 1
        return list(result.scalars().all()), total, pages

    async def get_unread_count(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_as_read(
        self,
        user_id: uuid.UUID,
        notification_ids: List[uuid.UUID],
        mark_all: bool = False,
    ) -> int:
        """Mark the user's own notifications read; returns how many changed."""
        if not mark_all and not notification_ids:
            return 0

        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if not mark_all:
            stmt = stmt.where(Notification.id.in_(notification_ids))

        result = await self.db.execute(stmt)
        await self.db.commit()
        logger.debug(f"Marked {result.rowcount} notification(s) read for user {user_id}")
        return result.rowcount
