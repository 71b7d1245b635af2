"""Admin notification settings endpoints."""

import logging

from fastapi import APIRouter

from app.api.deps import DB, AdminUser
from app.schemas.notifications import NotificationSettingsResponse, NotificationSettingsUpdate
from app.services.settings_service import NotificationSettingsService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/notifications", response_model=NotificationSettingsResponse)
async def get_notification_settings(db: DB, admin: AdminUser):
    return await NotificationSettingsService(db).get_settings_view()


@router.put("/notifications", response_model=NotificationSettingsResponse)
async def update_notification_settings(
    data: NotificationSettingsUpdate,
    db: DB,
    admin: AdminUser,
):
    """
    Replace the admin recipient list (max 2 active admins) and/or merge
    per-event preferences.
    """
    service = NotificationSettingsService(db)
    await service.update_settings(data, updated_by=admin.id)
    return await service.get_settings_view()
