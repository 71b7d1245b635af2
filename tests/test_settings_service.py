import uuid

import pytest

from app.models.user import UserRole
from app.schemas.notifications import NotificationSettingsUpdate
from app.services.admin_notifications import DatabaseSettingsProvider
from app.services.settings_service import NotificationSettingsError, NotificationSettingsService

from tests.conftest import create_user


async def test_defaults_enable_every_event(db):
    view = await NotificationSettingsService(db).get_settings_view()
    assert view["admin_recipients"] == []
    assert view["preferences"] == {
        "newOrder": True,
        "returnRequest": True,
        "projectRequest": True,
        "returnHandover": True,
    }


async def test_two_recipients_saved_in_order(db, admin, second_admin):
    service = NotificationSettingsService(db)
    await service.update_settings(
        NotificationSettingsUpdate(admin_recipient_ids=[second_admin.id, admin.id]),
        updated_by=admin.id,
    )

    view = await service.get_settings_view()
    assert [r["email"] for r in view["admin_recipients"]] == [second_admin.email, admin.email]


async def test_third_recipient_rejected_and_nothing_persisted(db, admin, second_admin):
    third = await create_user(db, "Dev Admin", "dev@skyelectro.test", role=UserRole.ADMIN.value)
    service = NotificationSettingsService(db)
    await service.update_settings(NotificationSettingsUpdate(admin_recipient_ids=[admin.id]))

    with pytest.raises(NotificationSettingsError) as exc_info:
        await service.update_settings(
            NotificationSettingsUpdate(
                admin_recipient_ids=[admin.id, second_admin.id, third.id],
                preferences={"newOrder": False},
            )
        )
    assert exc_info.value.details["max"] == 2

    view = await service.get_settings_view()
    assert [r["id"] for r in view["admin_recipients"]] == [admin.id]
    assert view["preferences"]["newOrder"] is True


async def test_non_admin_recipient_rejected(db, admin, customer):
    with pytest.raises(NotificationSettingsError):
        await NotificationSettingsService(db).update_settings(
            NotificationSettingsUpdate(admin_recipient_ids=[admin.id, customer.id])
        )


async def test_unknown_and_duplicate_recipients_rejected(db, admin):
    service = NotificationSettingsService(db)
    with pytest.raises(NotificationSettingsError):
        await service.update_settings(NotificationSettingsUpdate(admin_recipient_ids=[uuid.uuid4()]))
    with pytest.raises(NotificationSettingsError):
        await service.update_settings(NotificationSettingsUpdate(admin_recipient_ids=[admin.id, admin.id]))


async def test_unknown_preference_key_rejected(db):
    with pytest.raises(NotificationSettingsError) as exc_info:
        await NotificationSettingsService(db).update_settings(
            NotificationSettingsUpdate(preferences={"lowStock": True})
        )
    assert exc_info.value.details["event_types"] == ["lowStock"]


async def test_preferences_merge_with_existing(db):
    service = NotificationSettingsService(db)
    await service.update_settings(NotificationSettingsUpdate(preferences={"newOrder": False}))
    await service.update_settings(NotificationSettingsUpdate(preferences={"returnRequest": False}))

    preferences = (await service.get_settings_view())["preferences"]
    assert preferences["newOrder"] is False
    assert preferences["returnRequest"] is False
    assert preferences["projectRequest"] is True


async def test_provider_snapshot_follows_saved_settings(db, session_factory, admin, second_admin):
    await NotificationSettingsService(db).update_settings(
        NotificationSettingsUpdate(
            admin_recipient_ids=[second_admin.id, admin.id],
            preferences={"projectRequest": False},
        )
    )

    snapshot = await DatabaseSettingsProvider(session_factory).get_snapshot()
    assert [r.id for r in snapshot.admin_recipients] == [second_admin.id, admin.id]
    assert snapshot.is_enabled("projectRequest") is False
    assert snapshot.is_enabled("newOrder") is True


async def test_provider_skips_deactivated_admins(db, session_factory, admin, second_admin):
    await NotificationSettingsService(db).update_settings(
        NotificationSettingsUpdate(admin_recipient_ids=[admin.id, second_admin.id])
    )
    second_admin.is_active = False
    await db.commit()

    snapshot = await DatabaseSettingsProvider(session_factory).get_snapshot()
    assert [r.id for r in snapshot.admin_recipients] == [admin.id]


async def test_provider_without_row_returns_defaults(session_factory):
    snapshot = await DatabaseSettingsProvider(session_factory).get_snapshot()
    assert snapshot.admin_recipients == ()
    assert snapshot.is_enabled("newOrder") is True
