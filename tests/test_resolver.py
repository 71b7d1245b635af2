import uuid

from app.services.admin_notifications import AdminRecipient, SettingsSnapshot, resolve_recipients


def admins(count):
    return tuple(
        AdminRecipient(id=uuid.uuid4(), name=f"Admin {i}", email=f"admin{i}@skyelectro.test")
        for i in range(count)
    )


def test_explicit_false_preference_returns_nobody():
    snapshot = SettingsSnapshot(admin_recipients=admins(2), preferences={"returnRequest": False})
    assert resolve_recipients("returnRequest", snapshot, "owner@skyelectro.test") == []


def test_unset_preference_counts_as_enabled():
    snapshot = SettingsSnapshot(admin_recipients=admins(1), preferences={"newOrder": False})
    recipients = resolve_recipients("projectRequest", snapshot, None)
    assert [r.email for r in recipients] == ["admin0@skyelectro.test"]


def test_configured_admins_keep_their_order():
    configured = admins(2)
    recipients = resolve_recipients("newOrder", SettingsSnapshot(admin_recipients=configured), "owner@skyelectro.test")
    assert [r.user_id for r in recipients] == [a.id for a in configured]
    assert all(r.has_wall for r in recipients)
    assert recipients[0].identity == str(configured[0].id)


def test_more_than_two_admins_are_capped():
    configured = admins(3)
    recipients = resolve_recipients("newOrder", SettingsSnapshot(admin_recipients=configured))
    assert [r.user_id for r in recipients] == [configured[0].id, configured[1].id]


def test_fallback_address_is_email_only():
    recipients = resolve_recipients("newOrder", SettingsSnapshot(), "owner@skyelectro.test")
    assert len(recipients) == 1
    assert recipients[0].email == "owner@skyelectro.test"
    assert recipients[0].user_id is None
    assert recipients[0].has_wall is False
    assert recipients[0].identity == "owner@skyelectro.test"


def test_no_admins_and_no_fallback_is_empty():
    assert resolve_recipients("newOrder", SettingsSnapshot(), None) == []
    assert resolve_recipients("newOrder", SettingsSnapshot(), "") == []
