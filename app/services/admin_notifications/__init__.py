"""Admin notification fan-out: events, recipients, channels and the dispatcher."""
from app.services.admin_notifications.channels import (
    Channel,
    ChannelAdapter,
    DeliveryOutcome,
    EmailChannel,
    WallChannel,
)
from app.services.admin_notifications.dispatcher import (
    DeliveryRecord,
    DispatchResult,
    NotificationDispatcher,
)
from app.services.admin_notifications.events import (
    EventType,
    NewOrderPayload,
    ProjectRequestPayload,
    ReturnHandoverPayload,
    ReturnRequestPayload,
    WallMessage,
)
from app.services.admin_notifications.resolver import Recipient, resolve_recipients
from app.services.admin_notifications.settings_provider import (
    AdminRecipient,
    DatabaseSettingsProvider,
    SettingsSnapshot,
    SettingsUnavailable,
)

__all__ = [
    "AdminRecipient",
    "Channel",
    "ChannelAdapter",
    "DatabaseSettingsProvider",
    "DeliveryOutcome",
    "DeliveryRecord",
    "DispatchResult",
    "EmailChannel",
    "EventType",
    "NewOrderPayload",
    "NotificationDispatcher",
    "ProjectRequestPayload",
    "Recipient",
    "ReturnHandoverPayload",
    "ReturnRequestPayload",
    "SettingsSnapshot",
    "SettingsUnavailable",
    "WallChannel",
    "WallMessage",
    "resolve_recipients",
]
