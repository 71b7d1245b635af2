# Services module
from app.services.order_service import OrderService
from app.services.return_request_service import ReturnRequestService
from app.services.service_request_service import ServiceRequestService
from app.services.settings_service import NotificationSettingsService
from app.services.notification_service import NotificationService
from app.services.email_service import EmailService

__all__ = [
    "OrderService",
    "ReturnRequestService",
    "ServiceRequestService",
    "NotificationSettingsService",
    "NotificationService",
    "EmailService",
]
