from app.models.user import User, UserRole
from app.models.order import Order, OrderStatus, OrderStatusHistory
from app.models.return_request import ReturnRequest, ReturnRequestStatus, ReturnReason, ItemCondition
from app.models.notifications import Notification, NotificationType, NotificationPriority
from app.models.notification_settings import NotificationSettings
from app.models.service_request import ServiceRequest, ServiceType, ServiceRequestStatus

__all__ = [
    "User",
    "UserRole",
    "Order",
    "OrderStatus",
    "OrderStatusHistory",
    "ReturnRequest",
    "ReturnRequestStatus",
    "ReturnReason",
    "ItemCondition",
    "Notification",
    "NotificationType",
    "NotificationPriority",
    "NotificationSettings",
    "ServiceRequest",
    "ServiceType",
    "ServiceRequestStatus",
]
