from fastapi import APIRouter

from app.api.v1.endpoints import (
    # Orders & returns
    orders,
    returns,
    # Service / project requests
    service_requests,
    # Admin notifications
    settings,
    notifications,
)


api_router = APIRouter(prefix="/api/v1")

api_router.include_router(orders.router)
api_router.include_router(returns.router)
api_router.include_router(service_requests.router)
api_router.include_router(settings.router)
api_router.include_router(notifications.router)
