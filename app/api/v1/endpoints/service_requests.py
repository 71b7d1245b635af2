"""Project/service request endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Query, status

from app.api.deps import DB, AdminUser, Dispatcher
from app.models.service_request import ServiceType, ServiceRequestStatus
from app.schemas.service_request import ServiceRequestCreate, ServiceRequestResponse
from app.services.admin_notifications import EventType, ProjectRequestPayload
from app.services.service_request_service import ServiceRequestService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/service-requests", tags=["Service Requests"])


@router.post("", response_model=ServiceRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_service_request(
    data: ServiceRequestCreate,
    db: DB,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
):
    """Public enquiry form for 3D printing, drone services and project building."""
    service_request = await ServiceRequestService(db).submit_service_request(data)

    background_tasks.add_task(
        dispatcher.dispatch_and_log,
        EventType.PROJECT_REQUEST,
        ProjectRequestPayload.from_service_request(service_request),
    )
    return service_request


@router.get("")
async def list_service_requests(
    db: DB,
    admin: AdminUser,
    status_filter: Optional[ServiceRequestStatus] = Query(None, alias="status"),
    service_type: Optional[ServiceType] = None,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    items, total, pages = await ServiceRequestService(db).get_service_requests(
        status=status_filter.value if status_filter else None,
        service_type=service_type.value if service_type else None,
        page=page,
        size=size,
    )
    return {
        "items": [ServiceRequestResponse.model_validate(item) for item in items],
        "total": total,
        "page": page,
        "size": size,
        "pages": pages,
    }
