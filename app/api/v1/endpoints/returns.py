"""
Return Request API Endpoints

Admin review of return requests, plus the customer pickup and hand-over
confirmations. Listing and creation scoped to one order live under /orders.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, status

from app.api.deps import DB, CurrentUser, AdminUser, Dispatcher, Mailer
from app.models.return_request import ReturnRequest, ReturnRequestStatus
from app.models.user import User
from app.schemas.return_request import (
    ReturnDecisionRequest,
    PickupScheduleRequest,
    ReturnRequestResponse,
    ReturnRequestListResponse,
)
from app.services import customer_emails
from app.services.admin_notifications import EventType, ReturnHandoverPayload
from app.services.order_service import OrderService
from app.services.return_request_service import ReturnRequestService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/returns", tags=["Returns"])


# ==================== Helper Functions ====================

def ensure_return_access(return_request: ReturnRequest, user: User) -> None:
    """Customers only see their own requests; the request looks missing otherwise."""
    if return_request.user_id != user.id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Return request not found"
        )


# ==================== Endpoints ====================

@router.get("", response_model=ReturnRequestListResponse)
async def list_return_requests(
    db: DB,
    admin: AdminUser,
    status_filter: Optional[ReturnRequestStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    items, total, pages = await ReturnRequestService(db).list_all(
        status=status_filter.value if status_filter else None,
        page=page,
        size=size,
    )
    return ReturnRequestListResponse(
        items=[ReturnRequestResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        size=size,
        pages=pages,
    )


@router.get("/{request_id}", response_model=ReturnRequestResponse)
async def get_return_request(request_id: uuid.UUID, db: DB, current_user: CurrentUser):
    return_request = await ReturnRequestService(db).get(request_id)
    ensure_return_access(return_request, current_user)
    return return_request


@router.put("/{request_id}/decision", response_model=ReturnRequestResponse)
async def decide_return_request(
    request_id: uuid.UUID,
    data: ReturnDecisionRequest,
    db: DB,
    admin: AdminUser,
    mailer: Mailer,
    background_tasks: BackgroundTasks,
):
    """
    Approve or reject a pending request and email the customer the outcome.
    The parent order's status is not changed.
    """
    return_request = await ReturnRequestService(db).decide_return_request(
        request_id,
        data.decision,
        notes=data.admin_notes,
        decided_by=admin.id,
    )

    order = await OrderService(db).get_order(return_request.order_id)
    customer = await db.get(User, return_request.user_id)
    if customer is not None:
        background_tasks.add_task(
            mailer.send,
            customer_emails.return_decision(return_request, order, customer),
        )
    return return_request


@router.put("/{request_id}/pickup", response_model=ReturnRequestResponse)
async def schedule_pickup(
    request_id: uuid.UUID,
    data: PickupScheduleRequest,
    db: DB,
    current_user: CurrentUser,
):
    service = ReturnRequestService(db)
    ensure_return_access(await service.get(request_id), current_user)
    return await service.schedule_pickup(request_id, data.pickup_date)


@router.put("/{request_id}/handover", response_model=ReturnRequestResponse)
async def confirm_handover(
    request_id: uuid.UUID,
    db: DB,
    current_user: CurrentUser,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
):
    """Customer confirms the item was handed to the pickup partner; admins are notified."""
    service = ReturnRequestService(db)
    ensure_return_access(await service.get(request_id), current_user)
    return_request = await service.confirm_handover(request_id)

    order = await OrderService(db).get_order(return_request.order_id)
    customer = await db.get(User, return_request.user_id)
    background_tasks.add_task(
        dispatcher.dispatch_and_log,
        EventType.RETURN_HANDOVER,
        ReturnHandoverPayload.from_return_request(return_request, order, customer),
    )
    return return_request
