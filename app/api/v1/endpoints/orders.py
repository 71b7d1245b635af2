"""
Order API Endpoints

Checkout, order listings and details, self-service eligibility, customer
cancellation, admin status changes and return request submission.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Query, status

from app.api.deps import DB, CurrentUser, AdminUser, Dispatcher, Mailer
from app.models.order import OrderStatus
from app.models.user import User
from app.schemas.order import (
    OrderCreate,
    OrderCancelRequest,
    OrderStatusUpdate,
    OrderResponse,
    OrderDetailResponse,
    OrderListResponse,
    EligibilityResponse,
)
from app.schemas.return_request import ReturnRequestCreate, ReturnRequestResponse
from app.services import customer_emails
from app.services.admin_notifications import EventType, NewOrderPayload, ReturnRequestPayload
from app.services.eligibility import eligibility_summary
from app.services.order_service import OrderService
from app.services.return_request_service import ReturnRequestService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    data: OrderCreate,
    db: DB,
    current_user: CurrentUser,
    dispatcher: Dispatcher,
    mailer: Mailer,
    background_tasks: BackgroundTasks,
):
    """Place an order. Admins are notified and the customer gets a confirmation after the order is stored."""
    order = await OrderService(db).place_order(current_user, data)

    background_tasks.add_task(
        dispatcher.dispatch_and_log,
        EventType.NEW_ORDER,
        NewOrderPayload.from_order(order, current_user),
    )
    background_tasks.add_task(mailer.send, customer_emails.order_confirmation(order, current_user))
    return order


@router.get("", response_model=OrderListResponse)
async def list_orders(
    db: DB,
    admin: AdminUser,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    """All orders, newest first (admin)."""
    items, total, pages = await OrderService(db).list_orders(
        status=status_filter.value if status_filter else None,
        page=page,
        size=size,
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        size=size,
        pages=pages,
    )


@router.get("/my-orders", response_model=OrderListResponse)
async def list_my_orders(
    db: DB,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    items, total, pages = await OrderService(db).list_orders(
        user_id=current_user.id,
        page=page,
        size=size,
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        size=size,
        pages=pages,
    )


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: uuid.UUID, db: DB, current_user: CurrentUser):
    return await OrderService(db).get_order_for_user(order_id, current_user, include_history=True)


@router.get("/{order_id}/eligibility", response_model=EligibilityResponse)
async def get_order_eligibility(order_id: uuid.UUID, db: DB, current_user: CurrentUser):
    """Which self-service actions the customer can take right now."""
    order = await OrderService(db).get_order_for_user(order_id, current_user)
    summary = eligibility_summary(order)
    return EligibilityResponse(
        order_id=order.id,
        status=order.status,
        **summary.to_dict(),
    )


@router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    data: OrderCancelRequest,
    db: DB,
    current_user: CurrentUser,
):
    service = OrderService(db)
    order = await service.get_order_for_user(order_id, current_user)
    return await service.cancel_order(order, current_user, data.reason)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    data: OrderStatusUpdate,
    db: DB,
    admin: AdminUser,
    mailer: Mailer,
    background_tasks: BackgroundTasks,
):
    """
    Admin status change; the customer is emailed the new status.
    Marking an order returned is separate from return request approval.
    """
    order = await OrderService(db).update_order_status(
        order_id,
        data.status,
        changed_by=admin.id,
        notes=data.notes,
    )

    customer = await db.get(User, order.user_id)
    if customer is not None:
        background_tasks.add_task(
            mailer.send,
            customer_emails.order_status_update(order, customer, order.status),
        )
    return order


# ==================== Return Requests ====================

@router.post(
    "/{order_id}/return-requests",
    response_model=ReturnRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_return_request(
    order_id: uuid.UUID,
    data: ReturnRequestCreate,
    db: DB,
    current_user: CurrentUser,
    dispatcher: Dispatcher,
    background_tasks: BackgroundTasks,
):
    order = await OrderService(db).get_order_for_user(order_id, current_user)
    return_request = await ReturnRequestService(db).create_return_request(order, current_user, data)

    background_tasks.add_task(
        dispatcher.dispatch_and_log,
        EventType.RETURN_REQUEST,
        ReturnRequestPayload.from_return_request(return_request, order, current_user),
    )
    return return_request


@router.get("/{order_id}/return-requests", response_model=List[ReturnRequestResponse])
async def list_order_return_requests(order_id: uuid.UUID, db: DB, current_user: CurrentUser):
    order = await OrderService(db).get_order_for_user(order_id, current_user)
    return await ReturnRequestService(db).list_for_order(order.id)
