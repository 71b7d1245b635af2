"""
Wall Notification API Endpoints

A user's in-app notifications, read markers, and the WebSocket that
receives live pushes.
"""

import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from app.api.deps import DB, CurrentUser, get_user_from_token
from app.schemas.notifications import (
    NotificationResponse,
    NotificationListResponse,
    NotificationMarkRead,
    UnreadCountResponse,
)
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/my", response_model=NotificationListResponse)
async def get_my_notifications(
    db: DB,
    current_user: CurrentUser,
    unread_only: bool = False,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
):
    service = NotificationService(db)
    items, total, pages = await service.get_user_notifications(
        current_user.id,
        unread_only=unread_only,
        page=page,
        size=size,
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(item) for item in items],
        total=total,
        unread_count=await service.get_unread_count(current_user.id),
        page=page,
        size=size,
        pages=pages,
    )


@router.get("/my/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(db: DB, current_user: CurrentUser):
    return UnreadCountResponse(unread_count=await NotificationService(db).get_unread_count(current_user.id))


@router.put("/mark-read")
async def mark_notifications_read(data: NotificationMarkRead, db: DB, current_user: CurrentUser):
    updated = await NotificationService(db).mark_as_read(
        current_user.id,
        data.notification_ids,
        mark_all=data.mark_all,
    )
    return {"updated": updated}


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket):
    """
    Live wall notifications. Authenticate with ?token=<access token>.

    The database session used for authentication is closed before the
    socket is accepted; the connection holds no session while it is open.
    """
    token = websocket.query_params.get("token")
    user = None
    if token:
        async with websocket.app.state.session_factory() as session:
            user = await get_user_from_token(session, token)
    if user is None or not user.is_active:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = str(user.id)
    hub = websocket.app.state.live_sessions
    await websocket.accept()
    hub.connect(user_id, websocket)
    try:
        await websocket.send_json({"type": "connected", "userId": user_id})
        while True:
            text = await websocket.receive_text()
            if text == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.debug(f"Live session closed for user {user_id}")
    finally:
        hub.disconnect(user_id, websocket)
