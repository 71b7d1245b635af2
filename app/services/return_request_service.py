"""
Return request lifecycle.

Every transition is a compare-and-set UPDATE guarded on the stored source
state, so two admins acting on the same request cannot both win: the loser
sees zero affected rows and gets an InvalidTransitionError naming the state
the winner left behind.
"""
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Tuple, Dict

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from app.models.order import Order, OrderStatusHistory
from app.models.return_request import ReturnRequest, ReturnRequestStatus
from app.models.user import User
from app.schemas.return_request import ReturnRequestCreate
from app.services.eligibility import assert_can_return
from app.services.status_transitions import (
    InvalidTransitionError,
    DECISIONS,
    PICKUP_SCHEDULED,
    HANDED_OVER,
)

logger = logging.getLogger(__name__)

# Retries when two submissions for the same order race for a request number
MAX_NUMBER_ATTEMPTS = 3


class ReturnRequestNotFoundError(Exception):
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ReturnRequestService:
    """Create return requests and drive them through approval, pickup and hand-over."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== READS ====================

    async def get(self, request_id: uuid.UUID, refresh: bool = False) -> ReturnRequest:
        stmt = select(ReturnRequest).where(ReturnRequest.id == request_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return_request = result.scalar_one_or_none()
        if return_request is None:
            raise ReturnRequestNotFoundError(
                "Return request not found",
                details={"return_request_id": str(request_id)},
            )
        return return_request

    async def list_for_order(self, order_id: uuid.UUID) -> List[ReturnRequest]:
        stmt = (
            select(ReturnRequest)
            .where(ReturnRequest.order_id == order_id)
            .order_by(ReturnRequest.request_number)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_all(
        self,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[ReturnRequest], int, int]:
        """Admin listing, newest first. Returns (items, total, pages)."""
        stmt = select(ReturnRequest)
        count_stmt = select(func.count(ReturnRequest.id))
        if status:
            stmt = stmt.where(ReturnRequest.status == status)
            count_stmt = count_stmt.where(ReturnRequest.status == status)

        total = (await self.db.execute(count_stmt)).scalar() or 0

        stmt = (
            stmt.order_by(ReturnRequest.requested_at.desc())
            .offset((page - 1) * size)
            .limit(size)
        )
        result = await self.db.execute(stmt)
        items = list(result.scalars().all())
        pages = math.ceil(total / size) if total else 1
        return items, total, pages

    # ==================== CREATE ====================

    async def _next_request_number(self, order_id: uuid.UUID) -> int:
        stmt = select(func.count(ReturnRequest.id)).where(ReturnRequest.order_id == order_id)
        count = (await self.db.execute(stmt)).scalar() or 0
        return count + 1

    async def create_return_request(
        self,
        order: Order,
        user: User,
        data: ReturnRequestCreate,
        now: Optional[datetime] = None,
    ) -> ReturnRequest:
        """
        Submit a return for an order.

        Eligibility is re-checked here against the stored order, whatever the
        client showed. Raises EligibilityError when the order is outside the
        return window or in a non-returnable status. The order's history gets
        a note row in the same commit.
        """
        now = now or datetime.now(timezone.utc)
        assert_can_return(order, now)

        # rollback expires loaded instances, keep plain values
        order_id, order_number, order_status = order.id, order.order_number, order.status
        user_id = user.id

        for attempt in range(1, MAX_NUMBER_ATTEMPTS + 1):
            return_request = ReturnRequest(
                request_number=await self._next_request_number(order_id),
                order_id=order_id,
                user_id=user_id,
                reason=data.reason.value,
                description=data.description,
                condition=data.condition.value,
                images=list(data.images),
                pickup_address=data.pickup_address,
                status=ReturnRequestStatus.PENDING.value,
                pickup_scheduled=False,
                user_handed_over=False,
                requested_at=now,
                updated_at=now,
            )
            self.db.add(return_request)
            # Note only; the order keeps its status
            self.db.add(OrderStatusHistory(
                order_id=order_id,
                from_status=order_status,
                to_status=order_status,
                changed_by=user_id,
                notes=f"Return request #{return_request.request_number} submitted: {data.reason.value}",
                created_at=now,
            ))
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                if attempt == MAX_NUMBER_ATTEMPTS:
                    logger.error(f"Could not allocate return request number for order {order_id}: {e}")
                    raise
                logger.warning(f"Return request number collision for order {order_id}, retrying")
                await self.db.refresh(order)
                await self.db.refresh(user)
                continue

            logger.info(
                f"Return request #{return_request.request_number} created for order "
                f"{order_number} ({return_request.reason})"
            )
            return return_request

    # ==================== TRANSITIONS ====================

    async def _compare_and_set(self, request_id: uuid.UUID, requested: str, guard, values: dict) -> ReturnRequest:
        stmt = (
            update(ReturnRequest)
            .where(ReturnRequest.id == request_id, *guard)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 0:
            current = await self.get(request_id, refresh=True)
            logger.info(
                f"Rejected return request transition {current.stage} -> {requested} "
                f"for {request_id}"
            )
            raise InvalidTransitionError(
                current.stage,
                requested,
                details={"return_request_id": str(request_id)},
            )

        await self.db.commit()
        return await self.get(request_id, refresh=True)

    async def decide_return_request(
        self,
        request_id: uuid.UUID,
        decision: str,
        notes: Optional[str] = None,
        decided_by: Optional[uuid.UUID] = None,
    ) -> ReturnRequest:
        """Approve or reject a pending request. Rejection is terminal."""
        if decision not in DECISIONS:
            raise ValueError(f"Unknown decision '{decision}'")

        now = datetime.now(timezone.utc)
        return_request = await self._compare_and_set(
            request_id,
            decision,
            guard=(ReturnRequest.status == ReturnRequestStatus.PENDING.value,),
            values={
                "status": decision,
                "admin_notes": notes,
                "processed_by": decided_by,
                "processed_at": now,
                "updated_at": now,
            },
        )
        logger.info(f"Return request {request_id} {decision}")
        return return_request

    async def schedule_pickup(self, request_id: uuid.UUID, pickup_date: datetime) -> ReturnRequest:
        """Only an approved request without a scheduled pickup can be scheduled."""
        return_request = await self._compare_and_set(
            request_id,
            PICKUP_SCHEDULED,
            guard=(
                ReturnRequest.status == ReturnRequestStatus.APPROVED.value,
                ReturnRequest.pickup_scheduled.is_(False),
            ),
            values={
                "pickup_scheduled": True,
                "pickup_date": pickup_date,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        logger.info(f"Pickup scheduled for return request {request_id} on {pickup_date.isoformat()}")
        return return_request

    async def confirm_handover(self, request_id: uuid.UUID) -> ReturnRequest:
        """
        Customer confirms the item was handed to the pickup partner.
        Does not close the request; refund and receipt happen elsewhere.
        """
        now = datetime.now(timezone.utc)
        return_request = await self._compare_and_set(
            request_id,
            HANDED_OVER,
            guard=(
                ReturnRequest.status == ReturnRequestStatus.APPROVED.value,
                ReturnRequest.pickup_scheduled.is_(True),
                ReturnRequest.user_handed_over.is_(False),
            ),
            values={
                "user_handed_over": True,
                "handed_over_at": now,
                "updated_at": now,
            },
        )
        logger.info(f"Return request {request_id} handed over")
        return return_request
