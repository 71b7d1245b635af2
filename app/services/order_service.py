import logging
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Dict, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.order import Order, OrderStatus, OrderStatusHistory
from app.models.user import User
from app.schemas.order import OrderCreate
from app.services.eligibility import assert_can_cancel
from app.services.status_transitions import InvalidTransitionError, validate_order_transition

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    def __init__(self, message: str, details: Dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class OrderService:
    """Order placement, cancellation and admin status changes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== ORDER NUMBER GENERATION ====================

    async def generate_order_number(self) -> str:
        """Generate unique order number: SKY-YYYYMMDD-XXXX"""
        today = datetime.now(timezone.utc).strftime("%Y%m%d")
        prefix = f"SKY-{today}-"

        stmt = select(func.count(Order.id)).where(
            Order.order_number.like(f"{prefix}%")
        )
        count = (await self.db.execute(stmt)).scalar() or 0

        return f"{prefix}{(count + 1):04d}"

    # ==================== READS ====================

    async def get_order(
        self,
        order_id: uuid.UUID,
        include_history: bool = False,
        refresh: bool = False,
    ) -> Order:
        stmt = select(Order).where(Order.id == order_id)
        if include_history:
            stmt = stmt.options(selectinload(Order.status_history))
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)

        order = (await self.db.execute(stmt)).scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError("Order not found", details={"order_id": str(order_id)})
        return order

    async def get_order_for_user(
        self,
        order_id: uuid.UUID,
        user: User,
        include_history: bool = False,
    ) -> Order:
        """Fetch an order visible to `user`; other customers' orders look missing."""
        order = await self.get_order(order_id, include_history=include_history)
        if order.user_id != user.id and not user.is_admin:
            raise OrderNotFoundError("Order not found", details={"order_id": str(order_id)})
        return order

    async def list_orders(
        self,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Order], int, int]:
        """
        Newest first. `user_id` scopes the listing to one customer's orders.
        Returns (items, total, pages).
        """
        conditions = []
        if user_id is not None:
            conditions.append(Order.user_id == user_id)
        if status:
            conditions.append(Order.status == status)

        total = (await self.db.execute(
            select(func.count(Order.id)).where(*conditions)
        )).scalar() or 0

        result = await self.db.execute(
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc())
            .offset((page - 1) * size)
            .limit(size)
        )
        pages = math.ceil(total / size) if total else 1
        return list(result.scalars().all()), total, pages

    # ==================== PLACE ORDER ====================

    async def place_order(self, user: User, data: OrderCreate) -> Order:
        """
        Create a pending order for the user.
        The caller dispatches the newOrder notification once this returns.
        """
        items = [
            {
                "product_id": item.product_id,
                "name": item.name,
                "price": str(item.price),
                "quantity": item.quantity,
            }
            for item in data.items
        ]
        total = sum((item.price * item.quantity for item in data.items), Decimal("0.00"))
        now = datetime.now(timezone.utc)

        try:
            order = Order(
                order_number=await self.generate_order_number(),
                user_id=user.id,
                status=OrderStatus.PENDING.value,
                total_amount=total,
                items=items,
                notes=data.notes,
                created_at=now,
                updated_at=now,
            )
            self.db.add(order)
            await self.db.flush()

            self.db.add(OrderStatusHistory(
                order_id=order.id,
                from_status=None,
                to_status=OrderStatus.PENDING.value,
                changed_by=user.id,
                notes="Order placed",
                created_at=now,
            ))
            await self.db.commit()

        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Database integrity error creating order: {e}")
            raise ValueError("Order creation failed: Invalid data reference")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Database error creating order: {e}")
            raise ValueError("Order creation failed: Database error")

        logger.info(f"Order {order.order_number} placed by {user.email} for {total}")
        return order

    # ==================== STATUS CHANGES ====================

    async def _apply_status(
        self,
        order: Order,
        new_status: str,
        changed_by: Optional[uuid.UUID],
        notes: Optional[str],
    ) -> Order:
        current = order.status
        validate_order_transition(current, new_status)

        now = datetime.now(timezone.utc)
        stmt = (
            update(Order)
            .where(Order.id == order.id, Order.status == current)
            .values(status=new_status, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            latest = await self.get_order(order.id, refresh=True)
            raise InvalidTransitionError(latest.status, new_status, details={"order_id": str(order.id)})

        self.db.add(OrderStatusHistory(
            order_id=order.id,
            from_status=current,
            to_status=new_status,
            changed_by=changed_by,
            notes=notes,
            created_at=now,
        ))
        await self.db.commit()

        logger.info(f"Order {order.order_number} status {current} -> {new_status}")
        return await self.get_order(order.id, refresh=True)

    async def cancel_order(self, order: Order, user: User, reason: str) -> Order:
        """Customer cancellation; only before the order is packed."""
        if order.user_id != user.id and not user.is_admin:
            raise OrderNotFoundError("Order not found", details={"order_id": str(order.id)})
        if not reason or not reason.strip():
            raise ValueError("Cancellation reason is required")

        assert_can_cancel(order)
        return await self._apply_status(
            order,
            OrderStatus.CANCELLED.value,
            changed_by=user.id,
            notes=f"Cancelled by customer: {reason.strip()}",
        )

    async def update_order_status(
        self,
        order_id: uuid.UUID,
        new_status: OrderStatus,
        changed_by: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> Order:
        """Admin status change along the forward transition map."""
        order = await self.get_order(order_id)
        status_value = new_status.value if isinstance(new_status, OrderStatus) else str(new_status)
        return await self._apply_status(order, status_value, changed_by, notes)
