import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.inventory_service.repository import StockLedger
from services.inventory_service.schemas import StockAdjustment
from shared.cache import CacheAside, invalidate_product
from shared.errors import ConflictError, NotFoundError, UnauthorizedError
from .models import Order
from .repository import OrderRepository
from .schemas import OrderStatus

logger = structlog.get_logger(__name__)

# Orders only move forward, and only out of pending
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def _check_transition(order: Order, target: OrderStatus) -> None:
    current = OrderStatus(order.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ConflictError(f"Order is already {current.value}")


class OrderService:

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str, user_id: str, action: str = "view",
                        for_update: bool = False) -> Order:
        order = await OrderRepository.get_order(db, order_id, for_update=for_update)
        if not order:
            raise NotFoundError("Order not found")
        # Users can only see and change their own orders
        if order.user_id != user_id:
            raise UnauthorizedError(f"Not authorized to {action} this order")
        return order

    @staticmethod
    async def list_orders(db: AsyncSession, user_id: str):
        return await OrderRepository.get_orders_by_user(db, user_id)

    @staticmethod
    async def complete_order(db: AsyncSession, order_id: str, user_id: str) -> Order:
        try:
            order = await OrderService.get_order(db, order_id, user_id, "update", for_update=True)
            _check_transition(order, OrderStatus.COMPLETED)
            order = await OrderRepository.update_status(db, order, OrderStatus.COMPLETED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("order_completed", order_id=order.id)
        return order

    @staticmethod
    async def cancel_order(db: AsyncSession, cache: CacheAside, order_id: str, user_id: str) -> Order:
        """Cancel a pending order and put its items back on the shelf in the same transaction."""
        try:
            order = await OrderService.get_order(db, order_id, user_id, "cancel", for_update=True)
            _check_transition(order, OrderStatus.CANCELLED)
            entries = await StockLedger.batch_adjust_stock(db, [
                StockAdjustment(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    reason=f"Order #{order.id} cancelled",
                )
                for item in order.items
            ])
            products = StockLedger.touched_products(entries)
            order = await OrderRepository.update_status(db, order, OrderStatus.CANCELLED.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await invalidate_product(cache, *products)
        logger.info("order_cancelled", order_id=order.id, restocked_lines=len(entries))
        return order
