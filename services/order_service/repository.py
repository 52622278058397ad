from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from .models import Order

class OrderRepository:
    """Orders are written inside the caller's transaction; the caller commits."""

    @staticmethod
    async def create_order(db: AsyncSession, order: Order):
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str, for_update: bool = False):
        stmt = select(Order).where(Order.id == order_id)
        if for_update:
            # Status changes must not race each other
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def get_orders_by_user(db: AsyncSession, user_id: str):
        result = await db.execute(
            select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def update_status(db: AsyncSession, order: Order, status: str):
        order.status = status
        await db.flush()
        return order
