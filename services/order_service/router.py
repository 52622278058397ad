from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from shared.cache import CacheAside
from shared.config.cache import get_cache
from shared.config.database import get_db
from shared.security import get_current_user
from .schemas import OrderResponse
from .service import OrderService

router = APIRouter()

@router.get("/health")
async def health_check():
    return {"service": "order", "status": "running"}

@router.get("/", response_model=list[OrderResponse])
async def list_orders(user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    orders = await OrderService.list_orders(db, user_id)
    return [OrderResponse.from_order(o) for o in orders]

@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    order = await OrderService.get_order(db, order_id, user_id)
    return OrderResponse.from_order(order)

@router.patch("/{order_id}/complete", response_model=OrderResponse)
async def complete_order(order_id: str, user_id: str = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    order = await OrderService.complete_order(db, order_id, user_id)
    return OrderResponse.from_order(order)

@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    order = await OrderService.cancel_order(db, cache, order_id, user_id)
    return OrderResponse.from_order(order)
