from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.cart_service.service import CartService, get_cart_service
from services.order_service.schemas import CheckoutRequest, OrderResponse
from shared.cache import CacheAside
from shared.config.cache import get_cache
from shared.config.database import get_db
from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.security import get_current_user, limiter
from .service import CheckoutService

router = APIRouter()

@router.get("/health")
async def health_check():
    return {"service": "checkout", "status": "running"}

@router.post("/", response_model=OrderResponse, status_code=201)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def checkout(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: CheckoutRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
    carts: CartService = Depends(get_cart_service),
):
    order = await CheckoutService.checkout(db, cache, carts, user_id, payload)
    return OrderResponse.from_order(order)
