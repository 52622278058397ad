import time

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.cart_service.service import CartService
from services.order_service.models import Order
from services.order_service.schemas import CheckoutRequest
from shared.cache import CacheAside, invalidate_product
from shared.observability import ecomm_checkout_duration_seconds, ecomm_checkout_total
from .checkout_saga import build_checkout_saga

logger = structlog.get_logger(__name__)


class CheckoutService:

    @staticmethod
    async def checkout(db: AsyncSession, cache: CacheAside, carts: CartService, user_id: str,
                       request: CheckoutRequest) -> Order:
        """
        Turn the user's cart into a pending order.

        The cart is keyed by the user id and stays locked for the whole run,
        so items added mid-checkout are neither lost nor silently ordered.
        """
        saga = build_checkout_saga()
        ctx = {
            "db": db,
            "carts": carts,
            "user_id": user_id,
            "shipping_address": request.shipping_address,
            "payment_details": request.payment_details,
        }
        started = time.perf_counter()
        try:
            async with carts.hold(user_id):
                await saga.execute(ctx)
        except Exception:
            await db.rollback()
            ecomm_checkout_total.labels(status="failed").inc()
            logger.warning("checkout_failed", user_id=user_id, reached=saga.state)
            raise
        finally:
            ecomm_checkout_duration_seconds.observe(time.perf_counter() - started)

        ecomm_checkout_total.labels(status="success").inc()
        order = ctx["order"]
        logger.info("checkout_completed", user_id=user_id, order_id=order.id, total=str(order.total))

        await invalidate_product(cache, *ctx["touched_products"])
        return order
