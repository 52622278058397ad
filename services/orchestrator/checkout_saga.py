"""
Checkout saga: cart -> order.

    CartValidated -> StockChecked -> PaymentSimulated -> OrderPersisted
        -> InventoryDecremented -> CartCleared -> Done

The order insert and the stock decrement share one database transaction and
commit together. If the stock ledger rejects the decrement (another checkout
took the last units after StockChecked), the OrderPersisted compensation rolls
the transaction back, so there is never an order without its stock deduction.
"""
import asyncio
import logging
import uuid
from decimal import Decimal
from enum import Enum

from services.inventory_service.repository import StockLedger
from services.inventory_service.schemas import StockAdjustment
from services.order_service.models import Order, OrderItem
from services.order_service.repository import OrderRepository
from services.order_service.schemas import OrderStatus
from services.product_service.repository import ProductRepository
from shared.config.settings import (
    FREE_SHIPPING_THRESHOLD,
    PAYMENT_SIMULATION_DELAY,
    SHIPPING_FLAT_FEE,
    TAX_RATE,
)
from shared.errors import CartEmptyError, InsufficientStockError, NotFoundError, PaymentFailedError
from shared.money import round2
from .saga import SagaOrchestrator

logger = logging.getLogger(__name__)


class CheckoutState(str, Enum):
    CART_VALIDATED = "CartValidated"
    STOCK_CHECKED = "StockChecked"
    PAYMENT_SIMULATED = "PaymentSimulated"
    ORDER_PERSISTED = "OrderPersisted"
    INVENTORY_DECREMENTED = "InventoryDecremented"
    CART_CLEARED = "CartCleared"


def price_order(subtotal: Decimal) -> dict:
    subtotal = round2(subtotal)
    tax = round2(subtotal * TAX_RATE)
    shipping = Decimal("0.00") if subtotal >= FREE_SHIPPING_THRESHOLD else round2(SHIPPING_FLAT_FEE)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "shipping": shipping,
        "total": round2(subtotal + tax + shipping),
    }


# --- ACTIONS ---

async def validate_cart(ctx: dict):
    cart = ctx["carts"].load(ctx["user_id"])
    if not cart.items:
        raise CartEmptyError("Cannot checkout with an empty cart")
    ctx["cart"] = cart

async def check_stock(ctx: dict):
    db, cart = ctx["db"], ctx["cart"]
    products = {
        p.id: p for p in await ProductRepository.get_products_by_ids(db, [i.product_id for i in cart.items])
    }

    missing = [i.product_id for i in cart.items if i.product_id not in products]
    if missing:
        raise NotFoundError(f"Products not found: {', '.join(str(pid) for pid in missing)}")

    short = [i for i in cart.items if products[i.product_id].stock < i.quantity]
    if short:
        details = "; ".join(
            f"{products[i.product_id].name} (ID {i.product_id}) requested: {i.quantity}, "
            f"available: {products[i.product_id].stock}"
            for i in short
        )
        raise InsufficientStockError(
            f"Insufficient stock for products: {details}",
            product_ids=[i.product_id for i in short],
        )

async def simulate_payment(ctx: dict):
    ctx["pricing"] = price_order(sum((i.subtotal for i in ctx["cart"].items), Decimal("0")))
    await asyncio.sleep(PAYMENT_SIMULATION_DELAY)
    if not ctx["payment_details"].simulate_success:
        raise PaymentFailedError("Payment was declined")
    ctx["transaction_id"] = str(uuid.uuid4())

async def persist_order(ctx: dict):
    cart, pricing, address = ctx["cart"], ctx["pricing"], ctx["shipping_address"]
    order = Order(
        id=str(uuid.uuid4()),
        user_id=ctx["user_id"],
        status=OrderStatus.PENDING.value,
        shipping_name=address.name,
        shipping_street=address.street,
        shipping_city=address.city,
        shipping_state=address.state,
        shipping_zip=address.zip_code,
        shipping_country=address.country,
        items=[
            OrderItem(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for line in cart.items
        ],
        **pricing,
    )
    ctx["order"] = await OrderRepository.create_order(ctx["db"], order)

async def decrement_inventory(ctx: dict):
    db, order = ctx["db"], ctx["order"]
    entries = await StockLedger.batch_adjust_stock(db, [
        StockAdjustment(product_id=item.product_id, quantity=-item.quantity, reason=f"Order #{order.id}")
        for item in order.items
    ])
    ctx["touched_products"] = StockLedger.touched_products(entries)
    await db.commit()

async def clear_cart(ctx: dict):
    # The checkout holds the cart lock for its whole run
    ctx["carts"].clear_held(ctx["user_id"])


# --- COMPENSATIONS (Rollbacks) ---

async def refund_payment(ctx: dict):
    tx_id = ctx.get("transaction_id")
    if tx_id:
        logger.info(f"Logging Refund Intent for Transaction: {tx_id}")

async def rollback_order(ctx: dict):
    await ctx["db"].rollback()
    ctx.pop("order", None)


# --- BUILDER FACTORY ---

def build_checkout_saga() -> SagaOrchestrator:
    saga = SagaOrchestrator()
    saga.add_step(CheckoutState.CART_VALIDATED.value, validate_cart, None)
    saga.add_step(CheckoutState.STOCK_CHECKED.value, check_stock, None) # Read-only, no rollback needed
    saga.add_step(CheckoutState.PAYMENT_SIMULATED.value, simulate_payment, refund_payment)
    saga.add_step(CheckoutState.ORDER_PERSISTED.value, persist_order, rollback_order)
    saga.add_step(CheckoutState.INVENTORY_DECREMENTED.value, decrement_inventory, None)
    saga.add_step(CheckoutState.CART_CLEARED.value, clear_cart, None)
    return saga
