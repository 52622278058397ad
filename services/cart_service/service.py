from contextlib import AbstractAsyncContextManager
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from shared.config.settings import TAX_RATE
from shared.errors import InsufficientStockError, NotFoundError, ValidationError
from shared.money import round2
from .repository import CartRepository
from .schemas import Cart, CartItem

logger = structlog.get_logger(__name__)


def calculate_totals(cart: Cart) -> Cart:
    cart.subtotal = round2(sum((item.subtotal for item in cart.items), Decimal("0")))
    cart.tax = round2(cart.subtotal * TAX_RATE)
    cart.total = round2(cart.subtotal + cart.tax)
    cart.item_count = sum(item.quantity for item in cart.items)
    return cart


def _validate_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Invalid quantity")


def _find_item(cart: Cart, product_id: int) -> CartItem | None:
    return next((item for item in cart.items if item.product_id == product_id), None)


class CartService:
    """
    Cart operations over a CartRepository.

    Stock is read live when lines are added or changed but never reserved, so
    a cart that was valid here can still fail at checkout.
    """

    def __init__(self, repository: CartRepository):
        self.repository = repository

    def hold(self, cart_id: str) -> AbstractAsyncContextManager:
        """The cart's lock; hold it to keep the cart unchanged across several steps."""
        return self.repository.lock(cart_id)

    def load(self, cart_id: str) -> Cart:
        return self.repository.get(cart_id) or Cart(id=cart_id)

    async def get_cart(self, cart_id: str) -> Cart:
        return self.load(cart_id)

    async def _get_product(self, db: AsyncSession, product_id: int):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return product

    async def add_item(self, db: AsyncSession, cart_id: str, product_id: int, quantity: int) -> Cart:
        _validate_quantity(quantity)
        async with self.hold(cart_id):
            product = await self._get_product(db, product_id)
            if product.stock < quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for product {product.name}. Available: {product.stock}",
                    product_ids=[product_id],
                )

            cart = self.load(cart_id)
            price = round2(product.price)
            item = _find_item(cart, product_id)
            if item:
                new_quantity = item.quantity + quantity
                if product.stock < new_quantity:
                    raise InsufficientStockError(
                        f"Cannot add {quantity} more of this product. Available stock: {product.stock}",
                        product_ids=[product_id],
                    )
                item.quantity = new_quantity
                item.unit_price = price
                item.product_name = product.name
                item.subtotal = round2(price * new_quantity)
            else:
                cart.items.append(CartItem(
                    product_id=product_id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=price,
                    subtotal=round2(price * quantity),
                ))

            logger.info("cart_item_added", cart_id=cart_id, product_id=product_id, quantity=quantity)
            return self.repository.save(calculate_totals(cart))

    async def update_item_quantity(self, db: AsyncSession, cart_id: str, product_id: int, quantity: int) -> Cart:
        _validate_quantity(quantity)
        async with self.hold(cart_id):
            product = await self._get_product(db, product_id)
            if product.stock < quantity:
                raise InsufficientStockError(
                    f"Insufficient stock for product {product.name}. Available: {product.stock}",
                    product_ids=[product_id],
                )

            cart = self.load(cart_id)
            item = _find_item(cart, product_id)
            if not item:
                raise NotFoundError(f"Product with ID {product_id} not found in cart")

            price = round2(product.price)
            item.quantity = quantity
            item.unit_price = price
            item.subtotal = round2(price * quantity)
            return self.repository.save(calculate_totals(cart))

    async def remove_item(self, cart_id: str, product_id: int) -> Cart:
        async with self.hold(cart_id):
            cart = self.load(cart_id)
            item = _find_item(cart, product_id)
            if not item:
                raise NotFoundError(f"Product with ID {product_id} not found in cart")

            cart.items.remove(item)
            return self.repository.save(calculate_totals(cart))

    async def clear_cart(self, cart_id: str) -> Cart:
        async with self.hold(cart_id):
            return self.clear_held(cart_id)

    def clear_held(self, cart_id: str) -> Cart:
        """Empty the cart; the caller must already hold `hold(cart_id)`."""
        return self.repository.save(Cart(id=cart_id))


cart_service = CartService(CartRepository())


def get_cart_service() -> CartService:
    return cart_service
