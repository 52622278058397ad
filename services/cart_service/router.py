"""
Cart endpoints.

The cart key is caller-supplied through `cart_id`; clients that intend to
check out use their user id, which is the key the checkout reads.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db

from .schemas import Cart, CartItemCreate, CartItemUpdate
from .service import CartService, get_cart_service

DEFAULT_CART_ID = "default-cart"

router = APIRouter()

@router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "cart", "status": "running"}


@router.get("/", response_model=Cart)
async def get_cart(
    cart_id: str = Query(default=DEFAULT_CART_ID),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.get_cart(cart_id)


@router.post("/items", response_model=Cart, status_code=201)
async def add_item(
    item: CartItemCreate,
    cart_id: str = Query(default=DEFAULT_CART_ID),
    db: AsyncSession = Depends(get_db),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.add_item(db, cart_id, item.product_id, item.quantity)


@router.patch("/items/{product_id}", response_model=Cart)
async def update_item(
    product_id: int,
    change: CartItemUpdate,
    cart_id: str = Query(default=DEFAULT_CART_ID),
    db: AsyncSession = Depends(get_db),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.update_item_quantity(db, cart_id, product_id, change.quantity)


@router.delete("/items/{product_id}", response_model=Cart)
async def remove_item(
    product_id: int,
    cart_id: str = Query(default=DEFAULT_CART_ID),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.remove_item(cart_id, product_id)


@router.delete("/", response_model=Cart)
async def clear_cart(
    cart_id: str = Query(default=DEFAULT_CART_ID),
    carts: CartService = Depends(get_cart_service),
):
    return await carts.clear_cart(cart_id)
