from decimal import Decimal
from pydantic import BaseModel, Field


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int


class CartItemUpdate(BaseModel):
    quantity: int


class CartItem(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal # price when the line was added or last updated
    subtotal: Decimal


class Cart(BaseModel):
    id: str
    items: list[CartItem] = Field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    item_count: int = 0
