from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShippingAddress(BaseModel):
    name: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str


class PaymentDetails(BaseModel):
    method: str
    # Payments are simulated: the caller decides whether this one goes through
    simulate_success: bool = True


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_details: PaymentDetails


class OrderItemResponse(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    status: OrderStatus
    created_at: datetime
    items: list[OrderItemResponse]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    shipping_address: ShippingAddress

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=order.id,
            user_id=order.user_id,
            status=order.status,
            created_at=order.created_at,
            items=[OrderItemResponse.model_validate(item) for item in order.items],
            subtotal=order.subtotal,
            tax=order.tax,
            shipping=order.shipping,
            total=order.total,
            shipping_address=ShippingAddress(
                name=order.shipping_name,
                street=order.shipping_street,
                city=order.shipping_city,
                state=order.shipping_state,
                zip_code=order.shipping_zip,
                country=order.shipping_country,
            ),
        )
