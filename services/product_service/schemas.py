from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    name: str
    description: str = ""
    price: Decimal = Field(ge=0, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    image_url: str | None = None
    category_id: int | None = None
    brand_id: int | None = None


class ProductUpdate(BaseModel):
    """Catalog fields only; stock moves through the inventory endpoints."""
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, decimal_places=2)
    image_url: str | None = None
    category_id: int | None = None
    brand_id: int | None = None


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str
    price: Decimal
    stock: int
    image_url: str | None
    category_id: int | None
    brand_id: int | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
