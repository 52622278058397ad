from datetime import datetime
from enum import Enum
from pydantic import BaseModel


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class StockAdjustment(BaseModel):
    product_id: int
    quantity: int # signed: positive adds stock, negative removes it
    reason: str | None = None


class AdjustmentRequest(BaseModel):
    adjustment: int
    reason: str | None = None


class QuantityRequest(BaseModel):
    quantity: int
    reason: str | None = None


class BatchAdjustmentRequest(BaseModel):
    items: list[StockAdjustment]


class InventoryStatusResponse(BaseModel):
    product_id: int
    current_stock: int
    status: StockStatus
    last_updated: datetime


class InventoryAdjustmentResponse(BaseModel):
    product_id: int
    previous_stock: int
    new_stock: int
    adjustment: int
    status: StockStatus
    timestamp: datetime


class AuditEntryResponse(BaseModel):
    id: int
    product_id: int
    previous_stock: int
    new_stock: int
    adjustment: int
    reason: str
    timestamp: datetime
