from datetime import datetime, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.repository import ProductRepository
from shared.cache import CacheAside, invalidate_product
from shared.config.settings import LOW_STOCK_THRESHOLD
from shared.errors import NotFoundError, ValidationError
from shared.observability import ecomm_inventory_adjustments_total
from .models import InventoryAudit
from .repository import StockLedger
from .schemas import (
    AuditEntryResponse,
    InventoryAdjustmentResponse,
    InventoryStatusResponse,
    StockAdjustment,
    StockStatus,
)

logger = structlog.get_logger(__name__)

UNSPECIFIED_REASON = "Not specified"
MAX_AUDIT_PAGE = 100


def determine_stock_status(stock: int) -> StockStatus:
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def default_reason(quantity: int) -> str:
    return "Stock increment" if quantity > 0 else "Stock decrement"


def _validate_quantity(quantity) -> None:
    # bool is an int subclass; True is not a stock adjustment
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity == 0:
        raise ValidationError("Invalid adjustment value")


def _validate_page(limit: int, offset: int) -> None:
    if limit <= 0 or limit > MAX_AUDIT_PAGE:
        raise ValidationError("Invalid limit parameter")
    if offset < 0:
        raise ValidationError("Invalid offset parameter")


def _to_adjustment(entry: InventoryAudit) -> InventoryAdjustmentResponse:
    return InventoryAdjustmentResponse(
        product_id=entry.product_id,
        previous_stock=entry.previous_stock,
        new_stock=entry.new_stock,
        adjustment=entry.adjustment,
        status=determine_stock_status(entry.new_stock),
        timestamp=entry.timestamp or datetime.now(timezone.utc),
    )


def _to_audit_entry(entry: InventoryAudit) -> AuditEntryResponse:
    return AuditEntryResponse(
        id=entry.id,
        product_id=entry.product_id,
        previous_stock=entry.previous_stock,
        new_stock=entry.new_stock,
        adjustment=entry.adjustment,
        reason=entry.reason or UNSPECIFIED_REASON,
        timestamp=entry.timestamp,
    )


class InventoryService:

    @staticmethod
    async def get_inventory_status(db: AsyncSession, product_id: int) -> InventoryStatusResponse:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")

        return InventoryStatusResponse(
            product_id=product.id,
            current_stock=product.stock,
            status=determine_stock_status(product.stock),
            last_updated=product.updated_at,
        )

    @staticmethod
    async def adjust_inventory(db: AsyncSession, cache: CacheAside, product_id: int, adjustment: int,
                               reason: str | None = None) -> InventoryAdjustmentResponse:
        results = await InventoryService.batch_adjust_stock(
            db, cache, [StockAdjustment(product_id=product_id, quantity=adjustment, reason=reason)]
        )
        return results[0]

    @staticmethod
    async def increment_stock(db: AsyncSession, cache: CacheAside, product_id: int, quantity: int,
                              reason: str | None = None) -> InventoryAdjustmentResponse:
        if quantity <= 0:
            raise ValidationError("Quantity must be positive for increment operation")
        return await InventoryService.adjust_inventory(db, cache, product_id, quantity, reason)

    @staticmethod
    async def decrement_stock(db: AsyncSession, cache: CacheAside, product_id: int, quantity: int,
                              reason: str | None = None) -> InventoryAdjustmentResponse:
        if quantity <= 0:
            raise ValidationError("Quantity must be positive for decrement operation")
        return await InventoryService.adjust_inventory(db, cache, product_id, -quantity, reason)

    @staticmethod
    async def batch_adjust_stock(db: AsyncSession, cache: CacheAside,
                                 items: list[StockAdjustment]) -> list[InventoryAdjustmentResponse]:
        """
        Apply every line or none of them.

        Missing products and insufficient stock are reported for the whole
        batch in a single error, before anything is written.
        """
        if not items:
            return []

        for item in items:
            _validate_quantity(item.quantity)

        adjustments = [
            item.model_copy(update={"reason": item.reason or default_reason(item.quantity)})
            for item in items
        ]

        try:
            entries = await StockLedger.batch_adjust_stock(db, adjustments)
            products = StockLedger.touched_products(entries)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        for entry in entries:
            direction = "increment" if entry.adjustment > 0 else "decrement"
            ecomm_inventory_adjustments_total.labels(direction=direction).inc()
        logger.info(
            "stock_adjusted",
            lines=len(entries),
            products=sorted({e.product_id for e in entries}),
        )

        await invalidate_product(cache, *products)

        return [_to_adjustment(entry) for entry in entries]

    @staticmethod
    async def get_inventory_audit_history(db: AsyncSession, product_id: int, limit: int = 20,
                                          offset: int = 0) -> list[AuditEntryResponse]:
        _validate_page(limit, offset)
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")

        records = await StockLedger.get_audit_history(db, product_id, limit, offset)
        return [_to_audit_entry(r) for r in records]

    @staticmethod
    async def get_recent_audit_entries(db: AsyncSession, limit: int = 20, offset: int = 0) -> list[AuditEntryResponse]:
        _validate_page(limit, offset)
        records = await StockLedger.get_recent_audit_entries(db, limit, offset)
        return [_to_audit_entry(r) for r in records]
