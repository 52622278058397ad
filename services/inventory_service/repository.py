"""
Stock ledger: the only code that writes `products.stock`.

Every method runs inside the caller's transaction and never commits. Writes
happen in two phases: the referenced product rows are locked (`FOR UPDATE`,
in id order so concurrent batches cannot deadlock each other) and every line
is checked against that locked snapshot; only when all lines pass are the new
stock values and their audit rows written.
"""
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.models import Product
from shared.errors import InsufficientStockError, NotFoundError
from .models import InventoryAudit
from .schemas import StockAdjustment


class StockLedger:

    @staticmethod
    async def get_stock(db: AsyncSession, product_id: int) -> int:
        result = await db.execute(select(Product.stock).where(Product.id == product_id))
        stock = result.scalar_one_or_none()
        if stock is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return stock

    @staticmethod
    async def lock_products(db: AsyncSession, product_ids: Iterable[int]) -> dict[int, Product]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        result = await db.execute(
            select(Product)
            .where(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            # Rows already loaded by this session must be re-read under the lock
            .execution_options(populate_existing=True)
        )
        return {p.id: p for p in result.scalars().all()}

    @staticmethod
    async def adjust_stock(db: AsyncSession, product_id: int, delta: int, reason: str | None = None) -> InventoryAudit:
        entries = await StockLedger.batch_adjust_stock(
            db, [StockAdjustment(product_id=product_id, quantity=delta, reason=reason)]
        )
        return entries[0]

    @staticmethod
    async def batch_adjust_stock(db: AsyncSession, adjustments: list[StockAdjustment]) -> list[InventoryAudit]:
        if not adjustments:
            return []

        # Phase 1: lock and validate
        products = await StockLedger.lock_products(db, (a.product_id for a in adjustments))

        missing = sorted({a.product_id for a in adjustments if a.product_id not in products})
        if missing:
            raise NotFoundError(f"Products not found: {', '.join(str(i) for i in missing)}")

        projected = {pid: p.stock for pid, p in products.items()}
        shortfalls: dict[int, tuple[int, int]] = {}
        for adjustment in adjustments:
            pid = adjustment.product_id
            new_stock = projected[pid] + adjustment.quantity
            if new_stock < 0:
                shortfalls.setdefault(pid, (-adjustment.quantity, projected[pid]))
            else:
                projected[pid] = new_stock

        if shortfalls:
            details = "; ".join(
                f"{products[pid].name} (ID {pid}) required: {required}, available: {available}"
                for pid, (required, available) in sorted(shortfalls.items())
            )
            raise InsufficientStockError(
                f"Insufficient stock for products: {details}",
                product_ids=sorted(shortfalls),
            )

        # Phase 2: apply
        entries = []
        for adjustment in adjustments:
            product = products[adjustment.product_id]
            previous_stock = product.stock
            product.stock = previous_stock + adjustment.quantity
            entries.append(
                StockLedger.record_audit(db, product, previous_stock, adjustment.quantity, adjustment.reason)
            )

        await db.flush()
        return entries

    @staticmethod
    def touched_products(entries: list[InventoryAudit]) -> list[Product]:
        """The locked product rows behind `entries`, one per product."""
        return list({entry.product_id: entry.product for entry in entries}.values())

    @staticmethod
    def record_audit(db: AsyncSession, product: Product, previous_stock: int, adjustment: int,
                     reason: str | None) -> InventoryAudit:
        entry = InventoryAudit(
            product_id=product.id,
            product=product,
            previous_stock=previous_stock,
            new_stock=previous_stock + adjustment,
            adjustment=adjustment,
            reason=reason,
        )
        db.add(entry)
        return entry

    @staticmethod
    async def get_audit_history(db: AsyncSession, product_id: int, limit: int = 20, offset: int = 0):
        result = await db.execute(
            select(InventoryAudit)
            .where(InventoryAudit.product_id == product_id)
            .order_by(InventoryAudit.timestamp.desc(), InventoryAudit.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all()

    @staticmethod
    async def get_recent_audit_entries(db: AsyncSession, limit: int = 20, offset: int = 0):
        result = await db.execute(
            select(InventoryAudit)
            .order_by(InventoryAudit.timestamp.desc(), InventoryAudit.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all()
