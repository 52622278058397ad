from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from shared.cache import CacheAside
from shared.config.cache import get_cache
from shared.config.database import get_db
from shared.security.dependencies import verify_internal_api_key
from .schemas import (
    AdjustmentRequest,
    AuditEntryResponse,
    BatchAdjustmentRequest,
    InventoryAdjustmentResponse,
    InventoryStatusResponse,
    QuantityRequest,
)
from .service import InventoryService

router = APIRouter()
# Stock writes come from back-office tooling only
admin_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])

@router.get("/health")
async def health_check():
    return {"service": "inventory", "status": "running"}


@router.get("/audit/recent", response_model=list[AuditEntryResponse])
async def recent_audit_entries(
    limit: int = Query(default=20),
    offset: int = Query(default=0),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService.get_recent_audit_entries(db, limit, offset)


@router.get("/{product_id}", response_model=InventoryStatusResponse)
async def get_inventory_status(product_id: int, db: AsyncSession = Depends(get_db)):
    return await InventoryService.get_inventory_status(db, product_id)


@router.get("/{product_id}/audit", response_model=list[AuditEntryResponse])
async def get_audit_history(
    product_id: int,
    limit: int = Query(default=20),
    offset: int = Query(default=0),
    db: AsyncSession = Depends(get_db),
):
    return await InventoryService.get_inventory_audit_history(db, product_id, limit, offset)


@admin_router.patch("/{product_id}/adjust", response_model=InventoryAdjustmentResponse)
async def adjust_inventory(
    product_id: int,
    payload: AdjustmentRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await InventoryService.adjust_inventory(db, cache, product_id, payload.adjustment, payload.reason)


@admin_router.post("/{product_id}/increment", response_model=InventoryAdjustmentResponse)
async def increment_stock(
    product_id: int,
    payload: QuantityRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await InventoryService.increment_stock(db, cache, product_id, payload.quantity, payload.reason)


@admin_router.post("/{product_id}/decrement", response_model=InventoryAdjustmentResponse)
async def decrement_stock(
    product_id: int,
    payload: QuantityRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await InventoryService.decrement_stock(db, cache, product_id, payload.quantity, payload.reason)


@admin_router.post("/batch", response_model=list[InventoryAdjustmentResponse])
async def batch_adjust_stock(
    payload: BatchAdjustmentRequest,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await InventoryService.batch_adjust_stock(db, cache, payload.items)
