from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from shared.cache import CacheAside
from shared.config.cache import get_cache
from shared.config.database import get_db
from shared.errors import NotFoundError
from shared.security.dependencies import verify_internal_api_key
from .schemas import ProductCreate, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])

@router.get("/health")
async def health_check():
    return {"service": "product", "status": "running"}


@router.get("/", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    return await ProductService.list_products(db)


@router.get("/category/{category_id}", response_model=list[ProductResponse])
async def list_products_by_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await ProductService.get_products_by_category(db, cache, category_id)


@router.get("/brand/{brand_id}", response_model=list[ProductResponse])
async def list_products_by_brand(
    brand_id: int,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await ProductService.get_products_by_brand(db, cache, brand_id)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    product = await ProductService.get_product_by_id(db, cache, product_id)
    if not product:
        raise NotFoundError(f"Product with ID {product_id} not found")
    return product


@admin_router.post("/", response_model=ProductResponse, status_code=201)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await ProductService.create_product(db, cache, product)


@admin_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    changes: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    cache: CacheAside = Depends(get_cache),
):
    return await ProductService.update_product(db, cache, product_id, changes)
