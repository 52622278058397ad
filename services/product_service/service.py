from types import SimpleNamespace

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.cache import CacheAside, brand_listing_key, category_listing_key, invalidate_product, product_key
from shared.errors import NotFoundError
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductResponse, ProductUpdate

logger = structlog.get_logger(__name__)


def _serialize(product: Product) -> dict:
    return ProductResponse.model_validate(product).model_dump(mode="json")


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, cache: CacheAside, data: ProductCreate):
        product = Product(**data.model_dump())
        product = await ProductRepository.create_product(db, product)
        # New product shows up in its category and brand listings
        await invalidate_product(cache, product)
        logger.info("product_created", product_id=product.id, stock=product.stock)
        return product

    @staticmethod
    async def list_products(db: AsyncSession):
        return await ProductRepository.get_all_products(db)

    @staticmethod
    async def get_product_by_id(db: AsyncSession, cache: CacheAside, product_id: int) -> dict | None:
        async def load():
            product = await ProductRepository.get_product_by_id(db, product_id)
            return _serialize(product) if product else None

        return await cache.get_or_set(product_key(product_id), load)

    @staticmethod
    async def get_products_by_category(db: AsyncSession, cache: CacheAside, category_id: int) -> list[dict]:
        async def load():
            products = await ProductRepository.get_products_by_category(db, category_id)
            return [_serialize(p) for p in products]

        return await cache.get_or_set(category_listing_key(category_id), load)

    @staticmethod
    async def get_products_by_brand(db: AsyncSession, cache: CacheAside, brand_id: int) -> list[dict]:
        async def load():
            products = await ProductRepository.get_products_by_brand(db, brand_id)
            return [_serialize(p) for p in products]

        return await cache.get_or_set(brand_listing_key(brand_id), load)

    @staticmethod
    async def update_product(db: AsyncSession, cache: CacheAside, product_id: int, data: ProductUpdate):
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")

        # Snapshot the old relationships: a moved product must leave its old listings too
        before = SimpleNamespace(id=product.id, category_id=product.category_id, brand_id=product.brand_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)

        product = await ProductRepository.update_product(db, product)
        await invalidate_product(cache, before, product)
        return product
