"""
Single place that knows which cache entries embed a product.

Every write path (stock adjustments, checkout, order cancellation, catalog
edits) calls `invalidate_product` so listings never drift from the product
entry itself.
"""
from typing import Protocol

from .cache_aside import CacheAside
from .keys import product_key, category_listing_key, brand_listing_key


class CachedProduct(Protocol):
    id: int
    category_id: int | None
    brand_id: int | None


def keys_for_product(product: CachedProduct) -> list[str]:
    keys = [product_key(product.id)]
    if product.category_id is not None:
        keys.append(category_listing_key(product.category_id))
    if product.brand_id is not None:
        keys.append(brand_listing_key(product.brand_id))
    return keys


async def invalidate_product(cache: CacheAside, *products: CachedProduct) -> int:
    keys: list[str] = []
    for product in products:
        for key in keys_for_product(product):
            if key not in keys:
                keys.append(key)
    return await cache.delete(*keys)
