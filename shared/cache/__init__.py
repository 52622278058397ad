from .cache_aside import CacheAside
from .keys import product_key, category_listing_key, brand_listing_key
from .invalidation import invalidate_product, keys_for_product

__all__ = [
    "CacheAside",
    "product_key",
    "category_listing_key",
    "brand_listing_key",
    "invalidate_product",
    "keys_for_product",
]
