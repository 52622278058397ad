from decimal import Decimal
from types import SimpleNamespace

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from services.product_service.repository import ProductRepository
from services.product_service.schemas import ProductCreate, ProductUpdate
from services.product_service.service import ProductService
from shared.cache import CacheAside, invalidate_product, keys_for_product, product_key


class BrokenRedis:
    """Stands in for a Redis that cannot be reached."""

    async def get(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def set(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")

    async def scan_iter(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")
        yield


@pytest.fixture
def store_reads(monkeypatch):
    calls = []
    original = ProductRepository.get_product_by_id

    async def counting(db, product_id):
        calls.append(product_id)
        return await original(db, product_id)

    monkeypatch.setattr(ProductRepository, "get_product_by_id", staticmethod(counting))
    return calls


class TestReadThrough:
    async def test_miss_then_hit(self, db, cache, redis, make_product, store_reads):
        product = await make_product(name="Lamp", price="29.99")

        first = await ProductService.get_product_by_id(db, cache, product.id)
        assert store_reads == [product.id]
        assert 0 < await redis.ttl(product_key(product.id)) <= 3600

        second = await ProductService.get_product_by_id(db, cache, product.id)
        assert store_reads == [product.id]
        assert first == second
        assert first["name"] == "Lamp"
        assert Decimal(first["price"]) == Decimal("29.99")

    async def test_absent_product_is_not_cached(self, db, cache, redis, store_reads):
        assert await ProductService.get_product_by_id(db, cache, 999) is None
        assert await ProductService.get_product_by_id(db, cache, 999) is None

        assert store_reads == [999, 999]
        assert not await redis.exists(product_key(999))

    async def test_listings_are_cached(self, db, cache, redis, make_product):
        await make_product(name="A", category_id=7, brand_id=2)
        await make_product(name="B", category_id=7, brand_id=3)

        listing = await ProductService.get_products_by_category(db, cache, 7)

        assert [p["name"] for p in listing] == ["A", "B"]
        assert await redis.exists("products:category:7")
        assert [p["name"] for p in await ProductService.get_products_by_brand(db, cache, 3)] == ["B"]


class TestRedisOutage:
    async def test_corrupt_entry_is_reloaded_and_overwritten(self, db, cache, redis, make_product, store_reads):
        product = await make_product(name="Lamp")
        await redis.set(product_key(product.id), "{not json")

        loaded = await ProductService.get_product_by_id(db, cache, product.id)

        assert loaded["name"] == "Lamp"
        assert store_reads == [product.id]
        assert await ProductService.get_product_by_id(db, cache, product.id) == loaded
        assert store_reads == [product.id]

    async def test_reads_fall_back_to_store(self, db, make_product, store_reads):
        cache = CacheAside(BrokenRedis())
        product = await make_product(name="Lamp")

        first = await ProductService.get_product_by_id(db, cache, product.id)
        second = await ProductService.get_product_by_id(db, cache, product.id)

        assert first["name"] == second["name"] == "Lamp"
        assert store_reads == [product.id, product.id]

    async def test_writes_and_deletes_degrade_to_no_ops(self):
        cache = CacheAside(BrokenRedis())

        assert await cache.set("k", {"a": 1}) is False
        assert await cache.delete("k") == 0
        assert await cache.clear() == 0
        assert await cache.ping() is False


class TestInvalidation:
    def test_keys_cover_product_and_listings(self):
        product = SimpleNamespace(id=4, category_id=2, brand_id=9)

        assert keys_for_product(product) == ["product:4", "products:category:2", "products:brand:9"]

    def test_missing_relationships_are_skipped(self):
        product = SimpleNamespace(id=4, category_id=None, brand_id=None)

        assert keys_for_product(product) == ["product:4"]

    async def test_shared_listing_deleted_once(self, cache, redis):
        for key in ("product:1", "product:2", "products:category:5", "products:brand:6"):
            await redis.set(key, "x")

        deleted = await invalidate_product(
            cache,
            SimpleNamespace(id=1, category_id=5, brand_id=6),
            SimpleNamespace(id=2, category_id=5, brand_id=6),
        )

        assert deleted == 4
        assert await redis.keys("*") == []

    async def test_moved_product_leaves_old_listings(self, db, cache, redis, make_product):
        product = await make_product(category_id=1, brand_id=1)
        await ProductService.get_products_by_category(db, cache, 1)
        await ProductService.get_products_by_brand(db, cache, 1)

        await ProductService.update_product(db, cache, product.id, ProductUpdate(category_id=2, brand_id=2))

        assert not await redis.exists("products:category:1")
        assert not await redis.exists("products:brand:1")
        assert await ProductService.get_products_by_category(db, cache, 1) == []

    async def test_new_product_appears_in_cached_listing(self, db, cache, make_product):
        await make_product(name="Old", category_id=3)
        assert len(await ProductService.get_products_by_category(db, cache, 3)) == 1

        await ProductService.create_product(db, cache, ProductCreate(
            name="New", description="", price=Decimal("4.00"), stock=1, category_id=3, brand_id=1,
        ))

        assert [p["name"] for p in await ProductService.get_products_by_category(db, cache, 3)] == ["Old", "New"]


class TestClear:
    async def test_clear_by_pattern(self, cache, redis):
        await redis.set("product:1", "x")
        await redis.set("products:category:1", "x")
        await redis.set("other", "x")

        assert await cache.clear("product*") == 2
        assert await redis.keys("*") == ["other"]
