import json
from typing import Any, Awaitable, Callable

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from shared.config.settings import CACHE_TTL_SECONDS
from shared.observability.metrics import ecomm_cache_requests_total

logger = structlog.get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


class CacheAside:
    """
    Read-through wrapper around Redis.

    Values are stored as JSON. Redis being down or slow to answer is never the
    caller's problem: every RedisError is logged and the call degrades to the
    loader (reads) or to a no-op (writes and deletes).
    """

    def __init__(self, client: Redis, default_ttl: int = CACHE_TTL_SECONDS):
        self.client = client
        self.default_ttl = default_ttl

    async def get_or_set(self, key: str, loader: Loader, ttl: int | None = None) -> Any:
        try:
            cached = await self.client.get(key)
        except RedisError as e:
            ecomm_cache_requests_total.labels(result="error").inc()
            logger.warning("cache_read_failed", key=key, error=str(e))
            return await loader()

        if cached is not None:
            try:
                value = json.loads(cached)
            except ValueError as e:
                # Unreadable entry; reload and overwrite it below
                ecomm_cache_requests_total.labels(result="error").inc()
                logger.warning("cache_entry_corrupt", key=key, error=str(e))
            else:
                ecomm_cache_requests_total.labels(result="hit").inc()
                return value
        else:
            ecomm_cache_requests_total.labels(result="miss").inc()

        value = await loader()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            await self.client.set(key, json.dumps(value, default=str), ex=ttl or self.default_ttl)
            return True
        except RedisError as e:
            ecomm_cache_requests_total.labels(result="error").inc()
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.client.delete(*keys)
        except RedisError as e:
            logger.warning("cache_invalidation_failed", keys=list(keys), error=str(e))
            return 0

    async def clear(self, pattern: str = "*") -> int:
        """Delete every key matching `pattern`. Meant for operators, not request paths."""
        try:
            keys = [key async for key in self.client.scan_iter(match=pattern)]
            if not keys:
                return 0
            return await self.client.delete(*keys)
        except RedisError as e:
            logger.warning("cache_clear_failed", pattern=pattern, error=str(e))
            return 0

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.warning("cache_ping_failed", error=str(e))
            return False
