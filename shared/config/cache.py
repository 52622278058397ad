import os
import redis.asyncio as aioredis
from redis.backoff import NoBackoff
from redis.retry import Retry

from shared.cache import CacheAside
from . import settings  # noqa: F401  loads .env before the lookups below

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# One attempt per command; a failed cache call falls back to the database instead.
redis_client: aioredis.Redis = aioredis.from_url(
    REDIS_URL,
    decode_responses=True,
    retry=Retry(NoBackoff(), 0),
    retry_on_timeout=False,
)


async def get_cache() -> CacheAside:
    return CacheAside(redis_client)


async def close_cache():
    await redis_client.aclose()
