"""Redis read-through cache for short → full serial resolutions.

Issued mappings are immutable, so a cached hit can never go stale.  Misses
are never cached: a serial issued a millisecond ago must resolve on the
next scan, not after a TTL.

Redis is an optimisation only: every Redis failure is logged and the
caller falls back to the mapping store.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from seedtrace.config import settings

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(prefix: str, short_serial: str) -> str:
    return f"{prefix}:short:{short_serial}"


class ResolutionCache:
    """Positive-only cache of short serial resolutions.

    Args:
        client: a ``redis.asyncio.Redis`` (or compatible) client
        ttl: seconds to keep a resolution (bounds memory, not freshness)
        prefix: key namespace
    """

    def __init__(self, client: redis.Redis, ttl: int = 86400, prefix: str = "seedtrace"):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix

    async def get(self, short_serial: str) -> str | None:
        key = cache_key(self.prefix, short_serial)
        try:
            value = await self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis error (falling back to store): {e}")
            return None

        if value:
            logger.debug(f"Cache HIT: {key}")
            return value
        logger.debug(f"Cache MISS: {key}")
        return None

    async def set(self, short_serial: str, full_serial: str) -> None:
        try:
            await self.client.setex(cache_key(self.prefix, short_serial), self.ttl, full_serial)
        except redis.RedisError as e:
            logger.warning(f"Redis error (resolution not cached): {e}")
