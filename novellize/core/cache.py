"""Redis caching layer for the novel catalog."""

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from novellize.config import get_settings
from novellize.core.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)
settings = get_settings()


def serialize_value(value: Any) -> str:
    """Canonical string form written to the store.

    Strings are stored verbatim (they may already be a JSON blob),
    everything else is JSON-encoded.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value)


class CacheService:
    """Async Redis cache service.

    The store may hand back the catalog as a native list, a JSON string or a
    single bare object depending on which client wrote it. All three are
    accepted on read; writes always go out as strings.
    """

    def __init__(self, client: redis.Redis | None = None):
        self._redis: redis.Redis | None = client

    async def _get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def close(self):
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def fetch_raw(self, key: str) -> Any | None:
        """Read the stored value without decoding it.

        Raises CacheUnavailableError on transport failure.
        """
        try:
            client = await self._get_redis()
            return await client.get(key)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError("Cache read failed", {"key": key, "error": str(e)}) from e

    async def store_raw(self, key: str, value: str, ttl: int | None = None) -> None:
        """Write a string value, with optional TTL in seconds.

        Raises CacheUnavailableError on transport failure.
        """
        try:
            client = await self._get_redis()
            if ttl:
                await client.setex(key, ttl, value)
            else:
                await client.set(key, value)
        except (RedisError, OSError) as e:
            raise CacheUnavailableError("Cache write failed", {"key": key, "error": str(e)}) from e

    async def get(self, key: str) -> list | None:
        """Get a cached list of objects, or None on miss/error.

        A single stored object comes back wrapped in a list. Scalars and
        undecodable values are treated as unusable.
        """
        try:
            value = await self.fetch_raw(key)
        except CacheUnavailableError as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                logger.error(f"Cache value for {key} is not valid JSON: {e}")
                return None
        if isinstance(value, dict):
            return [value]
        if isinstance(value, list):
            return value
        logger.error(f"Cache value for {key} has unexpected type {type(value).__name__}")
        return None

    async def get_catalog(self, key: str | None = None) -> list | None:
        """Get the novel catalog as a list, or None when unusable."""
        return await self.get(key or settings.novel_cache_key)

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Set value in cache with optional TTL."""
        try:
            await self.store_raw(key, serialize_value(value), ttl)
            return True
        except (CacheUnavailableError, TypeError, ValueError) as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False

    async def set_catalog(self, novels: Any, ttl: int | None = None) -> bool:
        """Replace the novel catalog snapshot."""
        if ttl is None:
            ttl = settings.novel_cache_ttl_seconds
        return await self.set(settings.novel_cache_key, novels, ttl)

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        try:
            client = await self._get_redis()
            await client.delete(key)
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Cache delete error for {key}: {e}")
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        try:
            client = await self._get_redis()
            return await client.exists(key) > 0
        except (RedisError, OSError) as e:
            logger.warning(f"Cache exists error for {key}: {e}")
            return False

    async def ping(self) -> bool:
        """Check that the cache server answers."""
        try:
            client = await self._get_redis()
            return bool(await client.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"Cache ping failed: {e}")
            return False


# Singleton cache instance
_cache: CacheService | None = None


def get_cache() -> CacheService:
    """Get the singleton cache service."""
    global _cache
    if _cache is None:
        _cache = CacheService()
    return _cache
