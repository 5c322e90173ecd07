"""
Cache Service - Derived Data Caching
====================================

Small key/value cache for derived data (currently the navigation tree).
Values are JSON-serialized, so anything cached must be plain
dicts/lists/strings.

Two backends:

1. RedisCache:
   - Shared between the API process and Celery workers
   - A sync in a worker invalidates the tree the API serves

2. MemoryCache:
   - In-process dict with monotonic-clock expiry
   - Single-process deployments and tests

Failure Policy:
---------------
The cache is an optimization. A backend error while reading or writing is
logged and the value is computed fresh; it never fails a request. A failed
forget() is logged too, and the entry then lives until its TTL.
"""

from __future__ import annotations
import json
import logging
import time
from typing import Any, Awaitable, Callable, Protocol

import redis.asyncio as aioredis
from redis.asyncio.client import Redis
from redis.exceptions import RedisError

from docsync.config import Settings

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


class MemoryCache:
    """In-process backend. Entries expire ttl seconds after they were set."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (self._clock() + ttl, value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def close(self) -> None:
        self._entries.clear()


class RedisCache:
    """Redis backend. Connects lazily on first use."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._redis: Redis | None = None

    def _client(self) -> Redis:
        if self._redis is None:
            logger.info(f"Connecting cache to Redis: {self.url}")
            self._redis = aioredis.from_url(self.url, decode_responses=True)
        return self._redis

    async def get(self, key: str) -> str | None:
        return await self._client().get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self._client().set(key, value, ex=ttl)

    async def delete(self, key: str) -> None:
        await self._client().delete(key)

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


CACHE_ERRORS = (RedisError, OSError, ValueError)


class CacheService:
    """
    remember/forget on top of a backend.

    Usage:
        cache = CacheService(MemoryCache())
        tree = await cache.remember("docs_navigation", 3600, build_tree)
        await cache.forget("docs_navigation")
    """

    def __init__(self, backend: CacheBackend) -> None:
        self.backend = backend

    async def remember(
        self,
        key: str,
        ttl: int,
        compute: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            cached = await self.backend.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for '{key}'")
                return json.loads(cached)
        except CACHE_ERRORS as e:
            logger.warning(f"Cache read for '{key}' failed, computing fresh: {e}")

        value = await compute()

        try:
            await self.backend.set(key, json.dumps(value), ttl)
        except CACHE_ERRORS as e:
            logger.warning(f"Cache write for '{key}' failed: {e}")
        return value

    async def forget(self, key: str) -> None:
        try:
            await self.backend.delete(key)
            logger.debug(f"Cache entry '{key}' forgotten")
        except CACHE_ERRORS as e:
            logger.warning(f"Cache invalidation for '{key}' failed: {e}")

    async def close(self) -> None:
        await self.backend.close()


def create_cache_service(settings: Settings) -> CacheService:
    if settings.cache_backend == "memory":
        return CacheService(MemoryCache())
    return CacheService(RedisCache(settings.redis_url))
