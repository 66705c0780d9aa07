# src/cache/redis_store.py - v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Shares cached results across instances. Access order is kept in a sorted
set so the store stays bounded; entries also carry a native Redis expiry.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from scgen.cache.base_cache_store import BaseCacheStore
from scgen.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_KEY_PREFIX = "scgen:cache:"
_INDEX_KEY = "scgen:cache:__lru__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for distributed deployments."""

    def __init__(
        self,
        redis_url: str = "",
        max_entries: int = 1000,
        expire_s: int | None = None,
        client: Any = None,
    ) -> None:
        if client is None:
            try:
                import redis
            except ImportError as e:
                raise ImportError(
                    "redis package required: pip install redis"
                ) from e
            client = redis.Redis.from_url(redis_url, decode_responses=True)

        self._client = client
        self._max_entries = max_entries
        self._expire_s = expire_s

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key."""
        data = self._client.get(f"{_KEY_PREFIX}{key}")
        if data is None:
            self._client.zrem(_INDEX_KEY, key)
            return None
        try:
            entry = CacheEntry.model_validate_json(data)
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None
        self._client.zadd(_INDEX_KEY, {key: time.time()})
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry and trim least recently used keys."""
        self._client.set(f"{_KEY_PREFIX}{key}", entry.model_dump_json(), ex=self._expire_s)
        self._client.zadd(_INDEX_KEY, {key: time.time()})

        overflow = self._client.zcard(_INDEX_KEY) - self._max_entries
        if overflow > 0:
            stale = self._client.zrange(_INDEX_KEY, 0, overflow - 1)
            for old in stale:
                self._client.delete(f"{_KEY_PREFIX}{old}")
            self._client.zrem(_INDEX_KEY, *stale)
            logger.debug("LRU evicted %d cache entries", len(stale))

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._client.delete(f"{_KEY_PREFIX}{key}")
        self._client.zrem(_INDEX_KEY, key)

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        entries: list[CacheEntry] = []
        for key in self._client.zrange(_INDEX_KEY, 0, -1):
            data = self._client.get(f"{_KEY_PREFIX}{key}")
            if data is None:
                continue
            try:
                entries.append(CacheEntry.model_validate_json(data))
            except ValueError:
                continue
        return entries

    async def clear(self) -> None:
        keys = self._client.zrange(_INDEX_KEY, 0, -1)
        for key in keys:
            self._client.delete(f"{_KEY_PREFIX}{key}")
        self._client.delete(_INDEX_KEY)

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
