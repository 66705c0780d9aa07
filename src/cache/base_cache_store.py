# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

Stores are dumb key/value holders: freshness rules live in ResultCache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from scgen.cache.models import CacheEntry


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by fingerprint key."""

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store cache entry, replacing any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove cache entry."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""

    def close(self) -> None:
        """Release backend connections. Stores without any keep the default."""
