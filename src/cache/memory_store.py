# src/cache/memory_store.py - v1
"""In-process bounded LRU cache store (CACHE_BACKEND=memory).

Default backend. Entries beyond max_entries are evicted least recently used
first. Not shared across processes.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from scgen.cache.base_cache_store import BaseCacheStore
from scgen.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """OrderedDict-backed LRU store."""

    def __init__(self, max_entries: int = 1000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    async def get(self, key: str) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is not None:
            self._entries.move_to_end(key)
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("LRU evicted cache entry %s", evicted)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def list_entries(self) -> list[CacheEntry]:
        return list(self._entries.values())

    async def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
