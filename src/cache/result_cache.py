# src/cache/result_cache.py - v1
"""Fingerprint-keyed result cache with TTL and dependency invalidation.

Status is recomputed on every read from (now, created_at, ttl, recorded
versions, current versions); a stored status of "valid" is never trusted
on its own. Entries that are not valid are never returned. Outdated
entries are evicted on read. Writes replace unconditionally.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from scgen.cache.base_cache_store import BaseCacheStore
from scgen.cache.dependency_versions import DependencyVersionLookup, StaticVersionLookup
from scgen.cache.memory_store import MemoryCacheStore
from scgen.cache.models import CacheEntry, CacheStatus
from scgen.core.models import GenerationResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 7 * 86400.0


def compute_status(
    now: datetime,
    created_at: datetime,
    ttl_s: float,
    recorded_versions: dict[str, str],
    current_versions: dict[str, str],
) -> CacheStatus:
    """Pure freshness rule.

    Outdated when older than the TTL or when any recorded dependency has a
    different known current version. Dependencies with unknown current
    versions are ignored.
    """
    if now - created_at > timedelta(seconds=ttl_s):
        return CacheStatus.OUTDATED
    for dep_id, recorded in recorded_versions.items():
        current = current_versions.get(dep_id)
        if current is not None and current != recorded:
            return CacheStatus.OUTDATED
    return CacheStatus.VALID


def _is_intact(entry: CacheEntry) -> bool:
    return bool(entry.result.artifact_text.strip())


class ResultCache:
    """Owns CacheEntry lifecycle on top of a BaseCacheStore."""

    def __init__(
        self,
        store: BaseCacheStore | None = None,
        version_lookup: DependencyVersionLookup | None = None,
        tracked_dependencies: dict[str, str] | None = None,
        ttl_s: float = DEFAULT_TTL_S,
        ttl_overrides_s: dict[str, float] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store or MemoryCacheStore()
        self._tracked = dict(tracked_dependencies or {})
        self._lookup = version_lookup or StaticVersionLookup(self._tracked)
        self._ttl_s = ttl_s
        self._ttl_overrides_s = dict(ttl_overrides_s or {})
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    def ttl_for(self, artifact_category: str) -> float:
        """TTL in seconds for a category (override or default)."""
        return self._ttl_overrides_s.get(artifact_category, self._ttl_s)

    async def status_of(self, entry: CacheEntry) -> CacheStatus:
        """Current status of a stored entry."""
        if entry.status is CacheStatus.INVALID or not _is_intact(entry):
            return CacheStatus.INVALID
        current = await self._lookup.current_versions(list(entry.dependency_versions))
        return compute_status(
            self._clock(),
            entry.created_at,
            self.ttl_for(entry.artifact_category),
            entry.dependency_versions,
            current,
        )

    async def get(self, fingerprint: str) -> CacheEntry | None:
        """Valid entry for a fingerprint, or None."""
        entry = await self._store.get(fingerprint)
        if entry is None:
            return None

        status = await self.status_of(entry)
        if status is not CacheStatus.VALID:
            logger.info("Cache entry %s is %s, evicting", fingerprint[:12], status.value)
            await self._store.delete(fingerprint)
            return None
        return entry

    async def put(
        self,
        fingerprint: str,
        result: GenerationResult,
        artifact_category: str = "",
        dependency_versions: dict[str, str] | None = None,
    ) -> CacheEntry:
        """Store a result, replacing any previous entry for the fingerprint."""
        if dependency_versions is None:
            dependency_versions = dict(self._tracked)
            dependency_versions.update(
                await self._lookup.current_versions(list(self._tracked))
            )
        entry = CacheEntry(
            fingerprint=fingerprint,
            result=result.model_copy(deep=True, update={"from_cache": False}),
            created_at=self._clock(),
            dependency_versions=dependency_versions,
            artifact_category=artifact_category,
            status=CacheStatus.VALID,
        )
        await self._store.put(fingerprint, entry)
        logger.debug("Cached result %s", fingerprint[:12])
        return entry

    async def invalidate(self, fingerprint: str) -> None:
        await self._store.delete(fingerprint)

    async def clear(self) -> None:
        await self._store.clear()

    async def aclose(self) -> None:
        """Close the version lookup and the backing store."""
        await self._lookup.aclose()
        self._store.close()

    async def sweep(self) -> int:
        """Evict every entry that is no longer valid. Returns the count."""
        evicted = 0
        for entry in await self._store.list_entries():
            if await self.status_of(entry) is not CacheStatus.VALID:
                await self._store.delete(entry.fingerprint)
                evicted += 1
        return evicted

    @asynccontextmanager
    async def single_flight(self, fingerprint: str) -> AsyncIterator[None]:
        """Serialize concurrent work on one fingerprint within this process."""
        lock = self._locks.setdefault(fingerprint, asyncio.Lock())
        self._lock_users[fingerprint] = self._lock_users.get(fingerprint, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[fingerprint] -= 1
            if self._lock_users[fingerprint] == 0:
                del self._lock_users[fingerprint]
                del self._locks[fingerprint]
