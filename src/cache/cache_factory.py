# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from scgen.cache.base_cache_store import BaseCacheStore
from scgen.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend
    max_entries = 1000 if settings is None else settings.cache_max_entries

    if backend == "memory":
        from scgen.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore(max_entries=max_entries)

    if backend == "sqlite":
        from scgen.cache.sqlite_store import SqliteCacheStore
        db_path = f"{settings.cache_root}/scgen_cache.db"
        return SqliteCacheStore(db_path=db_path, max_entries=max_entries)

    if backend == "redis":
        from scgen.cache.redis_store import RedisCacheStore
        if not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        # Native expiry at the longest TTL; freshness is decided at read time.
        return RedisCacheStore(
            redis_url=settings.cache_redis_url,
            max_entries=max_entries,
            expire_s=int(max(settings.cache_ttl_s, *settings.cache_ttl_overrides_s.values(), 0)),
        )

    raise ValueError(f"Unsupported cache backend: {backend!r}")
