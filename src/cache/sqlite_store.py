# src/cache/sqlite_store.py - v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Survives restarts; bounded by
max_entries with least-recently-accessed eviction.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from scgen.cache.base_cache_store import BaseCacheStore
from scgen.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    last_access REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_last_access ON cache_entries(last_access);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str, max_entries: int = 1000) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._max_entries = max_entries
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> CacheEntry | None:
        """Retrieve cache entry by key and refresh its access time."""
        row = self._conn.execute(
            "SELECT data FROM cache_entries WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        try:
            entry = CacheEntry.model_validate_json(row[0])
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None
        self._conn.execute(
            "UPDATE cache_entries SET last_access = ? WHERE key = ?", (time.time(), key)
        )
        self._conn.commit()
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry (upsert), then enforce the size bound."""
        self._conn.execute(
            "INSERT OR REPLACE INTO cache_entries (key, data, last_access) VALUES (?, ?, ?)",
            (key, entry.model_dump_json(), time.time()),
        )
        self._conn.execute(
            """DELETE FROM cache_entries WHERE key IN (
                   SELECT key FROM cache_entries
                   ORDER BY last_access DESC LIMIT -1 OFFSET ?
               )""",
            (self._max_entries,),
        )
        self._conn.commit()

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        self._conn.commit()

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        entries: list[CacheEntry] = []
        for (data,) in self._conn.execute("SELECT data FROM cache_entries").fetchall():
            try:
                entries.append(CacheEntry.model_validate_json(data))
            except ValueError:
                continue
        return entries

    async def clear(self) -> None:
        self._conn.execute("DELETE FROM cache_entries")
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
