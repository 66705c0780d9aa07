# src/cache/dependency_versions.py - v2
"""Current-version lookups for the dependencies recorded on cache entries.

A lookup returning None means "unknown"; unknown versions never invalidate
an entry.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from urllib.parse import quote

import httpx

from scgen.config.settings import Settings

logger = logging.getLogger(__name__)


class DependencyVersionLookup(ABC):
    """Capability: current version of a tracked dependency."""

    @abstractmethod
    async def current_version(self, dep_id: str) -> str | None:
        """Current version of `dep_id`, or None when unknown."""

    async def current_versions(self, dep_ids: list[str]) -> dict[str, str]:
        """Known current versions for several dependencies."""
        out: dict[str, str] = {}
        for dep_id in dep_ids:
            version = await self.current_version(dep_id)
            if version is not None:
                out[dep_id] = version
        return out

    async def aclose(self) -> None:
        """Release network resources held by the lookup."""


class StaticVersionLookup(DependencyVersionLookup):
    """Versions pinned in configuration."""

    def __init__(self, versions: dict[str, str] | None = None) -> None:
        self._versions = dict(versions or {})

    async def current_version(self, dep_id: str) -> str | None:
        return self._versions.get(dep_id)

    def set_version(self, dep_id: str, version: str) -> None:
        self._versions[dep_id] = version


class NpmRegistryLookup(DependencyVersionLookup):
    """Latest published version from the npm registry, memoized for refresh_s."""

    def __init__(
        self,
        registry_url: str = "https://registry.npmjs.org",
        timeout_s: float = 5.0,
        refresh_s: float = 3600.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._registry_url = registry_url.rstrip("/")
        self._refresh_s = refresh_s
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)
        self._memo: dict[str, tuple[float, str]] = {}

    async def current_version(self, dep_id: str) -> str | None:
        memo = self._memo.get(dep_id)
        if memo is not None and time.monotonic() - memo[0] < self._refresh_s:
            return memo[1]

        url = f"{self._registry_url}/{quote(dep_id, safe='@')}/latest"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            version = response.json().get("version")
        except httpx.TimeoutException as e:
            logger.warning("npm registry timeout for %s: %s", dep_id, e)
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(
                "npm registry returned %d for %s", e.response.status_code, dep_id,
            )
            return None
        except (httpx.RequestError, ValueError) as e:
            logger.warning("npm registry lookup failed for %s: %s", dep_id, e)
            return None

        if not isinstance(version, str):
            return None
        self._memo[dep_id] = (time.monotonic(), version)
        return version

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()


def create_version_lookup(settings: Settings) -> DependencyVersionLookup:
    """Lookup configured by DEPENDENCY_LOOKUP."""
    if settings.dependency_lookup == "npm":
        return NpmRegistryLookup(registry_url=settings.npm_registry_url)
    return StaticVersionLookup(settings.dependency_versions_map)
