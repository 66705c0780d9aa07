# src/cache/models.py - v2
"""Cache domain models: CacheStatus, CacheEntry."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from scgen.core.models import GenerationResult


class CacheStatus(str, Enum):
    """Freshness of a cache entry, computed at read time."""

    VALID = "valid"
    OUTDATED = "outdated"
    INVALID = "invalid"


class CacheEntry(BaseModel):
    """Single cache entry linking a request fingerprint to its result."""

    fingerprint: str
    result: GenerationResult
    created_at: datetime
    dependency_versions: dict[str, str] = Field(default_factory=dict)
    artifact_category: str = ""
    status: CacheStatus = CacheStatus.VALID
