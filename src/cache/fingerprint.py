# src/cache/fingerprint.py - v3
"""Request fingerprinting.

SHA-256 over a canonical JSON rendering of the normalized request and the
template schema version. Canonical means sorted keys at every depth and
compact separators, so customization insertion order never matters.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from scgen.core.models import GenerationRequest


def canonical_json(payload: Any) -> str:
    """Deterministic JSON rendering."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str,
    )


def compute_request_fingerprint(request: GenerationRequest, schema_version: str) -> str:
    """Hex digest identifying a request for caching.

    Args:
        request: Normalized request.
        schema_version: Template schema version; bumping it changes every fingerprint.
    """
    payload = {
        "organization_type": request.organization_type,
        "transaction_pattern": request.transaction_pattern,
        "artifact_category": request.artifact_category,
        "customizations": request.customizations,
        "schema_version": schema_version,
    }
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
