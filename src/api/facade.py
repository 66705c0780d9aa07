# src/api/facade.py - v3
"""Public API facade: single entry point for contract generation.

Usage:
    from scgen.api.facade import generate
    status, body = await generate({"organizationType": "LLP", ...})

Returns an HTTP-style status code with a JSON-ready body. Invalid requests
map to 400; every other failure is absorbed into a degraded 200 response.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from scgen.api.models import (
    FailureResponse,
    GenerateRequestPayload,
    SuccessResponse,
    UsageResponse,
)
from scgen.core.errors import InvalidRequestError
from scgen.request.normalizer import RequestNormalizer

if TYPE_CHECKING:
    from scgen.config.settings import Settings
    from scgen.pipeline.orchestrator import GenerationOrchestrator

logger = logging.getLogger(__name__)

_default_orchestrator: GenerationOrchestrator | None = None


def get_orchestrator(settings: Settings | None = None) -> GenerationOrchestrator:
    """Process-wide orchestrator, built from settings on first use."""
    global _default_orchestrator
    if _default_orchestrator is None:
        from scgen.config.settings import load_settings
        from scgen.pipeline.orchestrator import GenerationOrchestrator

        _default_orchestrator = GenerationOrchestrator.from_settings(
            settings or load_settings()
        )
    return _default_orchestrator


def reset_orchestrator() -> None:
    """Drop the process-wide orchestrator (tests, settings reload)."""
    global _default_orchestrator
    _default_orchestrator = None


async def shutdown() -> None:
    """Close the process-wide orchestrator's connections and drop it."""
    global _default_orchestrator
    engine, _default_orchestrator = _default_orchestrator, None
    if engine is not None:
        await engine.aclose()


async def generate(
    payload: Mapping[str, Any] | GenerateRequestPayload,
    orchestrator: GenerationOrchestrator | None = None,
    settings: Settings | None = None,
) -> tuple[int, dict[str, Any]]:
    """Generate a contract for one request payload.

    Args:
        payload: Inbound request, camelCase keys.
        orchestrator: Engine to use. Defaults to the process-wide one.
        settings: Used only when building the default orchestrator.

    Returns:
        (status_code, body) where body follows the wire contract.
    """
    t0 = time.monotonic()
    engine = orchestrator or get_orchestrator(settings)

    if isinstance(payload, GenerateRequestPayload):
        raw: Any = payload.model_dump(by_alias=True, exclude_none=True)
    else:
        raw = payload

    try:
        result = await engine.generate(raw)
    except InvalidRequestError as e:
        return 400, _failure(str(e), e.details or None, t0)

    body = SuccessResponse.from_result(result)
    return 200, body.model_dump(by_alias=True)


def options(
    organization_type: str | None = None,
    transaction_pattern: str | None = None,
    normalizer: RequestNormalizer | None = None,
) -> tuple[int, dict[str, Any]]:
    """List valid catalog values at the next level."""
    t0 = time.monotonic()
    normalizer = normalizer or RequestNormalizer()
    try:
        values = normalizer.options(organization_type, transaction_pattern)
    except InvalidRequestError as e:
        return 400, _failure(str(e), e.details or None, t0)
    return 200, {"success": True, "data": values}


def usage(orchestrator: GenerationOrchestrator | None = None) -> tuple[int, dict[str, Any]]:
    """Provider calls, tokens and estimated cost since the engine started."""
    engine = orchestrator or get_orchestrator()
    return 200, UsageResponse.from_stats(engine.usage()).model_dump(by_alias=True)


def _failure(error: str, details: dict[str, Any] | None, t0: float) -> dict[str, Any]:
    body = FailureResponse(
        error=error,
        details=details,
        processing_time=int((time.monotonic() - t0) * 1000),
    )
    return body.model_dump(by_alias=True, exclude_none=True)
