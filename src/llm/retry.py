# src/llm/retry.py - v2
"""Error classification and exponential backoff for provider calls.

Auth and invalid-request failures are never retried on the same provider.
Rate limits, timeouts and transport failures are retried with backoff.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass

from scgen.core.errors import (
    ProviderAuthError,
    ProviderInvalidRequest,
    ProviderRateLimited,
    ProviderTimeout,
    ProviderTransportError,
)
from scgen.llm.models import AttemptOutcome


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff: base * factor**attempt, capped."""

    base_delay_s: float = 1.0
    backoff_factor: float = 2.0
    max_delay_s: float = 8.0
    jitter: bool = False

    def delay(self, attempt: int) -> float:
        """Delay before retry number `attempt` (0-based)."""
        delay = self.base_delay_s * (self.backoff_factor ** attempt)
        if self.jitter:
            delay *= 0.5 + random.random()  # noqa: S311
        return min(delay, self.max_delay_s)


# Typed errors raised by adapters or custom providers.
_TYPED_OUTCOMES: tuple[tuple[type[BaseException], AttemptOutcome], ...] = (
    (ProviderAuthError, AttemptOutcome.AUTH_ERROR),
    (ProviderRateLimited, AttemptOutcome.RATE_LIMITED),
    (ProviderTimeout, AttemptOutcome.TIMEOUT),
    (ProviderInvalidRequest, AttemptOutcome.INVALID_REQUEST),
    (ProviderTransportError, AttemptOutcome.TRANSPORT_ERROR),
)

_AUTH_STATUS = {401, 403}
_INVALID_STATUS = {400, 404, 413, 422}


def _status_code(error: BaseException) -> int | None:
    for attr in ("status_code", "code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and 100 <= value < 600:
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value
    return None


def classify_error(error: BaseException) -> AttemptOutcome:
    """Classify a provider exception into an attempt outcome."""
    for error_type, outcome in _TYPED_OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return AttemptOutcome.TIMEOUT

    status = _status_code(error)
    if status is not None:
        if status in _AUTH_STATUS:
            return AttemptOutcome.AUTH_ERROR
        if status == 429:
            return AttemptOutcome.RATE_LIMITED
        if status == 408:
            return AttemptOutcome.TIMEOUT
        if status in _INVALID_STATUS:
            return AttemptOutcome.INVALID_REQUEST
        if status >= 500:
            return AttemptOutcome.TRANSPORT_ERROR

    name = type(error).__name__.lower()
    msg = str(error).lower()

    if "authentication" in name or "permission" in name or "unauthorized" in msg \
            or "invalid api key" in msg:
        return AttemptOutcome.AUTH_ERROR
    if "ratelimit" in name or "429" in msg or "rate limit" in msg:
        return AttemptOutcome.RATE_LIMITED
    if "timeout" in name or "timed out" in msg or "timeout" in msg:
        return AttemptOutcome.TIMEOUT
    if "badrequest" in name or "unprocessable" in name or "notfound" in name:
        return AttemptOutcome.INVALID_REQUEST
    return AttemptOutcome.TRANSPORT_ERROR
