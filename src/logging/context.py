# src/logging/context.py - v2
"""Contextual logging support: attach request_id, fingerprint, persona and
provider to log records.

Context variables are copied into each asyncio task, so the three persona
tasks of one request log under their own persona without interfering.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_persona: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "persona", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    fingerprint: str | None = None
    persona: str | None = None
    provider: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        fingerprint=_fingerprint.get(),
        persona=_persona.get(),
        provider=_provider.get(),
    )


def set_request_context(request_id: str, fingerprint: str | None = None) -> None:
    """Set request-level context (called once per generation)."""
    _request_id.set(request_id)
    _fingerprint.set(fingerprint)


def set_fingerprint_context(fingerprint: str) -> None:
    _fingerprint.set(fingerprint)


def set_persona_context(persona: str, provider: str | None = None) -> None:
    """Set task-level context (called per persona task)."""
    _persona.set(persona)
    _provider.set(provider)


def set_provider_context(provider: str | None) -> None:
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _fingerprint.set(None)
    _persona.set(None)
    _provider.set(None)
