# src/core/errors.py - v1
"""Exception hierarchy for the generation engine.

Only InvalidRequestError (and its subclasses) ever reaches a caller of
GenerationOrchestrator.generate(). Every other error is converted into an
attempt outcome or a degraded result inside the engine.
"""

from __future__ import annotations

from typing import Any


class ScgenError(Exception):
    """Base class for all scgen errors."""


# --- Request errors (user-visible) ---


class InvalidRequestError(ScgenError):
    """The request cannot be served as given."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.details = details or {}
        super().__init__(message)


class MissingFieldError(InvalidRequestError):
    """A required request field is absent or blank."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}", {"field": field})


class InvalidCombinationError(InvalidRequestError):
    """The (organization, transaction, category) triple is not in the catalog."""

    def __init__(
        self,
        organization_type: str,
        transaction_pattern: str,
        artifact_category: str,
        valid_options: list[str],
        level: str,
    ):
        self.organization_type = organization_type
        self.transaction_pattern = transaction_pattern
        self.artifact_category = artifact_category
        self.valid_options = valid_options
        self.level = level
        super().__init__(
            f"Invalid combination: {organization_type} / {transaction_pattern} / "
            f"{artifact_category} (unknown {level})",
            {"level": level, "validOptions": valid_options},
        )


# --- Provider errors (internal) ---


class ProviderError(ScgenError):
    """A provider call failed."""

    def __init__(self, provider_id: str, message: str):
        self.provider_id = provider_id
        super().__init__(f"[{provider_id}] {message}")


class ProviderAuthError(ProviderError):
    """Credentials rejected (401/403)."""


class ProviderRateLimited(ProviderError):
    """Provider throttled the call (429)."""


class ProviderTimeout(ProviderError):
    """Call exceeded its per-attempt timeout."""


class ProviderTransportError(ProviderError):
    """Connection failure or 5xx."""


class ProviderInvalidRequest(ProviderError):
    """Provider rejected the payload (400/404/422)."""


class ValidationRejected(ScgenError):
    """Returned content failed the completeness heuristics."""

    def __init__(self, persona_id: str, reason: str):
        self.persona_id = persona_id
        self.reason = reason
        super().__init__(f"{persona_id} output rejected: {reason}")


class AllProvidersFailed(ScgenError):
    """Every provider in the chain failed for one persona task."""

    def __init__(
        self,
        persona_id: str,
        attempts: list[Any] | None = None,
        rejections: list[str] | None = None,
    ):
        self.persona_id = persona_id
        self.attempts = list(attempts or [])
        self.rejections = list(rejections or [])
        super().__init__(
            f"All providers failed for '{persona_id}' after {len(self.attempts)} attempts"
        )


# --- Configuration ---


class ConfigurationError(ScgenError):
    """Settings are internally inconsistent."""
