# src/llm/models.py - v1
"""LLM-specific types: Message, LLMResponse, attempt outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from scgen.tracking.models import ProviderAttempt


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int
    output_tokens: int
    model: str
    provider: str
    latency_ms: int
    raw_response: Any = None


class AttemptOutcome(str, Enum):
    """Classification of one provider call."""

    SUCCESS = "success"
    EMPTY_RESULT = "empty_result"
    RATE_LIMITED = "rate_limited"
    AUTH_ERROR = "auth_error"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    INVALID_REQUEST = "invalid_request"

    @property
    def retryable(self) -> bool:
        """Transient failures are retried on the same provider."""
        return self in _RETRYABLE


_RETRYABLE = frozenset({
    AttemptOutcome.RATE_LIMITED,
    AttemptOutcome.TIMEOUT,
    AttemptOutcome.TRANSPORT_ERROR,
})


class ProviderOutcome(BaseModel):
    """Result of ProviderClient.invoke()."""

    kind: AttemptOutcome
    text: str = ""
    error: str | None = None
    response: LLMResponse | None = None


class ChainResult(BaseModel):
    """Validated content from the first provider that produced it."""

    persona_id: str
    content: str
    provider_id: str
    attempts: list[ProviderAttempt] = Field(default_factory=list)
    rejections: list[str] = Field(default_factory=list)
