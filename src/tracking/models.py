# src/tracking/models.py - v1
"""Tracking domain models: ProviderAttempt, ModelPricing, UsageStats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

OutcomeName = Literal[
    "success",
    "empty_result",
    "rate_limited",
    "auth_error",
    "timeout",
    "transport_error",
    "invalid_request",
]


class ProviderAttempt(BaseModel):
    """One provider call, including its retries so far."""

    provider_id: str
    persona_id: str
    started_at: datetime
    duration_ms: int
    outcome: OutcomeName
    retry_count: int = 0
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    rejected_reason: str | None = None
    estimated_cost_usd: float = 0.0


class ModelPricing(BaseModel):
    """Per-model pricing in USD per 1M tokens."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float


class ProviderStats(BaseModel):
    """Per-provider aggregated stats."""

    provider_id: str
    total_calls: int = 0
    successes: int = 0
    failures: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    avg_latency_ms: float = 0.0
    estimated_cost_usd: float = 0.0
    outcomes: dict[str, int] = Field(default_factory=dict)


class UsageStats(BaseModel):
    """Usage totals since the log was created or last cleared."""

    total_calls: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost_usd: float = 0.0
    providers: dict[str, ProviderStats] = Field(default_factory=dict)
