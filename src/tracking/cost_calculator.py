# src/tracking/cost_calculator.py - v3
"""Cost calculation and usage accumulation for provider attempts."""

from __future__ import annotations

from scgen.tracking.models import ModelPricing, ProviderAttempt, ProviderStats, UsageStats

# Default pricing per 1M tokens. Unknown models cost 0.
DEFAULT_PRICING: dict[str, ModelPricing] = {
    "meta-llama/Llama-3.3-70B-Instruct-Turbo": ModelPricing(
        model="meta-llama/Llama-3.3-70B-Instruct-Turbo",
        input_price_per_1m=0.88, output_price_per_1m=0.88,
    ),
    "meta-llama/llama-3.3-70b-instruct": ModelPricing(
        model="meta-llama/llama-3.3-70b-instruct",
        input_price_per_1m=0.12, output_price_per_1m=0.30,
    ),
    "gpt-4o-mini": ModelPricing(
        model="gpt-4o-mini",
        input_price_per_1m=0.15, output_price_per_1m=0.60,
    ),
    "claude-sonnet-4-20250514": ModelPricing(
        model="claude-sonnet-4-20250514",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "gemini-1.5-pro": ModelPricing(
        model="gemini-1.5-pro",
        input_price_per_1m=1.25, output_price_per_1m=5.0,
    ),
}


def compute_attempt_cost(
    attempt: ProviderAttempt, pricing: dict[str, ModelPricing] | None = None,
) -> float:
    """Compute estimated cost for a single attempt in USD."""
    pricing = pricing or DEFAULT_PRICING
    p = pricing.get(attempt.model)
    if p is None:
        return 0.0
    return (attempt.input_tokens * p.input_price_per_1m / 1_000_000
            + attempt.output_tokens * p.output_price_per_1m / 1_000_000)


def accumulate_usage(usage: UsageStats, attempt: ProviderAttempt) -> None:
    """Fold one priced attempt into running totals, in place.

    A successful call whose output was rejected counts as a failure.
    """
    usage.total_calls += 1
    usage.total_input_tokens += attempt.input_tokens
    usage.total_output_tokens += attempt.output_tokens
    usage.estimated_cost_usd += attempt.estimated_cost_usd

    stats = usage.providers.get(attempt.provider_id)
    if stats is None:
        stats = usage.providers[attempt.provider_id] = ProviderStats(provider_id=attempt.provider_id)
    stats.total_calls += 1
    if attempt.outcome == "success" and attempt.rejected_reason is None:
        stats.successes += 1
    else:
        stats.failures += 1
    stats.total_input_tokens += attempt.input_tokens
    stats.total_output_tokens += attempt.output_tokens
    stats.avg_latency_ms += (attempt.duration_ms - stats.avg_latency_ms) / stats.total_calls
    stats.estimated_cost_usd += attempt.estimated_cost_usd
    stats.outcomes[attempt.outcome] = stats.outcomes.get(attempt.outcome, 0) + 1
