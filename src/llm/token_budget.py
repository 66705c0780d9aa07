# src/llm/token_budget.py - v3
"""Token budget per persona and clamping to provider ceilings."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_PERSONA_BUDGETS: dict[str, int] = {
    "analysis": 4000,
    "synthesis": 8000,
    "risk_review": 4000,
}


def persona_budget(persona_id: str, budgets: dict[str, int] | None = None) -> int:
    """Max output tokens for a persona. Missing or non-positive entries use the default."""
    configured = (budgets or {}).get(persona_id)
    if configured is not None and configured > 0:
        return configured
    return DEFAULT_PERSONA_BUDGETS.get(persona_id, DEFAULT_PERSONA_BUDGETS["analysis"])


def clamp_max_tokens(requested: int, ceiling: int) -> int:
    """Clamp a task's max_tokens to a provider ceiling (minimum 1)."""
    if requested > ceiling:
        logger.debug("Clamping max_tokens %d to provider ceiling %d", requested, ceiling)
        return max(1, ceiling)
    return max(1, requested)
