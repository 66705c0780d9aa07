# src/tracking/attempt_log.py - v2
"""Provider attempt logging for usage and cost tracking.

Attempts are ephemeral: only the most recent ``max_records`` stay in memory
(and can be dumped to a JSON Lines file). Usage totals are folded in as each
attempt is recorded, so they cover every attempt without retaining them.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime
from pathlib import Path

from scgen.llm.models import AttemptOutcome, LLMResponse
from scgen.tracking.cost_calculator import accumulate_usage, compute_attempt_cost
from scgen.tracking.models import ModelPricing, ProviderAttempt, UsageStats

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 1000


class AttemptLog:
    """Bounded window of provider attempts plus running usage totals."""

    def __init__(
        self,
        pricing: dict[str, ModelPricing] | None = None,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        self._records: deque[ProviderAttempt] = deque(maxlen=max_records)
        self._usage = UsageStats()
        self._pricing = pricing

    def record(
        self,
        provider_id: str,
        persona_id: str,
        started_at: datetime,
        duration_ms: int,
        outcome: AttemptOutcome,
        retry_count: int = 0,
        response: LLMResponse | None = None,
        rejected_reason: str | None = None,
    ) -> ProviderAttempt:
        """Record one provider attempt.

        Args:
            provider_id: Provider identifier (e.g. "together").
            persona_id: Persona task the call served.
            started_at: Call start (UTC).
            duration_ms: Wall-clock duration.
            outcome: Classified outcome.
            retry_count: Retries on this provider before this attempt.
            response: Provider response, when one was received.
            rejected_reason: Validation rejection reason, if any.

        Returns:
            The recorded ProviderAttempt.
        """
        attempt = ProviderAttempt(
            provider_id=provider_id,
            persona_id=persona_id,
            started_at=started_at,
            duration_ms=duration_ms,
            outcome=outcome.value,
            retry_count=retry_count,
            model=response.model if response else "",
            input_tokens=response.input_tokens if response else 0,
            output_tokens=response.output_tokens if response else 0,
            rejected_reason=rejected_reason,
        )
        attempt.estimated_cost_usd = compute_attempt_cost(attempt, self._pricing)
        self._records.append(attempt)
        accumulate_usage(self._usage, attempt)
        logger.info(
            "Attempt %s/%s: %s in %dms (retry %d)",
            provider_id, persona_id, attempt.outcome, duration_ms, retry_count,
            extra={"data": attempt.model_dump(mode="json")},
        )
        return attempt

    @property
    def records(self) -> list[ProviderAttempt]:
        """Most recent attempts, oldest first."""
        return list(self._records)

    @property
    def max_records(self) -> int | None:
        return self._records.maxlen

    @property
    def total_tokens(self) -> int:
        return self._usage.total_input_tokens + self._usage.total_output_tokens

    @property
    def total_calls(self) -> int:
        return self._usage.total_calls

    def usage(self) -> UsageStats:
        """Snapshot of running usage totals."""
        return self._usage.model_copy(deep=True)

    def clear(self) -> None:
        self._records.clear()
        self._usage = UsageStats()

    def save(self, path: Path) -> int:
        """Write retained records to a JSON Lines file. Returns the count."""
        path.parent.mkdir(parents=True, exist_ok=True)
        records = list(self._records)
        with path.open("w", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record.model_dump(mode="json")) + "\n")
        return len(records)
