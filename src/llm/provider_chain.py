# src/llm/provider_chain.py - v1
"""Ordered provider fallback with per-provider retry and validation.

Per provider, in priority order:
  auth_error / invalid_request  -> next provider, no retry
  rate_limited / timeout / transport_error -> retry with backoff up to
      max_retries, then next provider
  empty_result                  -> next provider
  success                       -> validate; reject -> next provider
When every provider is exhausted, AllProvidersFailed is raised.

Fallback state is local to one run() call, so concurrent persona tasks
never share it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from scgen.core.errors import AllProvidersFailed, ValidationRejected
from scgen.core.models import PersonaTask
from scgen.llm.models import AttemptOutcome, ChainResult
from scgen.llm.provider_client import ProviderClient
from scgen.llm.retry import BackoffPolicy
from scgen.logging.context import set_persona_context, set_provider_context
from scgen.tracking.attempt_log import AttemptLog
from scgen.tracking.models import ProviderAttempt
from scgen.validation.content_validator import ContentValidator

logger = logging.getLogger(__name__)


class ProviderChain:
    """Drives one persona task across providers until valid content arrives."""

    def __init__(
        self,
        clients: list[ProviderClient],
        validator: ContentValidator,
        backoff: BackoffPolicy | None = None,
        attempt_log: AttemptLog | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._clients = sorted(clients, key=lambda c: c.config.priority)
        self._validator = validator
        self._backoff = backoff or BackoffPolicy()
        self._attempt_log = attempt_log or AttemptLog()
        self._sleep = sleep

    @property
    def provider_ids(self) -> list[str]:
        return [c.provider_id for c in self._clients]

    @property
    def attempt_log(self) -> AttemptLog:
        return self._attempt_log

    async def run(self, task: PersonaTask) -> ChainResult:
        """Run a persona task through the chain.

        Raises:
            AllProvidersFailed: No provider produced content that validated.
        """
        set_persona_context(task.persona_id)
        attempts: list[ProviderAttempt] = []
        rejections: list[str] = []

        for client in self._clients:
            set_provider_context(client.provider_id)
            content = await self._run_provider(client, task, attempts, rejections)
            if content is not None:
                logger.info(
                    "Persona %s served by %s after %d attempts",
                    task.persona_id, client.provider_id, len(attempts),
                )
                return ChainResult(
                    persona_id=task.persona_id,
                    content=content,
                    provider_id=client.provider_id,
                    attempts=attempts,
                    rejections=rejections,
                )

        set_provider_context(None)
        logger.warning(
            "All providers failed for %s (%d attempts, %d rejections)",
            task.persona_id, len(attempts), len(rejections),
        )
        raise AllProvidersFailed(task.persona_id, attempts, rejections)

    async def _run_provider(
        self,
        client: ProviderClient,
        task: PersonaTask,
        attempts: list[ProviderAttempt],
        rejections: list[str],
    ) -> str | None:
        retries = 0
        while True:
            started_at = datetime.now(timezone.utc)
            t0 = time.monotonic()
            outcome = await client.invoke(task)
            duration_ms = int((time.monotonic() - t0) * 1000)

            content: str | None = None
            rejected: str | None = None
            if outcome.kind is AttemptOutcome.SUCCESS:
                try:
                    content = self._validator.check(outcome.text, task.persona_id)
                except ValidationRejected as e:
                    rejected = e.reason
                    rejections.append(f"{client.provider_id}: {e.reason}")
                    logger.warning(
                        "Rejected %s output from %s: %s",
                        task.persona_id, client.provider_id, e.reason,
                    )

            attempts.append(self._attempt_log.record(
                provider_id=client.provider_id,
                persona_id=task.persona_id,
                started_at=started_at,
                duration_ms=duration_ms,
                outcome=outcome.kind,
                retry_count=retries,
                response=outcome.response,
                rejected_reason=rejected,
            ))

            if content is not None:
                return content
            if outcome.kind.retryable and retries < client.config.max_retries:
                delay = self._backoff.delay(retries)
                retries += 1
                logger.warning(
                    "Provider %s %s (retry %d/%d), retrying in %.1fs",
                    client.provider_id, outcome.kind.value,
                    retries, client.config.max_retries, delay,
                )
                await self._sleep(delay)
                continue
            return None
