# src/llm/provider_client.py - v1
"""Single-provider invocation with outcome classification.

ProviderClient never raises for provider failures: every call returns a
ProviderOutcome. Cancellation still propagates.
"""

from __future__ import annotations

import asyncio
import logging

from scgen.core.models import PersonaTask
from scgen.llm.base_client import BaseLLMClient
from scgen.llm.client_factory import create_llm_client
from scgen.llm.config import ProviderConfig
from scgen.llm.models import AttemptOutcome, Message, ProviderOutcome
from scgen.llm.retry import classify_error
from scgen.llm.token_budget import clamp_max_tokens

logger = logging.getLogger(__name__)

# Responses shorter than this are treated as empty.
MIN_RESPONSE_CHARS = 50


class ProviderClient:
    """Wraps one adapter with its ProviderConfig."""

    def __init__(self, config: ProviderConfig, llm: BaseLLMClient | None = None) -> None:
        self.config = config
        self._llm = llm if llm is not None else create_llm_client(config)

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    async def invoke(self, task: PersonaTask, timeout: float | None = None) -> ProviderOutcome:
        """Send one persona task to the provider.

        Args:
            task: Persona task with instruction prefix, prompt and budget.
            timeout: Per-call timeout in seconds (defaults to config.timeout_s).

        Returns:
            ProviderOutcome classifying the call.
        """
        timeout = timeout if timeout is not None else self.config.timeout_s
        max_tokens = clamp_max_tokens(task.max_tokens, self.config.max_output_tokens)
        try:
            response = await asyncio.wait_for(
                self._llm.complete(
                    [Message(role="user", content=task.prompt_body)],
                    system=task.instruction_prefix,
                    max_tokens=max_tokens,
                    temperature=self.config.temperature,
                ),
                timeout=timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            kind = classify_error(e)
            logger.warning(
                "Provider %s failed for %s: %s (%s)",
                self.provider_id, task.persona_id, kind.value, e,
            )
            return ProviderOutcome(kind=kind, error=str(e) or type(e).__name__)

        text = (response.content or "").strip()
        if len(text) < MIN_RESPONSE_CHARS:
            return ProviderOutcome(
                kind=AttemptOutcome.EMPTY_RESULT,
                text=text,
                error="empty or too short response",
                response=response,
            )
        return ProviderOutcome(kind=AttemptOutcome.SUCCESS, text=text, response=response)
