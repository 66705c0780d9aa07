# src/llm/adapters/anthropic_adapter.py - v4
"""Anthropic Claude adapter implementing BaseLLMClient.

Uses the official anthropic SDK (Messages API). SDK retries are disabled so
that backoff stays under ProviderClient's control.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from scgen.core.errors import ProviderAuthError
from scgen.llm.base_client import BaseLLMClient
from scgen.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseLLMClient):
    """Adapter for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        provider_id: str = "anthropic",
        timeout_s: float = 60.0,
        **kwargs: Any,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._provider_id = provider_id
        self._timeout_s = timeout_s
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            if not self._api_key:
                raise ProviderAuthError(self._provider_id, "ANTHROPIC_API_KEY is not set")
            import anthropic

            self.__client = anthropic.AsyncAnthropic(
                api_key=self._api_key, timeout=self._timeout_s, max_retries=0,
            )
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        # The Messages API takes system text separately from the turns.
        system_parts = [system] if system else []
        system_parts.extend(m.content for m in messages if m.role == "system")
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [
                {"role": m.role, "content": m.content} for m in messages if m.role != "system"
            ],
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)

        start = time.monotonic()
        response = await self._client.messages.create(**kwargs)
        latency_ms = int((time.monotonic() - start) * 1000)

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning(
                "%s stopped at max_tokens=%d, output may be cut short", self._provider_id, max_tokens,
            )

        return LLMResponse(
            content=self._extract_content(response),
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            provider=self._provider_id,
            latency_ms=latency_ms,
            raw_response=response,
        )

    @property
    def provider_name(self) -> str:
        return self._provider_id

    @staticmethod
    def _extract_content(response: Any) -> str:
        return "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
