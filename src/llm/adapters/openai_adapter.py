# src/llm/adapters/openai_adapter.py - v2
"""OpenAI-compatible chat-completions adapter.

Serves OpenAI itself and every provider exposing the same API under a
different base URL (Together, OpenRouter, AI/ML API). Uses the official
openai SDK with its built-in retries disabled; retries belong to the chain.
"""

from __future__ import annotations

import time
from typing import Any

from scgen.llm.base_client import BaseLLMClient
from scgen.llm.models import LLMResponse, Message


class OpenAICompatibleAdapter(BaseLLMClient):
    """Adapter for OpenAI-compatible /chat/completions endpoints."""

    def __init__(
        self,
        model: str,
        api_key: str = "",
        base_url: str | None = None,
        provider_id: str = "openai",
        extra_headers: dict[str, str] | None = None,
        timeout_s: float = 60.0,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._base_url = base_url
        self._provider_id = provider_id
        self._extra_headers = dict(extra_headers or {})
        self._timeout_s = timeout_s
        self.__client = None

    @property
    def _client(self):
        """Lazy-init AsyncOpenAI client (only on first API call)."""
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(
                api_key=self._api_key or "missing",
                base_url=self._base_url,
                default_headers=self._extra_headers or None,
                timeout=self._timeout_s,
                max_retries=0,
            )
        return self.__client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        oai_messages: list[dict[str, Any]] = []
        if system:
            oai_messages.append({"role": "system", "content": system})
        for m in messages:
            oai_messages.append({"role": m.role, "content": m.content})

        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(
            model=self._model,
            messages=oai_messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        latency = int((time.monotonic() - t0) * 1000)

        content = ""
        if resp.choices:
            content = resp.choices[0].message.content or ""
        usage = resp.usage
        return LLMResponse(
            content=content,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider=self._provider_id,
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return self._provider_id
