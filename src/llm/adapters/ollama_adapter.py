# src/llm/adapters/ollama_adapter.py - v3
"""Ollama local model adapter implementing BaseLLMClient.

Uses the ollama SDK's AsyncClient. `ollama.ResponseError` carries the HTTP
status_code, which retry.classify_error reads directly.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from scgen.llm.base_client import BaseLLMClient
from scgen.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)


class OllamaAdapter(BaseLLMClient):
    """Local inference over an Ollama server."""

    def __init__(
        self,
        model: str = "llama3",
        base_url: str | None = "http://localhost:11434",
        provider_id: str = "ollama",
        timeout_s: float = 60.0,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._host = base_url or "http://localhost:11434"
        self._provider_id = provider_id
        self._timeout_s = timeout_s
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            import ollama

            self._client = ollama.AsyncClient(host=self._host, timeout=self._timeout_s)
        return self._client

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        chat: list[dict[str, str]] = []
        if system:
            chat.append({"role": "system", "content": system})
        chat.extend({"role": m.role, "content": m.content} for m in messages)

        t0 = time.monotonic()
        resp = await self._get_client().chat(
            model=self._model,
            messages=chat,
            options={"num_predict": max_tokens, "temperature": temperature},
        )
        latency = int((time.monotonic() - t0) * 1000)

        if resp.get("done_reason") == "length":
            logger.warning("Ollama output hit num_predict=%d, content may be truncated", max_tokens)

        return LLMResponse(
            content=resp["message"]["content"] or "",
            input_tokens=resp.get("prompt_eval_count") or 0,
            output_tokens=resp.get("eval_count") or 0,
            model=self._model,
            provider=self._provider_id,
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return self._provider_id
