# src/llm/adapters/google_adapter.py - v3
"""Google Gemini adapter implementing BaseLLMClient.

Uses google-generativeai SDK. A response whose candidate was blocked by a
safety filter carries no text; it is surfaced as an empty completion so the
chain moves on to the next provider.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from scgen.core.errors import ProviderAuthError
from scgen.llm.base_client import BaseLLMClient
from scgen.llm.models import LLMResponse, Message

logger = logging.getLogger(__name__)


class GoogleAdapter(BaseLLMClient):
    """Gemini models through the GenerativeModel API."""

    def __init__(
        self,
        model: str = "gemini-1.5-pro",
        api_key: str = "",
        provider_id: str = "google",
        timeout_s: float = 60.0,
        **kwargs: Any,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._provider_id = provider_id
        self._timeout_s = timeout_s
        self._configured = False

    def _generative_model(self, system: str | None) -> Any:
        import google.generativeai as genai

        if not self._api_key:
            raise ProviderAuthError(self._provider_id, "GOOGLE_API_KEY is not set")
        if not self._configured:
            genai.configure(api_key=self._api_key)
            self._configured = True
        return genai.GenerativeModel(self._model, system_instruction=system)

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        model = self._generative_model(system)
        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages
            if m.role != "system"
        ]

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            contents,
            generation_config={"max_output_tokens": max_tokens, "temperature": temperature},
            request_options={"timeout": self._timeout_s},
        )
        latency = int((time.monotonic() - t0) * 1000)

        try:
            text = resp.text or ""
        except ValueError:
            feedback = getattr(resp, "prompt_feedback", None)
            logger.warning("Gemini returned no text (%s)", getattr(feedback, "block_reason", "blocked"))
            text = ""

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=text,
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            model=self._model,
            provider=self._provider_id,
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return self._provider_id
