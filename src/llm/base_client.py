# src/llm/base_client.py - v1
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from scgen.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all chat-completion providers.

    Adapters let SDK exceptions escape; ProviderClient classifies them.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Text completion."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (together, openrouter, anthropic, ...)."""
