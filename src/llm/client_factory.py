# src/llm/client_factory.py - v3
"""Factory: instantiate an LLM adapter from a ProviderConfig."""

from __future__ import annotations

import logging

from scgen.llm.base_client import BaseLLMClient
from scgen.llm.config import ProviderConfig

logger = logging.getLogger(__name__)

# Registry of provider kind -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "openai_compatible": "scgen.llm.adapters.openai_adapter.OpenAICompatibleAdapter",
    "anthropic": "scgen.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "google": "scgen.llm.adapters.google_adapter.GoogleAdapter",
    "ollama": "scgen.llm.adapters.ollama_adapter.OllamaAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider kind is not registered."""


def create_llm_client(config: ProviderConfig) -> BaseLLMClient:
    """Instantiate the correct adapter for a provider config.

    Raises:
        UnsupportedProviderError: If the provider kind is not registered.
    """
    if config.kind not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported provider kind: {config.kind!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[config.kind])

    logger.debug(
        "Creating LLM client: provider=%s, kind=%s, model=%s",
        config.provider_id, config.kind, config.model,
    )
    return adapter_cls(
        model=config.model,
        api_key=config.api_key,
        base_url=config.base_url,
        provider_id=config.provider_id,
        extra_headers=config.extra_headers,
        timeout_s=config.timeout_s,
    )


def register_provider(kind: str, class_path: str) -> None:
    """Register a custom adapter for a provider kind.

    Args:
        kind: Provider kind identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[kind] = class_path
    logger.info("Registered provider kind: %s -> %s", kind, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    import importlib

    module = importlib.import_module(module_path)
    return getattr(module, class_name)
