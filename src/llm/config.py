# src/llm/config.py - v1
"""Explicit per-provider configuration.

ProviderConfig is built once from Settings and handed to each client;
nothing downstream reads credentials from the environment.

Resolution order for the chain:
  1. PROVIDER_ORDER (comma-separated, highest priority first)
  2. Providers without credentials are skipped (ollama needs OLLAMA_ENABLED)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from scgen.config.settings import Settings

logger = logging.getLogger(__name__)

ProviderKind = Literal["openai_compatible", "anthropic", "google", "ollama"]


@dataclass(frozen=True)
class ProviderConfig:
    """Everything a ProviderClient needs to call one provider."""

    provider_id: str
    kind: ProviderKind
    model: str
    api_key: str = ""
    base_url: str | None = None
    priority: int = 0
    max_retries: int = 2
    timeout_s: float = 60.0
    max_output_tokens: int = 8000
    temperature: float = 0.7
    extra_headers: dict[str, str] = field(default_factory=dict)


def build_provider_configs(settings: Settings) -> list[ProviderConfig]:
    """Ordered provider configs for every configured provider.

    Returns:
        ProviderConfigs sorted by priority (0 = tried first).
    """
    configs: list[ProviderConfig] = []
    for priority, provider_id in enumerate(settings.provider_order_list):
        config = _build_one(provider_id, priority, settings)
        if config is None:
            logger.debug("Provider %s not configured, skipping", provider_id)
            continue
        configs.append(config)
    return configs


def _build_one(provider_id: str, priority: int, s: Settings) -> ProviderConfig | None:
    common = {
        "priority": priority,
        "max_retries": s.provider_max_retries,
        "timeout_s": s.provider_timeout_s,
        "max_output_tokens": s.provider_max_output_tokens,
        "temperature": s.persona_temperature,
    }
    if provider_id == "together" and s.together_api_key:
        return ProviderConfig(
            provider_id="together", kind="openai_compatible", model=s.together_model,
            api_key=s.together_api_key, base_url=s.together_base_url, **common,
        )
    if provider_id == "openrouter" and s.openrouter_api_key:
        return ProviderConfig(
            provider_id="openrouter", kind="openai_compatible", model=s.openrouter_model,
            api_key=s.openrouter_api_key, base_url=s.openrouter_base_url,
            extra_headers={"HTTP-Referer": s.openrouter_referer, "X-Title": "scgen"},
            **common,
        )
    if provider_id == "aiml" and s.aiml_api_key:
        return ProviderConfig(
            provider_id="aiml", kind="openai_compatible", model=s.aiml_model,
            api_key=s.aiml_api_key, base_url=s.aiml_base_url, **common,
        )
    if provider_id == "openai" and s.openai_api_key:
        return ProviderConfig(
            provider_id="openai", kind="openai_compatible", model=s.openai_model,
            api_key=s.openai_api_key, **common,
        )
    if provider_id == "anthropic" and s.anthropic_api_key:
        return ProviderConfig(
            provider_id="anthropic", kind="anthropic", model=s.anthropic_model,
            api_key=s.anthropic_api_key, **common,
        )
    if provider_id == "google" and s.google_api_key:
        return ProviderConfig(
            provider_id="google", kind="google", model=s.google_model,
            api_key=s.google_api_key, **common,
        )
    if provider_id == "ollama" and s.ollama_enabled:
        return ProviderConfig(
            provider_id="ollama", kind="ollama", model=s.ollama_model,
            base_url=s.ollama_base_url, **common,
        )
    return None
