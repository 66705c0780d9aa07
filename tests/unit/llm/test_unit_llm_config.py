# tests/unit/llm/test_unit_llm_config.py - v1
"""Tests for llm/config.py, llm/client_factory.py and llm/token_budget.py."""

from __future__ import annotations

import pytest

from scgen.config.settings import Settings
from scgen.llm.client_factory import (
    UnsupportedProviderError,
    _PROVIDER_REGISTRY,
    create_llm_client,
    register_provider,
)
from scgen.llm.config import ProviderConfig, build_provider_configs
from scgen.llm.token_budget import clamp_max_tokens, persona_budget


class TestBuildProviderConfigs:
    def test_no_credentials_no_providers(self):
        assert build_provider_configs(Settings(_env_file=None)) == []

    def test_order_and_priority(self):
        s = Settings(
            _env_file=None,
            provider_order="aiml,together",
            together_api_key="t-key",
            aiml_api_key="a-key",
        )
        configs = build_provider_configs(s)
        assert [c.provider_id for c in configs] == ["aiml", "together"]
        assert [c.priority for c in configs] == [0, 1]
        assert configs[1].base_url == "https://api.together.xyz/v1"
        assert configs[0].kind == "openai_compatible"

    def test_skipped_provider_keeps_gaps(self):
        s = Settings(_env_file=None, provider_order="together,openrouter", openrouter_api_key="o")
        (config,) = build_provider_configs(s)
        assert config.provider_id == "openrouter"
        assert config.priority == 1
        assert config.extra_headers["HTTP-Referer"] == "http://localhost:3000"

    def test_retry_and_timeout_settings_flow_through(self):
        s = Settings(
            _env_file=None,
            provider_order="anthropic",
            anthropic_api_key="k",
            provider_max_retries=5,
            provider_timeout_s=12.0,
        )
        (config,) = build_provider_configs(s)
        assert config.kind == "anthropic"
        assert config.max_retries == 5
        assert config.timeout_s == 12.0

    def test_ollama_needs_enabled_flag(self):
        s = Settings(_env_file=None, provider_order="ollama")
        assert build_provider_configs(s) == []
        s = Settings(_env_file=None, provider_order="ollama", ollama_enabled=True)
        assert build_provider_configs(s)[0].kind == "ollama"


class TestClientFactory:
    def test_openai_compatible(self):
        client = create_llm_client(ProviderConfig(
            provider_id="together", kind="openai_compatible", model="m", api_key="k",
            base_url="https://api.together.xyz/v1",
        ))
        assert client.provider_name == "together"

    def test_unsupported_kind(self):
        config = ProviderConfig(provider_id="x", kind="nope", model="m")  # type: ignore[arg-type]
        with pytest.raises(UnsupportedProviderError, match="nope"):
            create_llm_client(config)

    def test_register_provider(self):
        register_provider(
            "custom", "scgen.llm.adapters.ollama_adapter.OllamaAdapter",
        )
        try:
            client = create_llm_client(ProviderConfig(
                provider_id="custom", kind="custom", model="m",  # type: ignore[arg-type]
                base_url="http://localhost:11434",
            ))
            assert client.provider_name == "custom"
        finally:
            _PROVIDER_REGISTRY.pop("custom", None)


class TestTokenBudget:
    def test_clamp(self):
        assert clamp_max_tokens(9000, 8000) == 8000
        assert clamp_max_tokens(4000, 8000) == 4000
        assert clamp_max_tokens(0, 8000) == 1

    def test_persona_budget_defaults(self):
        assert persona_budget("synthesis") == 8000
        assert persona_budget("analysis") == 4000

    def test_persona_budget_from_settings(self):
        s = Settings(_env_file=None, risk_review_max_tokens=1234)
        assert persona_budget("risk_review", s.persona_max_tokens) == 1234

    def test_non_positive_budget_uses_default(self):
        assert persona_budget("synthesis", {"synthesis": 0}) == 8000
        assert persona_budget("unknown", {}) == 4000
