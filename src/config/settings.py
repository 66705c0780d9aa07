# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, retry/backoff policy,
persona budgets, cache policy and logging.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scgen.core.errors import ConfigurationError

KNOWN_PROVIDERS = ("together", "openrouter", "aiml", "openai", "anthropic", "google", "ollama")


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === PROVIDERS ===
    # Comma-separated priority order; providers without credentials are skipped.
    provider_order: str = "together,openrouter,aiml"

    together_api_key: str = ""
    together_base_url: str = "https://api.together.xyz/v1"
    together_model: str = "meta-llama/Llama-3.3-70B-Instruct-Turbo"

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "meta-llama/llama-3.3-70b-instruct"
    openrouter_referer: str = "http://localhost:3000"

    aiml_api_key: str = ""
    aiml_base_url: str = "https://api.aimlapi.com/v1"
    aiml_model: str = "meta-llama/Llama-3.3-70B-Instruct-Turbo"

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"

    google_api_key: str = ""
    google_model: str = "gemini-1.5-pro"

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"
    ollama_enabled: bool = False

    # === Retry / timeouts ===
    provider_max_retries: int = 2
    provider_timeout_s: float = 60.0
    provider_max_output_tokens: int = 8000
    backoff_base_s: float = 1.0
    backoff_factor: float = 2.0
    backoff_cap_s: float = 8.0

    # === Personas ===
    persona_temperature: float = 0.7
    analysis_max_tokens: int = 4000
    synthesis_max_tokens: int = 8000
    risk_review_max_tokens: int = 4000

    # === Pipeline ===
    pipeline_mode: Literal["concurrent", "sequential"] = "concurrent"
    task_deadline_s: float = 180.0

    # === Validation ===
    synthesis_min_length: int = 500
    prose_min_length: int = 50

    # === Templates ===
    template_schema_version: str = "0.8.20"

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["memory", "sqlite", "redis"] = "memory"
    cache_root: Path = Path("~/.scgen/cache")
    cache_redis_url: str = ""
    cache_ttl_days: float = 7.0
    # JSON object: {"Equity Tokenization": 30, ...} (days)
    cache_ttl_overrides: str = ""
    cache_max_entries: int = 1000
    cache_single_flight: bool = True
    # JSON object of tracked dependency -> version recorded on each entry.
    dependency_versions: str = (
        '{"@openzeppelin/contracts": "5.0.0", '
        '"@openzeppelin/contracts-upgradeable": "5.0.0"}'
    )
    dependency_lookup: Literal["static", "npm"] = "static"
    npm_registry_url: str = "https://registry.npmjs.org"

    # === Tracking ===
    # Recent provider attempts kept in memory; usage totals are not bounded by it.
    attempt_log_max_records: int = 1000

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("provider_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("provider_max_retries must be >= 0")
        return v

    @field_validator("attempt_log_max_records")
    @classmethod
    def validate_attempt_log_size(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("attempt_log_max_records must be >= 0")
        return v

    @field_validator("cache_max_entries")
    @classmethod
    def validate_max_entries(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("cache_max_entries must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        unknown = [p for p in self.provider_order_list if p not in KNOWN_PROVIDERS]
        if unknown:
            errors.append(f"PROVIDER_ORDER has unknown providers: {', '.join(unknown)}")

        if self.backoff_cap_s < self.backoff_base_s:
            errors.append("BACKOFF_CAP_S must be >= BACKOFF_BASE_S")

        if self.task_deadline_s <= 0 or self.provider_timeout_s <= 0:
            errors.append("TASK_DEADLINE_S and PROVIDER_TIMEOUT_S must be > 0")

        if self.cache_ttl_days <= 0:
            errors.append("CACHE_TTL_DAYS must be > 0")

        for name in ("cache_ttl_overrides", "dependency_versions"):
            raw = getattr(self, name)
            if not raw:
                continue
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                errors.append(f"{name.upper()} is not valid JSON")
                continue
            if not isinstance(parsed, dict):
                errors.append(f"{name.upper()} must be a JSON object")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def provider_order_list(self) -> list[str]:
        """Parse comma-separated provider order."""
        return [p.strip().lower() for p in self.provider_order.split(",") if p.strip()]

    @property
    def cache_ttl_s(self) -> float:
        """Default cache TTL in seconds."""
        return self.cache_ttl_days * 86400

    @property
    def cache_ttl_overrides_s(self) -> dict[str, float]:
        """Per-category TTL overrides in seconds."""
        if not self.cache_ttl_overrides:
            return {}
        return {
            k: float(v) * 86400 for k, v in json.loads(self.cache_ttl_overrides).items()
        }

    @property
    def dependency_versions_map(self) -> dict[str, str]:
        """Tracked dependency versions recorded on cache entries."""
        if not self.dependency_versions:
            return {}
        return {str(k): str(v) for k, v in json.loads(self.dependency_versions).items()}

    @property
    def persona_max_tokens(self) -> dict[str, int]:
        """Token budget per persona."""
        return {
            "analysis": self.analysis_max_tokens,
            "synthesis": self.synthesis_max_tokens,
            "risk_review": self.risk_review_max_tokens,
        }


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Key-value pairs to override .env values.

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If validation rules fail.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
