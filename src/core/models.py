# src/core/models.py - v1
"""Core domain models shared across request, pipeline, analysis and cache.

GenerationRequest is the normalized, immutable request. GenerationResult is
what the orchestrator returns and what the cache stores.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PersonaId = Literal["analysis", "synthesis", "risk_review"]

PERSONA_IDS: tuple[PersonaId, ...] = ("analysis", "synthesis", "risk_review")


class Severity(str, Enum):
    """Finding severity, ordered low to critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GenerationRequest(BaseModel):
    """Normalized request. Built only by RequestNormalizer."""

    model_config = ConfigDict(frozen=True)

    organization_type: str
    transaction_pattern: str
    artifact_category: str
    customizations: dict[str, Any] = Field(default_factory=dict)


class TemplateAssembly(BaseModel):
    """Output of the template assembler."""

    fallback_artifact: str
    grounding_context: str
    fallback_analysis: str
    fallback_risk_review: str


class PersonaTask(BaseModel):
    """One unit of provider work (a persona's prompt)."""

    persona_id: PersonaId
    instruction_prefix: str
    max_tokens: int
    prompt_body: str


class Finding(BaseModel):
    """Security finding from the risk-review text or a scanner."""

    severity: Severity
    description: str
    location: str | None = None


class GasReport(BaseModel):
    """Per-function gas estimate with optimization hints."""

    function_name: str
    estimated_gas: int
    recommendations: list[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Composite result of one generation."""

    analysis_text: str
    artifact_text: str
    findings: list[Finding] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    gas_analysis: list[GasReport] = Field(default_factory=list)
    from_cache: bool = False
    processing_time_ms: int = 0
    degraded: dict[str, bool] = Field(default_factory=dict)
    providers: dict[str, str | None] = Field(default_factory=dict)
    fingerprint: str = ""

    @property
    def fully_degraded(self) -> bool:
        """True when no persona task got a validated provider answer."""
        return bool(self.degraded) and all(self.degraded.values())
