# src/api/models.py - v3
"""Wire models for the generate and usage endpoints.

Field names on the wire are camelCase; Python attributes stay snake_case.
Serialize with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from scgen.core.models import Finding, GasReport, GenerationResult
from scgen.tracking.models import UsageStats


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateRequestPayload(_WireModel):
    """Inbound payload. Every field is optional here; the normalizer decides."""

    organization_type: str | None = Field(default=None, alias="organizationType")
    transaction_pattern: str | None = Field(default=None, alias="transactionPattern")
    artifact_category: str | None = Field(default=None, alias="artifactCategory")
    customizations: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class SecuritySection(_WireModel):
    vulnerabilities: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class GasEntry(_WireModel):
    function_name: str = Field(alias="functionName")
    estimated_gas: int = Field(alias="estimatedGas")
    recommendations: list[str] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: GasReport) -> GasEntry:
        return cls(
            function_name=report.function_name,
            estimated_gas=report.estimated_gas,
            recommendations=list(report.recommendations),
        )


class GenerationData(_WireModel):
    analysis: str
    code: str
    security: SecuritySection
    gas_analysis: list[GasEntry] = Field(default_factory=list, alias="gasAnalysis")


class SuccessResponse(_WireModel):
    success: bool = True
    data: GenerationData
    processing_time: int = Field(alias="processingTime")
    from_cache: bool = Field(default=False, alias="fromCache")
    degraded: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_result(cls, result: GenerationResult) -> SuccessResponse:
        return cls(
            data=GenerationData(
                analysis=result.analysis_text,
                code=result.artifact_text,
                security=SecuritySection(
                    vulnerabilities=[format_finding(f) for f in result.findings],
                    recommendations=list(result.recommendations),
                ),
                gas_analysis=[GasEntry.from_report(r) for r in result.gas_analysis],
            ),
            processing_time=result.processing_time_ms,
            from_cache=result.from_cache,
            degraded=dict(result.degraded),
        )


class ProviderUsage(_WireModel):
    calls: int
    successes: int
    failures: int
    input_tokens: int = Field(alias="inputTokens")
    output_tokens: int = Field(alias="outputTokens")
    avg_latency_ms: float = Field(alias="avgLatencyMs")
    estimated_cost_usd: float = Field(alias="estimatedCostUsd")
    outcomes: dict[str, int] = Field(default_factory=dict)


class UsageData(_WireModel):
    total_calls: int = Field(alias="totalCalls")
    input_tokens: int = Field(alias="inputTokens")
    output_tokens: int = Field(alias="outputTokens")
    estimated_cost_usd: float = Field(alias="estimatedCostUsd")
    providers: dict[str, ProviderUsage] = Field(default_factory=dict)


class UsageResponse(_WireModel):
    """Provider usage since the engine started."""

    success: bool = True
    data: UsageData

    @classmethod
    def from_stats(cls, stats: UsageStats) -> UsageResponse:
        providers = {
            pid: ProviderUsage(
                calls=p.total_calls,
                successes=p.successes,
                failures=p.failures,
                input_tokens=p.total_input_tokens,
                output_tokens=p.total_output_tokens,
                avg_latency_ms=round(p.avg_latency_ms, 1),
                estimated_cost_usd=round(p.estimated_cost_usd, 6),
                outcomes=dict(p.outcomes),
            )
            for pid, p in stats.providers.items()
        }
        return cls(data=UsageData(
            total_calls=stats.total_calls,
            input_tokens=stats.total_input_tokens,
            output_tokens=stats.total_output_tokens,
            estimated_cost_usd=round(stats.estimated_cost_usd, 6),
            providers=providers,
        ))


class FailureResponse(_WireModel):
    success: bool = False
    error: str
    details: dict[str, Any] | None = None
    processing_time: int = Field(alias="processingTime")


def format_finding(finding: Finding) -> str:
    """Render a finding as a single wire string: ``[HIGH] description (location)``."""
    text = f"[{finding.severity.value.upper()}] {finding.description}"
    if finding.location:
        text = f"{text} ({finding.location})"
    return text
