# src/pipeline/orchestrator.py - v3
"""Generation orchestrator: normalize, cache check, generate, validate, cache.

Drives one request through the state machine in pipeline/state.py:
  1. RequestNormalizer        (InvalidRequestError is the only escaping error)
  2. ResultCache lookup       (hit returns immediately, no provider calls)
  3. PersonaPipeline          (three tasks over the provider chain)
  4. Analyzers                (findings, recommendations, gas reports)
  5. ResultCache store        (only fully validated results; failures absorbed)
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from scgen.analysis.findings import classify_findings
from scgen.analysis.gas_analyzer import GasAnalyzer
from scgen.analysis.security_scanner import SecurityScanner
from scgen.cache.fingerprint import compute_request_fingerprint
from scgen.core.errors import InvalidRequestError
from scgen.core.models import Finding, GasReport, GenerationResult
from scgen.logging.context import clear_context, set_fingerprint_context, set_request_context
from scgen.pipeline.state import GenerationRun, GenerationState
from scgen.request.normalizer import RequestNormalizer
from scgen.templates.assembler import TemplateAssembler

if TYPE_CHECKING:
    from scgen.analysis.base_analyzer import BaseAnalyzer
    from scgen.cache.result_cache import ResultCache
    from scgen.config.settings import Settings
    from scgen.llm.provider_client import ProviderClient
    from scgen.pipeline.persona_pipeline import PersonaPipeline, PipelineOutcome
    from scgen.tracking.attempt_log import AttemptLog
    from scgen.tracking.models import UsageStats

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Top-level engine entry point.

    Args:
        pipeline: Persona pipeline over the provider chain.
        cache: Result cache. None disables caching.
        normalizer: Request normalizer (catalog-backed by default).
        assembler: Template assembler.
        analyzers: Static analyzers run over the final artifact.
        schema_version: Template schema version mixed into fingerprints.
        single_flight: Serialize concurrent identical requests.
    """

    def __init__(
        self,
        pipeline: PersonaPipeline,
        cache: ResultCache | None = None,
        normalizer: RequestNormalizer | None = None,
        assembler: TemplateAssembler | None = None,
        analyzers: list[BaseAnalyzer[Any]] | None = None,
        schema_version: str = "0.8.20",
        single_flight: bool = True,
    ) -> None:
        self._pipeline = pipeline
        self._cache = cache
        self._normalizer = normalizer or RequestNormalizer()
        self._assembler = assembler or TemplateAssembler(schema_version)
        self._analyzers = analyzers if analyzers is not None else [
            SecurityScanner(), GasAnalyzer(),
        ]
        self._schema_version = schema_version
        self._single_flight = single_flight

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        clients: list[ProviderClient] | None = None,
        attempt_log: AttemptLog | None = None,
        cache: ResultCache | None = None,
    ) -> GenerationOrchestrator:
        """Wire the full engine from Settings.

        Args:
            settings: Application settings.
            clients: Provider clients; built from settings when omitted.
            attempt_log: Attempt log for usage tracking; sized from settings
                when omitted.
            cache: Result cache; built from settings when omitted.
        """
        from scgen.cache.cache_factory import create_cache_store
        from scgen.cache.dependency_versions import create_version_lookup
        from scgen.cache.result_cache import ResultCache
        from scgen.llm.config import build_provider_configs
        from scgen.llm.provider_chain import ProviderChain
        from scgen.llm.provider_client import ProviderClient
        from scgen.llm.retry import BackoffPolicy
        from scgen.pipeline.persona_pipeline import PersonaPipeline
        from scgen.tracking.attempt_log import AttemptLog
        from scgen.validation.content_validator import ContentValidator

        if clients is None:
            clients = [ProviderClient(c) for c in build_provider_configs(settings)]
        if not clients:
            logger.warning("No providers configured; every request will use templates")
        if attempt_log is None:
            attempt_log = AttemptLog(max_records=settings.attempt_log_max_records)

        chain = ProviderChain(
            clients,
            ContentValidator(settings.synthesis_min_length, settings.prose_min_length),
            backoff=BackoffPolicy(
                settings.backoff_base_s, settings.backoff_factor, settings.backoff_cap_s,
            ),
            attempt_log=attempt_log,
        )
        pipeline = PersonaPipeline(
            chain,
            task_deadline_s=settings.task_deadline_s,
            mode=settings.pipeline_mode,
            budgets=settings.persona_max_tokens,
            schema_version=settings.template_schema_version,
        )
        if cache is None and settings.cache_enabled:
            cache = ResultCache(
                store=create_cache_store(settings),
                version_lookup=create_version_lookup(settings),
                tracked_dependencies=settings.dependency_versions_map,
                ttl_s=settings.cache_ttl_s,
                ttl_overrides_s=settings.cache_ttl_overrides_s,
            )
        return cls(
            pipeline,
            cache=cache,
            schema_version=settings.template_schema_version,
            single_flight=settings.cache_single_flight,
        )

    @property
    def cache(self) -> ResultCache | None:
        return self._cache

    @property
    def attempt_log(self) -> AttemptLog:
        return self._pipeline.attempt_log

    def usage(self) -> UsageStats:
        """Provider usage and estimated cost since startup."""
        return self.attempt_log.usage()

    async def aclose(self) -> None:
        """Release cache connections and HTTP clients."""
        if self._cache is not None:
            await self._cache.aclose()

    async def generate(self, raw: Mapping[str, Any]) -> GenerationResult:
        """Serve one request.

        Raises:
            InvalidRequestError: The request is malformed or not in the catalog.
        """
        run = GenerationRun()
        set_request_context(run.request_id)
        try:
            return await self._generate(raw, run)
        finally:
            logger.debug(
                "Generation %s ended in %s after %dms",
                run.request_id, run.state.value, run.elapsed_ms,
            )
            clear_context()

    async def _generate(self, raw: Mapping[str, Any], run: GenerationRun) -> GenerationResult:
        run.advance(GenerationState.NORMALIZING)
        try:
            request = self._normalizer.normalize(raw)
        except InvalidRequestError as e:
            run.advance(GenerationState.FAILED)
            logger.info("Rejected request: %s", e)
            raise

        fingerprint = compute_request_fingerprint(request, self._schema_version)
        run.fingerprint = fingerprint
        set_fingerprint_context(fingerprint[:12])
        logger.info(
            "Generating %s / %s / %s",
            request.organization_type, request.transaction_pattern, request.artifact_category,
        )

        if self._cache is None:
            run.advance(GenerationState.GENERATING)
            return await self._produce(request, fingerprint, run)

        guard = (
            self._cache.single_flight(fingerprint)
            if self._single_flight else contextlib.nullcontext()
        )
        async with guard:
            run.advance(GenerationState.CACHE_CHECK)
            cached = await self._cache_lookup(fingerprint)
            if cached is not None:
                run.advance(GenerationState.DONE)
                logger.info("Cache hit %s", fingerprint[:12])
                return cached.model_copy(
                    deep=True,
                    update={"from_cache": True, "processing_time_ms": run.elapsed_ms},
                )
            run.advance(GenerationState.GENERATING)
            return await self._produce(request, fingerprint, run)

    async def _produce(self, request, fingerprint: str, run: GenerationRun) -> GenerationResult:
        assembly = self._assembler.assemble(request)
        outcome = await self._pipeline.run(request, assembly)

        run.advance(GenerationState.VALIDATING)
        result = self._compose(outcome, fingerprint)

        if self._cache is not None and not any(result.degraded.values()):
            run.advance(GenerationState.CACHING)
            try:
                await self._cache.put(
                    fingerprint, result, artifact_category=request.artifact_category,
                )
            except Exception as e:
                logger.warning("Cache write failed for %s: %s", fingerprint[:12], e)

        run.advance(GenerationState.DONE)
        result.processing_time_ms = run.elapsed_ms
        return result

    async def _cache_lookup(self, fingerprint: str) -> GenerationResult | None:
        try:
            entry = await self._cache.get(fingerprint)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", fingerprint[:12], e)
            return None
        return entry.result if entry is not None else None

    def _compose(self, outcome: PipelineOutcome, fingerprint: str) -> GenerationResult:
        artifact = outcome.text("synthesis")
        findings, recommendations = classify_findings(outcome.text("risk_review"))
        gas: list[GasReport] = []
        for analyzer in self._analyzers:
            try:
                reports = analyzer.analyze(artifact)
            except Exception:
                logger.exception("Analyzer %s failed", analyzer.name)
                continue
            for report in reports:
                if isinstance(report, Finding):
                    findings.append(report)
                elif isinstance(report, GasReport):
                    gas.append(report)

        return GenerationResult(
            analysis_text=outcome.text("analysis"),
            artifact_text=artifact,
            findings=findings,
            recommendations=recommendations,
            gas_analysis=gas,
            from_cache=False,
            degraded=outcome.degraded,
            providers=outcome.providers,
            fingerprint=fingerprint,
        )
