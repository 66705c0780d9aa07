# src/pipeline/persona_pipeline.py - v1
"""Runs the three persona tasks through the provider chain.

Concurrent mode (default) issues all three tasks at once; each task is
bounded by its own deadline and a failing task never cancels the others.
Sequential mode runs analysis first and feeds its text to synthesis.
A task that fails falls back to its template contribution and is flagged
degraded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal

from pydantic import BaseModel, Field

from scgen.core.errors import AllProvidersFailed
from scgen.core.models import (
    PERSONA_IDS,
    GenerationRequest,
    PersonaId,
    PersonaTask,
    TemplateAssembly,
)
from scgen.llm.provider_chain import ProviderChain
from scgen.logging.context import set_persona_context
from scgen.pipeline.personas import build_persona_task
from scgen.tracking.attempt_log import AttemptLog

logger = logging.getLogger(__name__)


class PersonaOutput(BaseModel):
    """Final text for one persona, validated or from the template."""

    persona_id: PersonaId
    text: str
    provider_id: str | None = None
    degraded: bool = False
    attempts: int = 0
    reason: str | None = None


class PipelineOutcome(BaseModel):
    """Outputs of all persona tasks, keyed by persona id."""

    outputs: dict[str, PersonaOutput] = Field(default_factory=dict)

    def text(self, persona_id: str) -> str:
        return self.outputs[persona_id].text

    @property
    def degraded(self) -> dict[str, bool]:
        return {pid: out.degraded for pid, out in self.outputs.items()}

    @property
    def providers(self) -> dict[str, str | None]:
        return {pid: out.provider_id for pid, out in self.outputs.items()}


class PersonaPipeline:
    """Issues persona tasks and collects their outputs."""

    def __init__(
        self,
        chain: ProviderChain,
        task_deadline_s: float = 180.0,
        mode: Literal["concurrent", "sequential"] = "concurrent",
        budgets: dict[str, int] | None = None,
        schema_version: str = "0.8.20",
    ) -> None:
        self._chain = chain
        self._deadline_s = task_deadline_s
        self._mode = mode
        self._budgets = budgets
        self._schema_version = schema_version

    @property
    def attempt_log(self) -> AttemptLog:
        return self._chain.attempt_log

    async def run(self, request: GenerationRequest, assembly: TemplateAssembly) -> PipelineOutcome:
        if self._mode == "sequential":
            outputs = await self._run_sequential(request, assembly)
        else:
            tasks = [self._task(pid, request, assembly) for pid in PERSONA_IDS]
            outputs = await asyncio.gather(
                *(self._run_task(task, assembly) for task in tasks)
            )
        outcome = PipelineOutcome(outputs={o.persona_id: o for o in outputs})
        degraded = [pid for pid, flag in outcome.degraded.items() if flag]
        if degraded:
            logger.warning("Degraded persona tasks: %s", ", ".join(degraded))
        return outcome

    async def _run_sequential(
        self, request: GenerationRequest, assembly: TemplateAssembly,
    ) -> list[PersonaOutput]:
        analysis = await self._run_task(self._task("analysis", request, assembly), assembly)
        analysis_text = None if analysis.degraded else analysis.text
        synthesis = await self._run_task(
            self._task("synthesis", request, assembly, analysis_text), assembly,
        )
        risk = await self._run_task(self._task("risk_review", request, assembly), assembly)
        return [analysis, synthesis, risk]

    def _task(
        self,
        persona_id: PersonaId,
        request: GenerationRequest,
        assembly: TemplateAssembly,
        analysis_text: str | None = None,
    ) -> PersonaTask:
        return build_persona_task(
            persona_id, request, assembly,
            budgets=self._budgets,
            schema_version=self._schema_version,
            analysis_text=analysis_text,
        )

    async def _run_task(self, task: PersonaTask, assembly: TemplateAssembly) -> PersonaOutput:
        set_persona_context(task.persona_id)
        try:
            result = await asyncio.wait_for(self._chain.run(task), timeout=self._deadline_s)
        except AllProvidersFailed as e:
            return self._degraded(task, assembly, "all providers failed", len(e.attempts))
        except asyncio.TimeoutError:
            logger.warning(
                "Persona %s exceeded its %.0fs deadline", task.persona_id, self._deadline_s,
            )
            return self._degraded(task, assembly, "deadline exceeded")
        except Exception:
            logger.exception("Persona %s failed unexpectedly", task.persona_id)
            return self._degraded(task, assembly, "internal error")

        return PersonaOutput(
            persona_id=task.persona_id,
            text=result.content,
            provider_id=result.provider_id,
            attempts=len(result.attempts),
        )

    @staticmethod
    def _degraded(
        task: PersonaTask, assembly: TemplateAssembly, reason: str, attempts: int = 0,
    ) -> PersonaOutput:
        fallback = {
            "analysis": assembly.fallback_analysis,
            "synthesis": assembly.fallback_artifact,
            "risk_review": assembly.fallback_risk_review,
        }[task.persona_id]
        return PersonaOutput(
            persona_id=task.persona_id,
            text=fallback,
            degraded=True,
            attempts=attempts,
            reason=reason,
        )
