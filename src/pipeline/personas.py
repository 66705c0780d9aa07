# src/pipeline/personas.py - v1
"""Persona definitions and prompt construction.

Three personas work on every request:
  analysis     architect view: requirements, tokenomics, integration
  synthesis    developer view: the complete contract source
  risk_review  security view: vulnerabilities and recommendations
"""

from __future__ import annotations

from dataclasses import dataclass

from scgen.core.models import GenerationRequest, PersonaId, PersonaTask, TemplateAssembly
from scgen.llm.token_budget import persona_budget


@dataclass(frozen=True)
class PersonaProfile:
    """Static description of a persona used to build its system prompt."""

    persona_id: PersonaId
    role: str
    expertise: str
    focus: tuple[str, ...]
    extra_instructions: str = ""

    def instruction_prefix(self) -> str:
        prefix = (
            f"You are a {self.role}, specializing in smart contract {self.expertise}. "
            f"Focus on: {', '.join(self.focus)}."
        )
        if self.extra_instructions:
            prefix = f"{prefix}\n{self.extra_instructions}"
        return prefix


PERSONA_PROFILES: dict[str, PersonaProfile] = {
    "analysis": PersonaProfile(
        persona_id="analysis",
        role="senior smart contract architect",
        expertise="architecture and tokenomics",
        focus=("Token economics", "Access control", "Integration", "Compliance"),
    ),
    "synthesis": PersonaProfile(
        persona_id="synthesis",
        role="senior Solidity developer",
        expertise="development and optimization",
        focus=("Gas optimization", "Security", "Events", "Access controls"),
        extra_instructions=(
            "Always return the complete contract. Never abbreviate code, never leave "
            "placeholders, never write comments standing in for omitted code."
        ),
    ),
    "risk_review": PersonaProfile(
        persona_id="risk_review",
        role="smart contract security auditor",
        expertise="security and compliance",
        focus=("Attack vectors", "Vulnerabilities", "Economic risks", "Compliance"),
    ),
}


def _subject(request: GenerationRequest) -> str:
    return (
        f"a {request.artifact_category} smart contract for a "
        f"{request.organization_type} doing {request.transaction_pattern} transactions"
    )


def analysis_prompt(request: GenerationRequest, assembly: TemplateAssembly) -> str:
    return (
        f"Analyze the requirements for {_subject(request)}.\n\n"
        f"{assembly.grounding_context}\n\n"
        "Describe the roles, state, lifecycle and token economics the contract needs, "
        "the integrations it depends on and any compliance constraints."
    )


def synthesis_prompt(
    request: GenerationRequest,
    assembly: TemplateAssembly,
    schema_version: str,
    analysis_text: str | None = None,
) -> str:
    parts = [
        f"Write the complete Solidity ^{schema_version} source of {_subject(request)}.",
        assembly.grounding_context,
    ]
    if analysis_text:
        parts.append(f"Requirements analysis:\n{analysis_text}")
    parts.append(
        "Start from this template and extend it:\n"
        f"```solidity\n{assembly.fallback_artifact}\n```"
    )
    parts.append(
        "Requirements: SPDX license header, pragma, OpenZeppelin 5 imports, events for "
        "every state change, custom access control, reentrancy protection. "
        "Return only the full contract in a single ```solidity block."
    )
    return "\n\n".join(parts)


def risk_review_prompt(request: GenerationRequest, assembly: TemplateAssembly) -> str:
    return (
        f"Analyze critical security aspects of {_subject(request)}.\n\n"
        f"{assembly.grounding_context}\n\n"
        "List all potential vulnerabilities under a 'Vulnerabilities:' heading, one per "
        "line with its severity (critical, high, medium or low), then provide detailed "
        "recommendations under a 'Recommendations:' heading."
    )


def build_persona_task(
    persona_id: PersonaId,
    request: GenerationRequest,
    assembly: TemplateAssembly,
    budgets: dict[str, int] | None = None,
    schema_version: str = "0.8.20",
    analysis_text: str | None = None,
) -> PersonaTask:
    """Build one PersonaTask from the request and its template assembly."""
    profile = PERSONA_PROFILES[persona_id]
    if persona_id == "analysis":
        body = analysis_prompt(request, assembly)
    elif persona_id == "synthesis":
        body = synthesis_prompt(request, assembly, schema_version, analysis_text)
    else:
        body = risk_review_prompt(request, assembly)
    return PersonaTask(
        persona_id=persona_id,
        instruction_prefix=profile.instruction_prefix(),
        max_tokens=persona_budget(persona_id, budgets),
        prompt_body=body,
    )
