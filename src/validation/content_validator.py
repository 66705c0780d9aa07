# src/validation/content_validator.py - v1
"""Structural and completeness heuristics for provider output.

Validation is textual only: the artifact is never compiled. Synthesis output
gets the structural checks; analysis and risk-review output only get the
length and placeholder checks.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel

from scgen.core.errors import ValidationRejected
from scgen.validation.extractor import extract_artifact_code

logger = logging.getLogger(__name__)

# Markers of truncated or elided output. Compared case-insensitively.
DEFAULT_PLACEHOLDER_MARKERS: tuple[str, ...] = (
    "...",
    "…",
    "rest of the code",
    "rest of the contract",
    "rest remains",
    "remains the same",
    "// todo",
    "todo:",
    "implementation here",
    "// implementation",
    "add implementation",
    "your code here",
)

_SPDX_RE = re.compile(r"SPDX-License-Identifier:\s*\S+")
_PRAGMA_RE = re.compile(r"^\s*pragma\s+solidity\s+[^;]+;", re.MULTILINE)
_DECLARATION_RE = re.compile(
    r"^\s*(?:abstract\s+)?(contract|library|interface)\s+[A-Za-z_]\w*", re.MULTILINE
)
_CALLABLE_RE = re.compile(r"\b(?:function\s+[A-Za-z_]\w*|constructor)\s*\(")


class ValidationVerdict(BaseModel):
    """Pass or Reject(reason)."""

    passed: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> ValidationVerdict:
        return cls(passed=True)

    @classmethod
    def reject(cls, reason: str) -> ValidationVerdict:
        return cls(passed=False, reason=reason)


class ContentValidator:
    """Pure validator: same input, same verdict."""

    def __init__(
        self,
        synthesis_min_length: int = 500,
        prose_min_length: int = 50,
        placeholder_markers: tuple[str, ...] = DEFAULT_PLACEHOLDER_MARKERS,
    ) -> None:
        self._synthesis_min = synthesis_min_length
        self._prose_min = prose_min_length
        self._markers = tuple(m.lower() for m in placeholder_markers)

    def prepare(self, text: str, persona_id: str) -> str:
        """Normalize raw provider text before validation."""
        if persona_id == "synthesis":
            return extract_artifact_code(text)
        return text.strip()

    def validate(self, text: str, persona_id: str) -> ValidationVerdict:
        """Validate prepared text for a persona."""
        is_artifact = persona_id == "synthesis"
        min_len = self._synthesis_min if is_artifact else self._prose_min

        if len(text) < min_len:
            return ValidationVerdict.reject(f"too short ({len(text)} < {min_len} chars)")

        lowered = text.lower()
        for marker in self._markers:
            if marker in lowered:
                return ValidationVerdict.reject(f"placeholder marker {marker!r}")

        if is_artifact:
            return self._validate_structure(text)
        return ValidationVerdict.ok()

    def check(self, text: str, persona_id: str) -> str:
        """Prepare and validate in one step.

        Raises:
            ValidationRejected: The prepared text failed validation.
        """
        prepared = self.prepare(text, persona_id)
        verdict = self.validate(prepared, persona_id)
        if not verdict.passed:
            raise ValidationRejected(persona_id, verdict.reason or "rejected")
        return prepared

    @staticmethod
    def _validate_structure(code: str) -> ValidationVerdict:
        if not _SPDX_RE.search(code):
            return ValidationVerdict.reject("missing SPDX license header")
        if not _PRAGMA_RE.search(code):
            return ValidationVerdict.reject("missing pragma")
        if not _DECLARATION_RE.search(code):
            return ValidationVerdict.reject("missing contract declaration")
        if not _CALLABLE_RE.search(code):
            return ValidationVerdict.reject("no function or constructor")
        if code.count("{") != code.count("}"):
            return ValidationVerdict.reject("unbalanced braces")
        return ValidationVerdict.ok()
