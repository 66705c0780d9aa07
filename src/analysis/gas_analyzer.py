# src/analysis/gas_analyzer.py - v1
"""Heuristic per-function gas report."""

from __future__ import annotations

import re

from scgen.analysis.base_analyzer import BaseAnalyzer, iter_functions
from scgen.core.models import GasReport

BASE_FUNCTION_GAS = 50_000
LOOP_GAS = 30_000
EXTERNAL_CALL_GAS = 10_000

_LOOP_RE = re.compile(r"\b(for|while)\s*\(")
_UINT_LOOP_RE = re.compile(r"for\s*\(\s*uint")
_POSTFIX_INC_RE = re.compile(r"\b\w+\+\+")
_REQUIRE_STRING_RE = re.compile(r"require\s*\([^;]*\"")
_LENGTH_IN_LOOP_RE = re.compile(r"for\s*\([^;]*;[^;]*\.length")
_CALL_RE = re.compile(r"\.(call|transfer|send)\s*[({]")


class GasAnalyzer(BaseAnalyzer[GasReport]):
    """Estimates gas per function and suggests cheap optimizations."""

    @property
    def name(self) -> str:
        return "gas"

    def analyze(self, code: str) -> list[GasReport]:
        reports: list[GasReport] = []
        for name, signature, body in iter_functions(code or ""):
            reports.append(GasReport(
                function_name=name,
                estimated_gas=self._estimate(signature, body),
                recommendations=self._tips(signature, body),
            ))
        return reports

    @staticmethod
    def _estimate(signature: str, body: str) -> int:
        if re.search(r"\b(view|pure)\b", signature):
            return 0
        gas = BASE_FUNCTION_GAS
        gas += LOOP_GAS * len(_LOOP_RE.findall(body))
        gas += EXTERNAL_CALL_GAS * len(_CALL_RE.findall(body))
        return gas

    @staticmethod
    def _tips(signature: str, body: str) -> list[str]:
        tips: list[str] = []
        if _UINT_LOOP_RE.search(body) and _POSTFIX_INC_RE.search(body):
            tips.append("Use unchecked { ++i; } for loop counters")
        if _LENGTH_IN_LOOP_RE.search(body):
            tips.append("Cache array length outside the loop")
        if _REQUIRE_STRING_RE.search(body):
            tips.append("Use custom errors instead of require strings")
        if "string memory" in signature:
            tips.append("Use calldata or bytes32 instead of string memory parameters")
        if re.search(r"\bpublic\b", signature) and not re.search(r"\b(view|pure)\b", signature):
            tips.append("Declare as external if not called internally")
        return tips
