# src/analysis/base_analyzer.py - v1
"""Abstract static analyzer interface.

Analyzers are pluggable steps run over the final artifact text. They never
compile or execute the code.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")

_FUNCTION_RE = re.compile(r"\bfunction\s+([A-Za-z_]\w*)\s*\(")


class BaseAnalyzer(ABC, Generic[T]):
    """Unified interface for text-based artifact analyzers."""

    @abstractmethod
    def analyze(self, code: str) -> list[T]:
        """Analyze artifact source and return reports."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Analyzer identifier."""


def enclosing_function(code: str, index: int) -> str | None:
    """Name of the last function declared before `index`, if any."""
    name = None
    for match in _FUNCTION_RE.finditer(code, 0, index):
        name = match.group(1)
    return name


def iter_functions(code: str) -> list[tuple[str, str, str]]:
    """(name, signature, body) for every function with a body."""
    out: list[tuple[str, str, str]] = []
    for match in _FUNCTION_RE.finditer(code):
        start = match.start()
        brace = code.find("{", match.end())
        semicolon = code.find(";", match.end())
        if brace == -1 or (semicolon != -1 and semicolon < brace):
            continue  # declaration without body
        end = _matching_brace(code, brace)
        out.append((match.group(1), code[start:brace], code[brace + 1:end]))
    return out


def _matching_brace(code: str, open_index: int) -> int:
    depth = 0
    for i in range(open_index, len(code)):
        ch = code[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return len(code)
