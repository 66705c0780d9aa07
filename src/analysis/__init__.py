# src/analysis/__init__.py - v1
"""Pluggable static analyzers run over the final artifact."""

from __future__ import annotations

from scgen.analysis.base_analyzer import BaseAnalyzer
from scgen.analysis.gas_analyzer import GasAnalyzer
from scgen.analysis.security_scanner import SecurityScanner

__all__ = ["BaseAnalyzer", "GasAnalyzer", "SecurityScanner"]
