# src/analysis/security_scanner.py - v1
"""Pattern-based security scan of contract source."""

from __future__ import annotations

import re
from dataclasses import dataclass

from scgen.analysis.base_analyzer import BaseAnalyzer, enclosing_function, iter_functions
from scgen.core.models import Finding, Severity


@dataclass(frozen=True)
class _Rule:
    pattern: re.Pattern[str]
    severity: Severity
    description: str


_RULES: tuple[_Rule, ...] = (
    _Rule(re.compile(r"\btx\.origin\b"), Severity.HIGH,
          "Use of tx.origin for authorization enables phishing attacks"),
    _Rule(re.compile(r"\bselfdestruct\s*\("), Severity.HIGH,
          "selfdestruct can permanently remove the contract and its funds"),
    _Rule(re.compile(r"\.delegatecall\s*\("), Severity.HIGH,
          "delegatecall executes foreign code in this contract's storage context"),
    _Rule(re.compile(r"\.call\.value\s*\("), Severity.HIGH,
          "Legacy call.value transfer is a reentrancy vector"),
    _Rule(re.compile(r"\bblock\.(?:timestamp|number)\s*%"), Severity.LOW,
          "Block values used as a randomness source are miner-influenced"),
)

_VALUE_CALL_RE = re.compile(r"\.call\s*\{\s*value\s*:")
_ACCESS_CONTROL_RE = re.compile(r"\b(Ownable|AccessControl|onlyOwner|onlyRole)\b")
_OLD_PRAGMA_RE = re.compile(r"pragma\s+solidity\s+[\^>=<~]*\s*0\.([4-7])\.")


class SecurityScanner(BaseAnalyzer[Finding]):
    """Flags well-known risky patterns in contract source."""

    @property
    def name(self) -> str:
        return "security"

    def analyze(self, code: str) -> list[Finding]:
        findings: list[Finding] = []
        if not code:
            return findings

        for rule in _RULES:
            for match in rule.pattern.finditer(code):
                findings.append(Finding(
                    severity=rule.severity,
                    description=rule.description,
                    location=enclosing_function(code, match.start()),
                ))

        findings.extend(self._reentrancy(code))

        if not _ACCESS_CONTROL_RE.search(code):
            findings.append(Finding(
                severity=Severity.MEDIUM,
                description="No access control (Ownable/AccessControl) detected",
            ))

        if _OLD_PRAGMA_RE.search(code) and "SafeMath" not in code:
            findings.append(Finding(
                severity=Severity.MEDIUM,
                description="Compiler older than 0.8 without SafeMath allows integer overflow",
            ))

        return findings

    @staticmethod
    def _reentrancy(code: str) -> list[Finding]:
        findings: list[Finding] = []
        for name, signature, body in iter_functions(code):
            if not _VALUE_CALL_RE.search(body):
                continue
            if "nonReentrant" in signature:
                continue
            findings.append(Finding(
                severity=Severity.HIGH,
                description="External value call without reentrancy guard",
                location=name,
            ))
        if "payable" in code and "nonReentrant" not in code and not findings:
            findings.append(Finding(
                severity=Severity.MEDIUM,
                description="Payable functions without nonReentrant modifier",
            ))
        return findings
