# src/analysis/findings.py - v1
"""Classify a risk-review text into findings and recommendations.

Section-based first ("Vulnerabilities:" ... "Recommendations:"). When the
text has no recognizable sections, fall back to keyword matching per line.
Pure function, no I/O.
"""

from __future__ import annotations

import re

from scgen.core.models import Finding, Severity

_VULN_HEADING = re.compile(
    r"^[#*\s]*(?:\d+[.)]\s*)?(?:security\s+)?(vulnerabilit(?:y|ies)|risks?|issues|findings)\b[^a-z]*$",
    re.IGNORECASE,
)
_REC_HEADING = re.compile(
    r"^[#*\s]*(?:\d+[.)]\s*)?(recommendations?|mitigations?|best\s+practices)\b[^a-z]*$",
    re.IGNORECASE,
)
_OTHER_HEADING = re.compile(r"^\s*(#{1,6}\s+\S|\*\*[^*]+\*\*:?\s*$|[A-Z][A-Za-z ]{2,40}:\s*$)")
_BULLET = re.compile(r"^\s*(?:[-*•+]|\d+[.)])\s+")

_VULN_KEYWORDS = ("vulnerab", "risk", "issue", "weakness", "attack", "exploit")
_REC_KEYWORDS = ("recommend", "suggest", "should", "best practice", "consider")

_SEVERITY_WORDS: tuple[tuple[Severity, tuple[str, ...]], ...] = (
    (Severity.CRITICAL, ("critical",)),
    (Severity.HIGH, ("high",)),
    (Severity.MEDIUM, ("medium", "moderate")),
    (Severity.LOW, ("low", "informational", "minor")),
)
_HIGH_TOPICS = ("reentran", "overflow", "underflow", "tx.origin", "selfdestruct",
                "delegatecall", "access control", "unauthorized", "front-run", "frontrun")

_LOCATION_RE = re.compile(
    r"(?:function\s+|`)([A-Za-z_]\w*)\s*\(|\bline\s+(\d+)", re.IGNORECASE
)


def classify_findings(text: str) -> tuple[list[Finding], list[str]]:
    """Split a risk-review text into (findings, recommendations)."""
    if not text or not text.strip():
        return [], []

    vuln_lines, rec_lines, found_sections = _split_sections(text)
    if not found_sections:
        vuln_lines, rec_lines = _keyword_lines(text)

    findings = [
        Finding(
            severity=infer_severity(line),
            description=line,
            location=_infer_location(line),
        )
        for line in _dedupe(vuln_lines)
    ]
    return findings, _dedupe(rec_lines)


def infer_severity(line: str) -> Severity:
    """Explicit severity words win; otherwise known high-impact topics."""
    lowered = line.lower()
    for severity, words in _SEVERITY_WORDS:
        if any(re.search(rf"\b{w}\b", lowered) for w in words):
            return severity
    if any(topic in lowered for topic in _HIGH_TOPICS):
        return Severity.HIGH
    return Severity.MEDIUM


def _split_sections(text: str) -> tuple[list[str], list[str], bool]:
    vulns: list[str] = []
    recs: list[str] = []
    section: str | None = None
    found = False
    for raw in text.splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        if _VULN_HEADING.match(stripped):
            section, found = "vuln", True
            continue
        if _REC_HEADING.match(stripped):
            section, found = "rec", True
            continue
        if section and not _BULLET.match(raw) and _OTHER_HEADING.match(stripped):
            section = None
            continue
        line = _clean(stripped)
        if not line:
            continue
        if section == "vuln":
            vulns.append(line)
        elif section == "rec":
            recs.append(line)
    return vulns, recs, found


def _keyword_lines(text: str) -> tuple[list[str], list[str]]:
    vulns: list[str] = []
    recs: list[str] = []
    for raw in text.splitlines():
        line = _clean(raw.strip())
        if not line:
            continue
        lowered = line.lower()
        if any(k in lowered for k in _REC_KEYWORDS):
            recs.append(line)
        elif any(k in lowered for k in _VULN_KEYWORDS):
            vulns.append(line)
    return vulns, recs


def _clean(line: str) -> str:
    line = _BULLET.sub("", line)
    return line.replace("**", "").strip(" :")


def _infer_location(line: str) -> str | None:
    match = _LOCATION_RE.search(line)
    if match is None:
        return None
    if match.group(1):
        return match.group(1)
    return f"line {match.group(2)}"


def _dedupe(lines: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for line in lines:
        key = line.lower()
        if key not in seen:
            seen.add(key)
            out.append(line)
    return out
