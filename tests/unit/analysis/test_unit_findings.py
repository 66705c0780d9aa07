# tests/unit/analysis/test_unit_findings.py - v1
"""Tests for analysis/findings.py: risk-review classification."""

from __future__ import annotations

from scgen.analysis.findings import classify_findings, infer_severity
from scgen.core.models import Severity


class TestClassifyFindings:
    def test_sections(self):
        text = """Overview of the review.

Vulnerabilities:
- High: reentrancy in function withdraw(
- Unbounded loop in distribute
1. Critical: owner can drain funds

Recommendations:
- Use checks-effects-interactions
- **Add a timelock**
"""
        findings, recs = classify_findings(text)
        assert [f.description for f in findings] == [
            "High: reentrancy in function withdraw(",
            "Unbounded loop in distribute",
            "Critical: owner can drain funds",
        ]
        assert findings[0].severity is Severity.HIGH
        assert findings[0].location == "withdraw"
        assert findings[1].severity is Severity.MEDIUM
        assert findings[2].severity is Severity.CRITICAL
        assert recs == ["Use checks-effects-interactions", "Add a timelock"]

    def test_markdown_headings(self):
        text = "## Security Risks\n- Front-running of claims\n## Mitigations\n- Commit-reveal\n"
        findings, recs = classify_findings(text)
        assert findings[0].severity is Severity.HIGH
        assert recs == ["Commit-reveal"]

    def test_unrelated_heading_ends_section(self):
        text = "Vulnerabilities:\n- Reentrancy risk\nSummary:\nAll good overall.\n"
        findings, _ = classify_findings(text)
        assert [f.description for f in findings] == ["Reentrancy risk"]

    def test_keyword_fallback(self):
        text = (
            "The payout path has a reentrancy vulnerability.\n"
            "You should add a guard.\n"
            "The token name is fine.\n"
        )
        findings, recs = classify_findings(text)
        assert len(findings) == 1
        assert "reentrancy" in findings[0].description
        assert recs == ["You should add a guard."]

    def test_dedupe(self):
        text = "Vulnerabilities:\n- Reentrancy\n- reentrancy\n"
        findings, _ = classify_findings(text)
        assert len(findings) == 1

    def test_empty(self):
        assert classify_findings("") == ([], [])
        assert classify_findings("   \n") == ([], [])


class TestInferSeverity:
    def test_explicit_words(self):
        assert infer_severity("LOW impact") is Severity.LOW
        assert infer_severity("moderate issue") is Severity.MEDIUM
        assert infer_severity("informational note") is Severity.LOW

    def test_topics(self):
        assert infer_severity("Use of tx.origin") is Severity.HIGH
        assert infer_severity("Missing access control on mint") is Severity.HIGH

    def test_default(self):
        assert infer_severity("Odd naming") is Severity.MEDIUM

    def test_word_boundary(self):
        assert infer_severity("highlight this naming choice") is Severity.MEDIUM
