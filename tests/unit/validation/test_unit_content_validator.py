# tests/unit/validation/test_unit_content_validator.py - v1
"""Tests for validation/content_validator.py and validation/extractor.py."""

from __future__ import annotations

import pytest

from scgen.core.errors import ValidationRejected
from scgen.validation.content_validator import ContentValidator
from scgen.validation.extractor import extract_artifact_code

CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

contract Registry {
    mapping(address => uint256) public balances;
    event Deposited(address indexed who, uint256 amount);

    function deposit() external payable {
        balances[msg.sender] += msg.value;
        emit Deposited(msg.sender, msg.value);
    }

    function balanceOf(address who) external view returns (uint256) {
        return balances[who];
    }
}
"""


@pytest.fixture
def lenient():
    return ContentValidator(synthesis_min_length=100, prose_min_length=20)


class TestValidate:
    def test_valid_contract(self, lenient):
        assert lenient.validate(CONTRACT, "synthesis").passed

    def test_too_short(self):
        verdict = ContentValidator().validate(CONTRACT, "synthesis")
        assert not verdict.passed
        assert "too short" in verdict.reason

    @pytest.mark.parametrize("marker", ["...", "// rest of the code", "TODO: finish", "…"])
    def test_placeholder_markers(self, lenient, marker):
        text = CONTRACT.replace("emit Deposited", f"{marker}\n        emit Deposited")
        verdict = lenient.validate(text, "synthesis")
        assert not verdict.passed
        assert "placeholder" in verdict.reason

    def test_missing_spdx(self, lenient):
        verdict = lenient.validate(CONTRACT.replace("SPDX-License-Identifier: MIT", ""), "synthesis")
        assert verdict.reason == "missing SPDX license header"

    def test_missing_pragma(self, lenient):
        verdict = lenient.validate(CONTRACT.replace("pragma solidity ^0.8.20;", ""), "synthesis")
        assert verdict.reason == "missing pragma"

    def test_unbalanced_braces(self, lenient):
        verdict = lenient.validate(CONTRACT.rstrip().rstrip("}"), "synthesis")
        assert verdict.reason == "unbalanced braces"

    def test_no_callable(self, lenient):
        code = (
            "// SPDX-License-Identifier: MIT\npragma solidity ^0.8.20;\n"
            "contract Empty {\n    uint256 public value;\n}\n"
        ) + "// padding line for length\n" * 5
        assert lenient.validate(code, "synthesis").reason == "no function or constructor"

    def test_prose_only_checks_length_and_markers(self, lenient):
        assert lenient.validate("A plain analysis paragraph with no code at all.", "analysis").passed
        assert not lenient.validate("short", "risk_review").passed

    def test_deterministic(self, lenient):
        assert lenient.validate(CONTRACT, "synthesis") == lenient.validate(CONTRACT, "synthesis")


class TestPrepareAndCheck:
    def test_prepare_extracts_code_for_synthesis(self, lenient):
        text = f"Sure! Here it is:\n```solidity\n{CONTRACT}```\nLet me know."
        assert lenient.prepare(text, "synthesis") == CONTRACT.strip()

    def test_prepare_strips_prose(self, lenient):
        assert lenient.prepare("  hello  ", "analysis") == "hello"

    def test_check_returns_prepared(self, lenient):
        assert lenient.check(f"```sol\n{CONTRACT}```", "synthesis") == CONTRACT.strip()

    def test_check_raises(self, lenient):
        with pytest.raises(ValidationRejected) as exc_info:
            lenient.check("tiny", "analysis")
        assert exc_info.value.persona_id == "analysis"


class TestExtractor:
    def test_generic_fence_with_pragma(self):
        text = f"```\n{CONTRACT}```"
        assert extract_artifact_code(text) == CONTRACT.strip()

    def test_from_spdx_line(self):
        text = f"Explanation first.\n{CONTRACT}"
        assert extract_artifact_code(text) == CONTRACT.strip()

    def test_unterminated_fence(self):
        text = f"```solidity\n{CONTRACT}"
        assert extract_artifact_code(text) == CONTRACT.strip()

    def test_plain_text(self):
        assert extract_artifact_code("  no code here ") == "no code here"

    def test_empty(self):
        assert extract_artifact_code("") == ""
