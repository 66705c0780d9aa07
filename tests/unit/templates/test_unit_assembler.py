# tests/unit/templates/test_unit_assembler.py - v1
"""Tests for templates/assembler.py and templates/fragments.py."""

from __future__ import annotations

import pytest

from scgen.core.models import GenerationRequest
from scgen.templates import fragments
from scgen.templates.assembler import (
    TemplateAssembler,
    contract_name,
    declared_names,
    sanitize_identifier,
)
from scgen.validation.content_validator import ContentValidator


def _request(**overrides) -> GenerationRequest:
    data = dict(
        organization_type="LIMITED LIABILITY PARTNERSHIP",
        transaction_pattern="B2B",
        artifact_category="Profit Sharing Agreement",
        customizations={},
    )
    data.update(overrides)
    return GenerationRequest(**data)


class TestAssemble:
    def test_deterministic(self):
        assembler = TemplateAssembler()
        req = _request(customizations={"partnerCount": 3})
        assert assembler.assemble(req) == assembler.assemble(req)

    def test_fallback_is_a_complete_contract(self):
        assembly = TemplateAssembler().assemble(_request())
        verdict = ContentValidator().validate(assembly.fallback_artifact, "synthesis")
        assert verdict.passed, verdict.reason

    def test_schema_version_in_pragma(self):
        assembly = TemplateAssembler("0.8.24").assemble(_request())
        assert "pragma solidity ^0.8.24;" in assembly.fallback_artifact

    def test_composition_order(self):
        req = _request(
            organization_type="PRIVATE LIMITED COMPANY",
            artifact_category="Equity Tokenization",
        )
        code = TemplateAssembler().assemble(req).fallback_artifact
        base_at = code.index("agreementName")
        org_at = code.index("maxShareholders")
        assert base_at < org_at

    def test_customizations_become_typed_state(self):
        req = _request(customizations={
            "active": True,
            "partnerCount": 3,
            "jurisdiction": 'Delaware "US"',
            "weird key!": -1,
        })
        code = TemplateAssembler().assemble(req).fallback_artifact
        assert "bool public active = true;" in code
        assert "uint256 public partnerCount = 3;" in code
        assert 'string public jurisdiction = "Delaware \\"US\\"";' in code
        assert 'string public weird_key_ = "-1";' in code

    def test_grounding_lists_customizations(self):
        assembly = TemplateAssembler().assemble(_request(customizations={"partnerCount": 3}))
        assert "Artifact category: Profit Sharing Agreement" in assembly.grounding_context
        assert "- partnerCount: 3" in assembly.grounding_context

    def test_fallback_risk_review_has_sections(self):
        text = TemplateAssembler().assemble(_request()).fallback_risk_review
        assert "Vulnerabilities:" in text
        assert "Recommendations:" in text

    def test_unknown_keys_use_empty_fragments(self):
        req = _request(
            organization_type="INDIVIDUAL",
            transaction_pattern="i2i",
            artifact_category="Will documentation",
        )
        assembly = TemplateAssembler().assemble(req)
        assert "contract WillDocumentation is Ownable" in assembly.fallback_artifact


class TestNames:
    def test_contract_name_from_category(self):
        assert contract_name(_request()) == "ProfitSharingAgreement"

    def test_contract_name_from_customization(self):
        req = _request(customizations={"contractName": "acme profit split"})
        assert contract_name(req) == "AcmeProfitSplit"

    def test_contract_name_leading_digit(self):
        req = _request(customizations={"tokenName": "3d assets"})
        assert contract_name(req) == "C3dAssets"

    def test_sanitize_identifier(self):
        assert sanitize_identifier("fee-rate %") == "fee_rate__"
        assert sanitize_identifier("1st") == "_1st"
        assert sanitize_identifier("") == "param"
        assert sanitize_identifier("!!") == "param"


class TestFragments:
    def test_lookup_category_keyword(self):
        assert fragments.lookup_category("Revenue Sharing Agreement") is not fragments.EMPTY

    def test_lookup_category_miss(self):
        assert fragments.lookup_category("Will documentation") is fragments.EMPTY


class TestCustomizationState:
    def _state_lines(self, customizations) -> list[str]:
        code = TemplateAssembler().assemble(_request(customizations=customizations)).fallback_artifact
        return [line.strip() for line in code.splitlines() if " public " in line and " = " in line]

    def test_inherited_and_keyword_names_are_prefixed(self):
        lines = self._state_lines({"owner": "0xabc", "contract": "x", "paused": True})
        assert 'string public custom_owner = "0xabc";' in lines
        assert 'string public custom_contract = "x";' in lines
        assert "bool public custom_paused = true;" in lines
        assert not any(
            line.startswith(("string public owner", "string public contract", "bool public paused"))
            for line in lines
        )

    def test_template_declarations_are_prefixed(self):
        lines = self._state_lines({"partners": 2, "totalShares": 100, "addPartner": "x"})
        assert "uint256 public custom_partners = 2;" in lines
        assert "uint256 public custom_totalShares = 100;" in lines
        assert 'string public custom_addPartner = "x";' in lines

    def test_contract_name_and_types_are_prefixed(self):
        lines = self._state_lines({"ProfitSharingAgreement": 1, "uint256": 2, "bytes32": 3})
        assert "uint256 public custom_ProfitSharingAgreement = 1;" in lines
        assert "uint256 public custom_uint256 = 2;" in lines
        assert "uint256 public custom_bytes32 = 3;" in lines

    def test_prefixed_name_does_not_collide(self):
        lines = self._state_lines({"custom_owner": 1, "owner": 2})
        assert "uint256 public custom_owner = 1;" in lines
        assert "uint256 public custom_owner_2 = 2;" in lines

    def test_declared_names(self):
        names = declared_names(fragments.BASE.state + fragments.BASE.functions)
        assert {"agreementName", "creator", "ContractInitialized", "pause", "getContractInfo"} <= names
        assert "block" not in names


class TestCustomizationLiterals:
    def _code(self, customizations) -> str:
        return TemplateAssembler().assemble(_request(customizations=customizations)).fallback_artifact

    def test_markers_are_escaped(self):
        code = self._code({"note": "see ...", "task": "TODO: fill in"})
        assert 'string public note = "see \\x2e..";' in code
        assert 'string public task = "\\x54ODO: fill in";' in code

    def test_non_ascii_is_escaped(self):
        code = self._code({"city": "Café"})
        assert 'string public city = "Caf\\xc3\\xa9";' in code

    @pytest.mark.parametrize(
        "value",
        [
            "see ...",
            "....",
            "Wait…",
            "TODO: fill in",
            "// todo later",
            "rest of the code",
            "Your Code Here",
            "\u00add implementation",
            "{unbalanced",
            {"nested": "implementation here"},
        ],
    )
    def test_fallback_passes_validation(self, value):
        code = self._code({"note": value, "owner": "...", "contract": "todo:"})
        verdict = ContentValidator().validate(code, "synthesis")
        assert verdict.passed, verdict.reason
