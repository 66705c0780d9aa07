# tests/unit/llm/test_unit_provider_chain.py - v1
"""Tests for llm/provider_chain.py: fallback order, retries, validation."""

from __future__ import annotations

import pytest

from scgen.core.errors import AllProvidersFailed
from scgen.core.models import PersonaTask
from scgen.llm.provider_chain import ProviderChain
from scgen.llm.retry import BackoffPolicy
from scgen.tracking.attempt_log import AttemptLog


def _task(persona_id: str = "synthesis") -> PersonaTask:
    prefixes = {
        "analysis": "You are a senior smart contract architect.",
        "synthesis": "You are a senior Solidity developer.",
        "risk_review": "You are a smart contract security auditor.",
    }
    return PersonaTask(
        persona_id=persona_id,
        instruction_prefix=prefixes[persona_id],
        max_tokens=8000,
        prompt_body="Write the contract.",
    )


@pytest.fixture
def chain_factory(validator, no_sleep):
    def _make(clients, attempt_log=None):
        return ProviderChain(
            clients, validator, backoff=BackoffPolicy(), attempt_log=attempt_log, sleep=no_sleep,
        )
    return _make


class TestProviderChain:
    @pytest.mark.asyncio
    async def test_first_provider_wins(self, chain_factory, make_client, scripted_llm):
        primary = scripted_llm("primary")
        secondary = scripted_llm("secondary")
        chain = chain_factory([
            make_client("secondary", secondary, priority=1),
            make_client("primary", primary, priority=0),
        ])
        result = await chain.run(_task())
        assert result.provider_id == "primary"
        assert result.content.startswith("// SPDX-License-Identifier: MIT")
        assert secondary.calls == []
        assert chain.provider_ids == ["primary", "secondary"]

    @pytest.mark.asyncio
    async def test_auth_error_falls_through_without_retry(
        self, chain_factory, make_client, scripted_llm, status_error, no_sleep,
    ):
        primary = scripted_llm("primary", fail_with=status_error(401))
        secondary = scripted_llm("secondary")
        chain = chain_factory([
            make_client("primary", primary, priority=0),
            make_client("secondary", secondary, priority=1),
        ])
        result = await chain.run(_task())
        assert result.provider_id == "secondary"
        assert len(primary.calls) == 1
        no_sleep.assert_not_awaited()
        assert [a.outcome for a in result.attempts] == ["auth_error", "success"]

    @pytest.mark.asyncio
    async def test_rate_limit_retries_with_backoff(
        self, chain_factory, make_client, scripted_llm, status_error, no_sleep,
    ):
        primary = scripted_llm("primary", fail_with=status_error(429))
        secondary = scripted_llm("secondary")
        chain = chain_factory([
            make_client("primary", primary, priority=0, max_retries=2),
            make_client("secondary", secondary, priority=1),
        ])
        result = await chain.run(_task())
        assert len(primary.calls) == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [1.0, 2.0]
        assert result.provider_id == "secondary"
        assert [a.retry_count for a in result.attempts[:3]] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_transient_error_then_success(
        self, chain_factory, make_client, scripted_llm, status_error,
    ):
        primary = scripted_llm("primary", errors={"synthesis": [status_error(503)]})
        chain = chain_factory([make_client("primary", primary)])
        result = await chain.run(_task())
        assert result.provider_id == "primary"
        assert len(primary.calls) == 2

    @pytest.mark.asyncio
    async def test_placeholder_rejected_goes_to_next_provider(
        self, chain_factory, make_client, scripted_llm, no_sleep,
    ):
        from scgen.core.models import GenerationRequest
        from scgen.templates.assembler import TemplateAssembler

        code = TemplateAssembler().assemble(GenerationRequest(
            organization_type="LIMITED LIABILITY PARTNERSHIP",
            transaction_pattern="B2B",
            artifact_category="Profit Sharing Agreement",
        )).fallback_artifact
        truncated = code.replace("function pause()", "// rest of the code\n    function pause()")
        primary = scripted_llm("primary", responses={"synthesis": truncated})
        secondary = scripted_llm("secondary")
        chain = chain_factory([
            make_client("primary", primary, priority=0),
            make_client("secondary", secondary, priority=1),
        ])
        result = await chain.run(_task())
        assert result.provider_id == "secondary"
        assert len(primary.calls) == 1
        assert "rest of the code" in result.rejections[0]
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_response_goes_to_next_provider(
        self, chain_factory, make_client, scripted_llm,
    ):
        primary = scripted_llm("primary", responses={"analysis": "   "})
        secondary = scripted_llm("secondary")
        chain = chain_factory([
            make_client("primary", primary, priority=0),
            make_client("secondary", secondary, priority=1),
        ])
        result = await chain.run(_task("analysis"))
        assert result.provider_id == "secondary"
        assert result.attempts[0].outcome == "empty_result"

    @pytest.mark.asyncio
    async def test_all_fail(self, chain_factory, make_client, scripted_llm, status_error):
        chain = chain_factory([
            make_client("a", scripted_llm("a", fail_with=status_error(401)), priority=0),
            make_client("b", scripted_llm("b", fail_with=status_error(400)), priority=1),
        ])
        with pytest.raises(AllProvidersFailed) as exc_info:
            await chain.run(_task())
        assert exc_info.value.persona_id == "synthesis"
        assert len(exc_info.value.attempts) == 2

    @pytest.mark.asyncio
    async def test_no_providers(self, chain_factory):
        with pytest.raises(AllProvidersFailed):
            await chain_factory([]).run(_task())

    @pytest.mark.asyncio
    async def test_attempts_recorded_in_log(self, chain_factory, make_client, scripted_llm):
        log = AttemptLog()
        chain = chain_factory([make_client("primary", scripted_llm("primary"))], attempt_log=log)
        await chain.run(_task("risk_review"))
        assert log.total_calls == 1
        assert log.records[0].persona_id == "risk_review"
        assert log.total_tokens == 600
