# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides scripted LLM clients, provider clients, sample requests and an
orchestrator factory. No network access: every provider call is faked.
"""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from scgen.cache.memory_store import MemoryCacheStore
from scgen.cache.result_cache import ResultCache
from scgen.config.settings import Settings
from scgen.core.models import GenerationRequest
from scgen.llm.base_client import BaseLLMClient
from scgen.llm.config import ProviderConfig
from scgen.llm.models import LLMResponse, Message
from scgen.llm.provider_chain import ProviderChain
from scgen.llm.provider_client import ProviderClient
from scgen.llm.retry import BackoffPolicy
from scgen.pipeline.orchestrator import GenerationOrchestrator
from scgen.pipeline.persona_pipeline import PersonaPipeline
from scgen.request.normalizer import RequestNormalizer
from scgen.tracking.attempt_log import AttemptLog
from scgen.validation.content_validator import ContentValidator

# === Canned provider output ===

VALID_CONTRACT = """// SPDX-License-Identifier: MIT
pragma solidity ^0.8.20;

import "@openzeppelin/contracts/access/Ownable.sol";
import "@openzeppelin/contracts/utils/ReentrancyGuard.sol";

contract ProfitSharingAgreement is Ownable, ReentrancyGuard {
    mapping(address => uint256) public shares;
    address[] public partners;
    uint256 public totalShares;

    event PartnerAdded(address indexed partner, uint256 share);
    event ProfitDistributed(uint256 amount);

    constructor() Ownable(msg.sender) {}

    function addPartner(address partner, uint256 share) external onlyOwner {
        require(partner != address(0), "zero address");
        partners.push(partner);
        shares[partner] = share;
        totalShares += share;
        emit PartnerAdded(partner, share);
    }

    function distribute() external payable onlyOwner nonReentrant {
        for (uint256 i = 0; i < partners.length; i++) {
            address partner = partners[i];
            uint256 amount = (msg.value * shares[partner]) / totalShares;
            (bool ok, ) = partner.call{value: amount}("");
            require(ok, "transfer failed");
        }
        emit ProfitDistributed(msg.value);
    }

    function partnerCount() external view returns (uint256) {
        return partners.length;
    }
}
"""

VALID_ANALYSIS = (
    "The agreement needs a partner registry with share weights, an owner-managed "
    "onboarding flow and a payable distribution function that splits incoming "
    "profits pro rata between registered partners."
)

VALID_RISK_REVIEW = """Vulnerabilities:
- High: reentrancy in function distribute( when paying partners
- Medium: unbounded loop over partners can exceed the block gas limit
- Low: owner centralization over partner registry

Recommendations:
- Use a pull-payment pattern for distributions
- Cap the number of partners
"""

PERSONA_RESPONSES: dict[str, str] = {
    "analysis": VALID_ANALYSIS,
    "synthesis": f"Here is the contract:\n\n```solidity\n{VALID_CONTRACT}```\n",
    "risk_review": VALID_RISK_REVIEW,
}


def persona_of(system: str | None) -> str:
    """Recover the persona from the instruction prefix."""
    text = system or ""
    if "architect" in text:
        return "analysis"
    if "Solidity developer" in text:
        return "synthesis"
    return "risk_review"


class ScriptedLLM(BaseLLMClient):
    """Fake adapter answering per persona.

    Args:
        name: Provider name reported in responses.
        responses: Per-persona text overriding PERSONA_RESPONSES.
        errors: Per-persona queue of exceptions raised before answering.
        fail_with: Exception raised on every call.
    """

    def __init__(
        self,
        name: str = "fake",
        responses: dict[str, str] | None = None,
        errors: dict[str, list[BaseException]] | None = None,
        fail_with: BaseException | None = None,
    ) -> None:
        self._name = name
        self._responses = {**PERSONA_RESPONSES, **(responses or {})}
        self._errors = {k: list(v) for k, v in (errors or {}).items()}
        self._fail_with = fail_with
        self.calls: list[str] = []
        self.max_tokens_seen: list[int] = []

    @property
    def provider_name(self) -> str:
        return self._name

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        persona = persona_of(system)
        self.calls.append(persona)
        self.max_tokens_seen.append(max_tokens)
        if self._fail_with is not None:
            raise self._fail_with
        queue = self._errors.get(persona)
        if queue:
            raise queue.pop(0)
        return LLMResponse(
            content=self._responses[persona],
            input_tokens=120,
            output_tokens=480,
            model=f"{self._name}-model",
            provider=self._name,
            latency_ms=3,
        )


class StatusError(Exception):
    """SDK-style error carrying an HTTP status code."""

    def __init__(self, status_code: int, message: str = "provider error") -> None:
        self.status_code = status_code
        super().__init__(f"{status_code}: {message}")


# === FIXTURES: Requests ===


@pytest.fixture
def sample_payload() -> dict:
    """LLP / B2B / Profit Sharing Agreement request in wire format."""
    return {
        "organizationType": "LLP",
        "transactionPattern": "B2B",
        "artifactCategory": "Profit Sharing Agreement",
        "customizations": {"partnerCount": 3, "contractName": "Acme Profit Split"},
    }


@pytest.fixture
def sample_request(sample_payload: dict) -> GenerationRequest:
    return RequestNormalizer().normalize(sample_payload)


# === FIXTURES: Providers ===


@pytest.fixture
def scripted_llm() -> Callable[..., ScriptedLLM]:
    """Factory for ScriptedLLM instances."""
    return ScriptedLLM


@pytest.fixture
def make_client() -> Callable[..., ProviderClient]:
    """Factory: ProviderClient over a given fake LLM."""

    def _make(
        provider_id: str,
        llm: BaseLLMClient,
        priority: int = 0,
        max_retries: int = 2,
        timeout_s: float = 5.0,
    ) -> ProviderClient:
        config = ProviderConfig(
            provider_id=provider_id,
            kind="openai_compatible",
            model=f"{provider_id}-model",
            api_key="test-key",
            priority=priority,
            max_retries=max_retries,
            timeout_s=timeout_s,
        )
        return ProviderClient(config, llm=llm)

    return _make


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records backoff delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def validator() -> ContentValidator:
    return ContentValidator()


# === FIXTURES: Engine ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any .env file."""
    return Settings(_env_file=None, cache_backend="memory")


@pytest.fixture
def make_orchestrator(no_sleep: AsyncMock, validator: ContentValidator):
    """Factory: orchestrator over the given provider clients."""

    def _make(
        clients: list[ProviderClient],
        cache: ResultCache | None = None,
        with_cache: bool = True,
        mode: str = "concurrent",
        attempt_log: AttemptLog | None = None,
        task_deadline_s: float = 5.0,
    ) -> GenerationOrchestrator:
        chain = ProviderChain(
            clients,
            validator,
            backoff=BackoffPolicy(),
            attempt_log=attempt_log,
            sleep=no_sleep,
        )
        pipeline = PersonaPipeline(chain, task_deadline_s=task_deadline_s, mode=mode)
        if cache is None and with_cache:
            cache = ResultCache(store=MemoryCacheStore())
        return GenerationOrchestrator(pipeline, cache=cache)

    return _make


@pytest.fixture
def status_error() -> type[StatusError]:
    """Exception class carrying an HTTP status code, like SDK errors."""
    return StatusError
