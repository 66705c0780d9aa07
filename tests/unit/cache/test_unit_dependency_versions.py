# tests/unit/cache/test_unit_dependency_versions.py - v1
"""Tests for cache/dependency_versions.py and cache/fingerprint.py."""

from __future__ import annotations

import httpx
import pytest

from scgen.cache.dependency_versions import (
    NpmRegistryLookup,
    StaticVersionLookup,
    create_version_lookup,
)
from scgen.cache.fingerprint import canonical_json, compute_request_fingerprint
from scgen.config.settings import Settings
from scgen.core.models import GenerationRequest


def _npm(handler) -> tuple[NpmRegistryLookup, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NpmRegistryLookup(client=client), client


class TestStaticVersionLookup:
    @pytest.mark.asyncio
    async def test_known_and_unknown(self):
        lookup = StaticVersionLookup({"a": "1.0.0"})
        assert await lookup.current_version("a") == "1.0.0"
        assert await lookup.current_version("b") is None
        assert await lookup.current_versions(["a", "b"]) == {"a": "1.0.0"}

    @pytest.mark.asyncio
    async def test_set_version(self):
        lookup = StaticVersionLookup()
        lookup.set_version("a", "2.0.0")
        assert await lookup.current_version("a") == "2.0.0"


class TestNpmRegistryLookup:
    @pytest.mark.asyncio
    async def test_latest_version(self):
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"name": "@openzeppelin/contracts", "version": "5.1.0"})

        lookup, client = _npm(handler)
        assert await lookup.current_version("@openzeppelin/contracts") == "5.1.0"
        assert seen == ["/@openzeppelin%2Fcontracts/latest"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_memoized(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, json={"version": "1.2.3"})

        lookup, client = _npm(handler)
        await lookup.current_version("pkg")
        await lookup.current_version("pkg")
        assert calls == 1
        await client.aclose()

    @pytest.mark.asyncio
    async def test_http_error_is_unknown(self):
        lookup, client = _npm(lambda request: httpx.Response(404))
        assert await lookup.current_version("missing") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_transport_error_is_unknown(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        lookup, client = _npm(handler)
        assert await lookup.current_version("pkg") is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_bad_body_is_unknown(self):
        lookup, client = _npm(lambda request: httpx.Response(200, text="not json"))
        assert await lookup.current_version("pkg") is None
        await client.aclose()


class TestCreateVersionLookup:
    def test_static_by_default(self):
        lookup = create_version_lookup(Settings(_env_file=None))
        assert isinstance(lookup, StaticVersionLookup)

    @pytest.mark.asyncio
    async def test_npm(self):
        lookup = create_version_lookup(Settings(_env_file=None, dependency_lookup="npm"))
        assert isinstance(lookup, NpmRegistryLookup)
        await lookup.aclose()


class TestClose:
    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        lookup = NpmRegistryLookup()
        await lookup.aclose()
        assert lookup._client.is_closed
        await lookup.aclose()

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self):
        lookup, client = _npm(lambda request: httpx.Response(200, json={"version": "1.0.0"}))
        await lookup.aclose()
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_static_lookup_close_is_a_no_op(self):
        await StaticVersionLookup({"a": "1"}).aclose()


class TestFingerprint:
    def _request(self, **customizations) -> GenerationRequest:
        return GenerationRequest(
            organization_type="LLP",
            transaction_pattern="B2B",
            artifact_category="Profit Sharing Agreement",
            customizations=customizations,
        )

    def test_stable_across_customization_order(self):
        a = self._request(partnerCount=3, contractName="Acme")
        b = self._request(contractName="Acme", partnerCount=3)
        assert compute_request_fingerprint(a, "0.8.20") == compute_request_fingerprint(b, "0.8.20")

    def test_changes_with_inputs(self):
        base = compute_request_fingerprint(self._request(partnerCount=3), "0.8.20")
        assert compute_request_fingerprint(self._request(partnerCount=4), "0.8.20") != base
        assert compute_request_fingerprint(self._request(partnerCount=3), "0.8.21") != base

    def test_hex_digest(self):
        fp = compute_request_fingerprint(self._request(), "0.8.20")
        assert len(fp) == 64
        int(fp, 16)

    def test_canonical_json_nested(self):
        assert canonical_json({"b": {"y": 1, "x": 2}, "a": [1]}) == '{"a":[1],"b":{"x":2,"y":1}}'
