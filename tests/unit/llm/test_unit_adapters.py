# tests/unit/llm/test_unit_adapters.py - v1
"""Tests for llm/adapters: request shaping and response normalization with mocked SDKs."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from scgen.core.errors import ProviderAuthError
from scgen.llm.adapters.anthropic_adapter import AnthropicAdapter
from scgen.llm.adapters.google_adapter import GoogleAdapter
from scgen.llm.adapters.ollama_adapter import OllamaAdapter
from scgen.llm.adapters.openai_adapter import OpenAICompatibleAdapter
from scgen.llm.models import Message


class TestOpenAICompatibleAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = OpenAICompatibleAdapter(
            model="meta-llama/Llama-3.3-70B-Instruct-Turbo",
            api_key="k",
            base_url="https://api.together.xyz/v1",
            provider_id="together",
        )
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="hello world"))],
            usage=SimpleNamespace(prompt_tokens=11, completion_tokens=7),
        ))
        adapter._OpenAICompatibleAdapter__client = sdk  # type: ignore[attr-defined]

        resp = await adapter.complete(
            [Message(role="user", content="hi")], system="sys", max_tokens=100,
        )

        kwargs = sdk.chat.completions.create.await_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["max_tokens"] == 100
        assert resp.content == "hello world"
        assert resp.input_tokens == 11
        assert resp.output_tokens == 7
        assert resp.provider == "together"
        assert adapter.provider_name == "together"

    @pytest.mark.asyncio
    async def test_no_choices(self):
        adapter = OpenAICompatibleAdapter(model="m", provider_id="aiml")
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(
            return_value=SimpleNamespace(choices=[], usage=None),
        )
        adapter._OpenAICompatibleAdapter__client = sdk  # type: ignore[attr-defined]
        resp = await adapter.complete([Message(role="user", content="hi")])
        assert resp.content == ""
        assert resp.input_tokens == 0

    @pytest.mark.asyncio
    async def test_sdk_errors_escape(self):
        adapter = OpenAICompatibleAdapter(model="m")
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(side_effect=RuntimeError("down"))
        adapter._OpenAICompatibleAdapter__client = sdk  # type: ignore[attr-defined]
        with pytest.raises(RuntimeError):
            await adapter.complete([Message(role="user", content="hi")])


class TestAnthropicAdapter:
    @pytest.mark.asyncio
    async def test_joins_text_blocks(self):
        adapter = AnthropicAdapter(model="claude-sonnet-4-20250514", api_key="k")
        sdk = MagicMock()
        sdk.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="part one "),
                SimpleNamespace(type="tool_use", text="ignored"),
                SimpleNamespace(type="text", text="part two"),
            ],
            usage=SimpleNamespace(input_tokens=5, output_tokens=9),
            model="claude-sonnet-4-20250514",
        ))
        adapter._AnthropicAdapter__client = sdk  # type: ignore[attr-defined]

        resp = await adapter.complete([Message(role="user", content="hi")], system="sys")

        assert resp.content == "part one part two"
        assert sdk.messages.create.await_args.kwargs["system"] == "sys"
        assert resp.provider == "anthropic"

    @pytest.mark.asyncio
    async def test_system_messages_folded(self):
        adapter = AnthropicAdapter(api_key="k", provider_id="claude-backup")
        sdk = MagicMock()
        sdk.messages.create = AsyncMock(return_value=SimpleNamespace(
            content=[SimpleNamespace(type="text", text="ok")],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
            model="m",
            stop_reason="max_tokens",
        ))
        adapter._AnthropicAdapter__client = sdk  # type: ignore[attr-defined]

        resp = await adapter.complete(
            [Message(role="system", content="extra"), Message(role="user", content="hi")],
            system="base",
        )

        kwargs = sdk.messages.create.await_args.kwargs
        assert kwargs["system"] == "base\n\nextra"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert resp.provider == "claude-backup"

    @pytest.mark.asyncio
    async def test_missing_key_is_auth_error(self):
        with pytest.raises(ProviderAuthError):
            await AnthropicAdapter(api_key="").complete([Message(role="user", content="hi")])


class TestGoogleAdapter:
    @pytest.mark.asyncio
    async def test_missing_key_is_auth_error(self):
        pytest.importorskip("google.generativeai")
        with pytest.raises(ProviderAuthError) as exc_info:
            await GoogleAdapter(api_key="", provider_id="gemini").complete(
                [Message(role="user", content="hi")],
            )
        assert exc_info.value.provider_id == "gemini"


class TestOllamaAdapter:
    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = OllamaAdapter(model="llama3", provider_id="local")
        sdk = MagicMock()
        sdk.chat = AsyncMock(return_value={
            "message": {"content": "pragma solidity ^0.8.20;"},
            "prompt_eval_count": 12,
            "eval_count": 30,
            "done_reason": "stop",
        })
        adapter._client = sdk

        resp = await adapter.complete([Message(role="user", content="hi")], system="sys", max_tokens=64)

        kwargs = sdk.chat.await_args.kwargs
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}
        assert kwargs["options"]["num_predict"] == 64
        assert resp.content == "pragma solidity ^0.8.20;"
        assert (resp.input_tokens, resp.output_tokens) == (12, 30)
        assert resp.provider == "local"
        assert adapter.provider_name == "local"
