from __future__ import annotations

import json
from typing import List

import httpx
import pytest

from agentchain.agent_core.providers.builtin import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from agentchain.agent_core.providers.errors import (
    InvalidRequestError,
    PayloadTooLargeError,
    ProviderResponseError,
    ProviderServerError,
    RateLimitError,
)
from agentchain.agent_core.schemas.domain import BuiltInProvider

pytestmark = pytest.mark.asyncio


def _client(handler, captured: List[httpx.Request]) -> httpx.AsyncClient:
    def _wrapped(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return handler(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(_wrapped))


async def test_anthropic_request_shape_and_usage() -> None:
    captured: List[httpx.Request] = []
    body = {
        "content": [{"type": "text", "text": "Hello"}, {"type": "text", "text": " world"}],
        "usage": {"input_tokens": 12, "output_tokens": 3},
    }
    adapter = AnthropicAdapter(
        base_url="https://mock.anthropic", max_tokens=256, client=_client(lambda r: httpx.Response(200, json=body), captured)
    )

    res = await adapter.call(BuiltInProvider.anthropic, "claude-x", "prompt text", "ak-1")

    assert res.text == "Hello world"
    assert (res.usage.input_tokens, res.usage.output_tokens, res.usage.approximate) == (12, 3, False)
    req = captured[0]
    assert str(req.url) == "https://mock.anthropic/v1/messages"
    assert req.headers["x-api-key"] == "ak-1"
    assert req.headers["anthropic-version"] == "2023-06-01"
    assert json.loads(req.content) == {
        "model": "claude-x",
        "max_tokens": 256,
        "messages": [{"role": "user", "content": "prompt text"}],
    }


async def test_anthropic_without_text_blocks_is_response_error() -> None:
    captured: List[httpx.Request] = []
    adapter = AnthropicAdapter(
        base_url="https://mock.anthropic",
        client=_client(lambda r: httpx.Response(200, json={"content": [{"type": "tool_use"}]}), captured),
    )
    with pytest.raises(ProviderResponseError):
        await adapter.call(BuiltInProvider.anthropic, "claude-x", "p", "ak-1")


async def test_anthropic_missing_usage_is_estimated() -> None:
    captured: List[httpx.Request] = []
    body = {"content": [{"type": "text", "text": "hello"}]}
    adapter = AnthropicAdapter(
        base_url="https://mock.anthropic", client=_client(lambda r: httpx.Response(200, json=body), captured)
    )

    res = await adapter.call(BuiltInProvider.anthropic, "claude-x", "abcdefgh", "ak-1")

    assert res.usage.approximate is True
    assert (res.usage.input_tokens, res.usage.output_tokens) == (2, 2)


async def test_openai_request_shape_and_usage() -> None:
    captured: List[httpx.Request] = []
    body = {
        "choices": [{"message": {"role": "assistant", "content": "Answer"}}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 1},
    }
    adapter = OpenAIAdapter(
        base_url="https://mock.openai/", client=_client(lambda r: httpx.Response(200, json=body), captured)
    )

    res = await adapter.call(BuiltInProvider.openai, "gpt-x", "q", "sk-1")

    assert res.text == "Answer"
    assert res.usage.total_tokens == 6
    assert res.usage.approximate is False
    req = captured[0]
    assert str(req.url) == "https://mock.openai/v1/chat/completions"
    assert req.headers["authorization"] == "Bearer sk-1"


async def test_openai_missing_usage_is_estimated() -> None:
    captured: List[httpx.Request] = []
    body = {"choices": [{"message": {"content": "abcdefgh"}}]}
    adapter = OpenAIAdapter(base_url="https://mock.openai", client=_client(lambda r: httpx.Response(200, json=body), captured))

    res = await adapter.call(BuiltInProvider.openai, "gpt-x", "abcd", "sk-1")

    assert res.usage.approximate is True
    assert (res.usage.input_tokens, res.usage.output_tokens) == (1, 2)


async def test_gemini_sends_key_as_query_param() -> None:
    captured: List[httpx.Request] = []
    body = {
        "candidates": [{"content": {"parts": [{"text": "Gemini says hi"}]}}],
        "usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 4},
    }
    adapter = GeminiAdapter(base_url="https://mock.gemini", client=_client(lambda r: httpx.Response(200, json=body), captured))

    res = await adapter.call(BuiltInProvider.google, "gemini-x", "hi", "gk-1")

    assert res.text == "Gemini says hi"
    assert res.usage.approximate is False
    req = captured[0]
    assert req.url.path == "/v1beta/models/gemini-x:generateContent"
    assert req.url.params["key"] == "gk-1"
    assert "authorization" not in req.headers


async def test_gemini_without_usage_metadata_is_estimated() -> None:
    captured: List[httpx.Request] = []
    body = {"candidates": [{"content": {"parts": [{"text": "12345"}]}}]}
    adapter = GeminiAdapter(base_url="https://mock.gemini", client=_client(lambda r: httpx.Response(200, json=body), captured))

    res = await adapter.call(BuiltInProvider.google, "gemini-x", "123456789", "gk-1")

    assert res.usage.approximate is True
    assert (res.usage.input_tokens, res.usage.output_tokens) == (3, 2)


@pytest.mark.parametrize(
    "status_code,expected",
    [
        (429, RateLimitError),
        (413, PayloadTooLargeError),
        (400, InvalidRequestError),
        (500, ProviderServerError),
    ],
)
async def test_builtin_status_mapping(status_code: int, expected: type) -> None:
    captured: List[httpx.Request] = []
    adapter = OpenAIAdapter(
        base_url="https://mock.openai",
        client=_client(lambda r: httpx.Response(status_code, json={"error": {"message": "nope"}}), captured),
    )
    with pytest.raises(expected, match="nope"):
        await adapter.call(BuiltInProvider.openai, "gpt-x", "q", "sk-1")


async def test_unexpected_shape_names_the_provider() -> None:
    captured: List[httpx.Request] = []
    adapter = OpenAIAdapter(
        base_url="https://mock.openai", client=_client(lambda r: httpx.Response(200, json={"choices": []}), captured)
    )
    with pytest.raises(ProviderResponseError, match="openai"):
        await adapter.call(BuiltInProvider.openai, "gpt-x", "q", "sk-1")
