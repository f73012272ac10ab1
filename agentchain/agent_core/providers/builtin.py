"""Built-in provider adapters.

Each adapter speaks one vendor's fixed request/response shape over HTTP:

- ``AnthropicAdapter``: ``POST /v1/messages`` with an ``x-api-key`` header.
- ``OpenAIAdapter``: ``POST /v1/chat/completions`` with a bearer token.
- ``GeminiAdapter``: ``POST /v1beta/models/{model}:generateContent`` with the
  key as a ``key`` query parameter.

Anthropic and OpenAI report token usage. Gemini reports it in
``usageMetadata`` on most responses; when absent the counts are estimated and
flagged as approximate.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ..schemas.domain import BuiltInProvider, TokenUsage
from .base import DEFAULT_TIMEOUT, HttpProviderAdapter, ProviderDescriptor, ProviderResponse
from .errors import ProviderResponseError
from .templating import resolve_path

DEFAULT_MAX_TOKENS = 1024


def _int_or_none(value: Any) -> Optional[int]:
    return int(value) if isinstance(value, (int, float)) else None


class BuiltInAdapter(HttpProviderAdapter):
    """Common constructor for the vendor adapters."""

    provider: BuiltInProvider
    default_base_url: str

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.max_tokens = max_tokens

    def _text_at(self, data: Any, path: str) -> str:
        try:
            value = resolve_path(data, path)
        except ProviderResponseError as e:
            raise ProviderResponseError(
                f"Unexpected response shape from {self.provider.value}: missing {path}", details=data
            ) from e
        if not isinstance(value, str):
            raise ProviderResponseError(
                f"Unexpected response type from {self.provider.value} at {path}", details=data
            )
        return value


class AnthropicAdapter(BuiltInAdapter):
    provider = BuiltInProvider.anthropic
    default_base_url = "https://api.anthropic.com"

    def __init__(self, *, api_version: str = "2023-06-01", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_version = api_version

    async def call(self, provider: ProviderDescriptor, model: str, prompt: str, credentials: str) -> ProviderResponse:
        data = await self._request_json(
            "POST",
            f"{self.base_url}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": credentials,
                "anthropic-version": self.api_version,
            },
            json_body={
                "model": model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
            secret=credentials,
        )
        blocks = data.get("content") if isinstance(data, dict) else None
        text_blocks = [b.get("text", "") for b in blocks or [] if isinstance(b, dict) and b.get("type") == "text"]
        if not text_blocks:
            raise ProviderResponseError("Unexpected response type from Claude API", details=data)
        text = "".join(text_blocks)
        usage = data.get("usage") or {}
        input_tokens = _int_or_none(usage.get("input_tokens"))
        output_tokens = _int_or_none(usage.get("output_tokens"))
        if input_tokens is None or output_tokens is None:
            return ProviderResponse(text=text, usage=TokenUsage.estimate(prompt, text))
        return ProviderResponse(text=text, usage=TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens))


class OpenAIAdapter(BuiltInAdapter):
    provider = BuiltInProvider.openai
    default_base_url = "https://api.openai.com"

    async def call(self, provider: ProviderDescriptor, model: str, prompt: str, credentials: str) -> ProviderResponse:
        data = await self._request_json(
            "POST",
            f"{self.base_url}/v1/chat/completions",
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {credentials}"},
            json_body={
                "model": model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": self.max_tokens,
            },
            secret=credentials,
        )
        text = self._text_at(data, "choices[0].message.content")
        usage = data.get("usage") or {}
        prompt_tokens = _int_or_none(usage.get("prompt_tokens"))
        completion_tokens = _int_or_none(usage.get("completion_tokens"))
        if prompt_tokens is None or completion_tokens is None:
            return ProviderResponse(text=text, usage=TokenUsage.estimate(prompt, text))
        return ProviderResponse(
            text=text, usage=TokenUsage(input_tokens=prompt_tokens, output_tokens=completion_tokens)
        )


class GeminiAdapter(BuiltInAdapter):
    provider = BuiltInProvider.google
    default_base_url = "https://generativelanguage.googleapis.com"

    async def call(self, provider: ProviderDescriptor, model: str, prompt: str, credentials: str) -> ProviderResponse:
        data = await self._request_json(
            "POST",
            f"{self.base_url}/v1beta/models/{model}:generateContent",
            headers={"Content-Type": "application/json"},
            params={"key": credentials},
            json_body={
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": {"maxOutputTokens": self.max_tokens},
            },
            secret=credentials,
        )
        text = self._text_at(data, "candidates[0].content.parts[0].text")
        meta = data.get("usageMetadata") or {}
        prompt_tokens = _int_or_none(meta.get("promptTokenCount"))
        output_tokens = _int_or_none(meta.get("candidatesTokenCount"))
        if prompt_tokens is None or output_tokens is None:
            return ProviderResponse(text=text, usage=TokenUsage.estimate(prompt, text))
        return ProviderResponse(text=text, usage=TokenUsage(input_tokens=prompt_tokens, output_tokens=output_tokens))
