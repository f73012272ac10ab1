"""Template-driven adapter for user-registered providers.

Request building
----------------

1. ``{prompt, model, api_key}`` is the substitution map.
2. The endpoint, the request body, the query section and any extra headers
   are substituted with it; the stored configuration is never mutated.
3. Configured query parameters are appended to the endpoint, then the
   credential itself when ``auth.kind`` is ``query``.
4. Headers always carry ``Content-Type: application/json``; ``bearer`` adds
   ``<key_name or Authorization>: Bearer <credential>`` and ``header`` adds
   ``<key_name>: <credential>``.
5. The request is sent with the configured method (POST by default).

Response handling
-----------------

Non-2xx responses are classified by status and carry the provider's own
error message when it has one. On success the text is extracted at
``response_path``; a path that does not resolve is a ``ResponsePathError``.
Custom providers do not report token usage in a known place, so usage is
always an approximation.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple

import httpx

from ..schemas.domain import TokenUsage
from ..schemas.provider import AuthKind, CustomProviderConfig, StructuredRequestTemplate
from .base import HttpProviderAdapter, ProviderDescriptor, ProviderResponse
from .errors import InvalidRequestError
from .templating import extract_text, substitute, substitution_map


def build_request_url(
    endpoint: str,
    query: Mapping[str, str],
    config: CustomProviderConfig,
    credentials: str,
) -> httpx.URL:
    """Append configured query params, then a query-param credential, to ``endpoint``."""
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as e:
        raise InvalidRequestError(f"Invalid endpoint URL for provider '{config.name}'") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidRequestError(f"Invalid endpoint URL for provider '{config.name}'")
    for key, value in query.items():
        url = url.copy_add_param(key, str(value))
    if config.auth.kind == AuthKind.query:
        url = url.copy_add_param(config.auth.key_name, credentials)
    return url


def build_request_headers(
    config: CustomProviderConfig,
    credentials: str,
    variables: Mapping[str, str],
) -> Dict[str, str]:
    """Headers for a custom provider request, including authentication."""
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    for key, value in substitute(dict(config.headers), variables).items():
        headers[key] = value
    if config.auth.kind == AuthKind.bearer:
        headers[config.auth.key_name or "Authorization"] = f"Bearer {credentials}"
    elif config.auth.kind == AuthKind.header:
        headers[config.auth.key_name] = credentials
    return headers


def render_request(
    config: CustomProviderConfig,
    *,
    model: str,
    prompt: str,
    credentials: str,
) -> Tuple[httpx.URL, Dict[str, str], Any]:
    """Build ``(url, headers, body)`` for one call without sending it."""
    variables = substitution_map(prompt=prompt, model=model, api_key=credentials)
    template = config.request_template
    query: Mapping[str, str] = {}
    if isinstance(template, StructuredRequestTemplate):
        query = substitute(dict(template.query), variables)
    body = substitute(template.body, variables)
    url = build_request_url(substitute(config.endpoint, variables), query, config, credentials)
    headers = build_request_headers(config, credentials, variables)
    return url, headers, body


class CustomProviderAdapter(HttpProviderAdapter):
    """Adapter for ``CustomProviderConfig`` descriptors."""

    async def call(
        self,
        provider: ProviderDescriptor,
        model: str,
        prompt: str,
        credentials: str,
    ) -> ProviderResponse:
        if not isinstance(provider, CustomProviderConfig):
            raise TypeError(f"CustomProviderAdapter cannot call built-in provider {provider!r}")
        url, headers, body = render_request(provider, model=model, prompt=prompt, credentials=credentials)
        data = await self._request_json(
            provider.method.value,
            url,
            headers=headers,
            json_body=body,
            secret=credentials,
        )
        text = extract_text(data, provider.response_path)
        self._logger.debug("Custom provider '%s' returned %d characters", provider.name, len(text))
        return ProviderResponse(text=text, usage=TokenUsage.estimate(prompt, text))

