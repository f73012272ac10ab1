"""Provider adapter contract and shared HTTP plumbing.

Contract
--------

``ProviderAdapter.call(provider, model, prompt, credentials)`` performs one
HTTP round-trip and returns a ``ProviderResponse`` (text plus token usage), or
raises a ``ProviderError`` subclass whose ``retryable`` flag tells the agent
executor whether to try again.

``provider`` is a ``ProviderDescriptor``: either a ``BuiltInProvider`` tag or a
resolved ``CustomProviderConfig``.

Secrets
-------

Adapters must never log a credential. ``redact`` replaces the secret with
``[REDACTED]`` in any string bound for a log line.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable
from urllib.parse import quote, quote_plus

import httpx

from ..schemas.base import FrozenSchema
from ..schemas.domain import BuiltInProvider, TokenUsage
from ..schemas.provider import CustomProviderConfig
from .errors import ProviderResponseError, ProviderTransportError, error_from_status

ProviderDescriptor = Union[BuiltInProvider, CustomProviderConfig]

REDACTED = "[REDACTED]"

DEFAULT_TIMEOUT = 60.0


class ProviderResponse(FrozenSchema):
    """Normalized result of one provider call."""

    text: str
    usage: TokenUsage


@runtime_checkable
class ProviderAdapter(Protocol):
    """Anything that can turn a prompt into text through one provider call."""

    async def call(
        self,
        provider: ProviderDescriptor,
        model: str,
        prompt: str,
        credentials: str,
    ) -> ProviderResponse:
        ...


def redact(value: str, secret: Optional[str]) -> str:
    """Replace every occurrence of ``secret`` in ``value``, percent-encoded forms included."""
    if not secret:
        return value
    for form in {secret, quote(secret, safe=""), quote_plus(secret)}:
        value = value.replace(form, REDACTED)
    return value


def redact_headers(headers: Mapping[str, str], secret: Optional[str]) -> Dict[str, str]:
    """Copy of ``headers`` safe to log."""
    return {k: (REDACTED if secret and redact(v, secret) != v else v) for k, v in headers.items()}


class HttpProviderAdapter:
    """Shared request/response handling for adapters that speak JSON over HTTP.

    Owns an ``httpx.AsyncClient`` unless one is injected. Transport failures
    and timeouts become ``ProviderTransportError``; non-2xx responses are
    classified with ``error_from_status``.
    """

    def __init__(self, *, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(type(self).__module__)

    async def aclose(self) -> None:
        """Close the underlying client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        url: Union[str, httpx.URL],
        *,
        headers: Mapping[str, str],
        json_body: Any = None,
        params: Optional[Mapping[str, str]] = None,
        secret: Optional[str] = None,
    ) -> Any:
        """Send one request and return the parsed JSON body of a 2xx response.

        Raises:
            ProviderTransportError: On connection failures and timeouts.
            ProviderError: Classified from the status code on non-2xx responses.
            ProviderResponseError: If a 2xx body is not valid JSON.
        """
        safe_url = redact(str(url), secret)
        self._logger.debug("Provider request: %s %s headers=%s", method, safe_url, redact_headers(headers, secret))
        kwargs: Dict[str, Any] = {"headers": dict(headers), "timeout": self._timeout}
        if params:
            kwargs["params"] = dict(params)
        if json_body is not None and method != "GET":
            kwargs["json"] = json_body
        try:
            r = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderTransportError(f"Request to {safe_url} timed out after {self._timeout}s") from e
        except httpx.TransportError as e:
            raise ProviderTransportError(f"Network error calling {safe_url}: {redact(str(e), secret)}") from e

        if not r.is_success:
            try:
                payload = r.json()
            except ValueError:
                payload = None
            self._logger.warning("Provider API error: %s %s (%s)", r.status_code, r.reason_phrase, safe_url)
            raise error_from_status(r.status_code, r.reason_phrase, payload)

        try:
            return r.json()
        except ValueError as e:
            raise ProviderResponseError(
                "Provider returned a non-JSON response", status_code=r.status_code, details=r.text[:500]
            ) from e
