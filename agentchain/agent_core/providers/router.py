"""Dispatch provider calls to the matching adapter.

``ProviderRouter`` itself satisfies ``ProviderAdapter``: the agent executor
calls it with any ``ProviderDescriptor`` and it forwards to the vendor
adapter for built-in tags or to the custom adapter for configurations.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from ..schemas.domain import BuiltInProvider
from ..schemas.provider import CustomProviderConfig
from .base import ProviderAdapter, ProviderDescriptor, ProviderResponse
from .errors import InvalidRequestError


class ProviderRouter:
    """Route calls by provider descriptor.

    Notes:
        - Calling a built-in provider with no registered adapter raises
          ``InvalidRequestError`` (non-retryable).
    """

    def __init__(
        self,
        builtin: Optional[Mapping[BuiltInProvider, ProviderAdapter]] = None,
        custom: Optional[ProviderAdapter] = None,
    ) -> None:
        self._builtin: Dict[BuiltInProvider, ProviderAdapter] = dict(builtin or {})
        self._custom = custom

    def register(self, provider: BuiltInProvider, adapter: ProviderAdapter) -> None:
        """Register (or replace) the adapter for a built-in provider."""
        self._builtin[provider] = adapter

    def adapter_for(self, provider: ProviderDescriptor) -> ProviderAdapter:
        if isinstance(provider, CustomProviderConfig):
            if self._custom is None:
                raise InvalidRequestError("Custom providers are not enabled")
            return self._custom
        try:
            return self._builtin[provider]
        except KeyError:
            raise InvalidRequestError(f"Unknown built-in provider: {provider}") from None

    async def call(
        self,
        provider: ProviderDescriptor,
        model: str,
        prompt: str,
        credentials: str,
    ) -> ProviderResponse:
        return await self.adapter_for(provider).call(provider, model, prompt, credentials)

    async def aclose(self) -> None:
        """Close every adapter that owns a client."""
        adapters = list(self._builtin.values())
        if self._custom is not None:
            adapters.append(self._custom)
        for adapter in adapters:
            close = getattr(adapter, "aclose", None)
            if close is not None:
                await close()
