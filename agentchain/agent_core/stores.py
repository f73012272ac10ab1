from __future__ import annotations

"""Collaborator contracts for credentials and custom provider configurations.

The engine depends on these Protocols instead of concrete storage.

Contract guidelines
-------------------

- Lookups are synchronous and side-effect free, so the engine can validate a
  whole workflow before it transitions to running.
- Credential stores are keyed by provider identifier: the built-in tag
  (``"anthropic"``, ``"openai"``, ``"google"``) or the custom provider id.
  They return ``None`` when nothing is configured.
- Provider stores return ``None`` for unknown ids. The engine never mutates
  what they return.

Implementations here are in-memory or settings-backed; persistent storage is
left to the embedding application.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

from ..core.config import Settings
from .schemas.domain import BuiltInProvider
from .schemas.provider import CustomProviderConfig


class CredentialStore(Protocol):
    """Look up the secret for a provider identifier."""

    def get(self, provider_key: str) -> Optional[str]:
        """
        Return the credential for ``provider_key``.

        Args:
            provider_key: Built-in provider tag or custom provider id.

        Returns:
            The secret, or None when not configured.
        """
        ...


class ProviderStore(Protocol):
    """Read access to registered custom provider configurations."""

    def get(self, provider_id: str) -> Optional[CustomProviderConfig]:
        """
        Return the configuration for ``provider_id``.

        Args:
            provider_id: The custom provider identifier.

        Returns:
            The configuration if registered, else None.
        """
        ...


class InMemoryCredentialStore:
    """Dict-backed credential store."""

    def __init__(self, credentials: Optional[Mapping[str, str]] = None) -> None:
        self._credentials: Dict[str, str] = dict(credentials or {})

    def get(self, provider_key: str) -> Optional[str]:
        return self._credentials.get(provider_key) or None

    def set(self, provider_key: str, secret: str) -> None:
        self._credentials[provider_key] = secret

    def __repr__(self) -> str:
        return f"InMemoryCredentialStore(keys={sorted(self._credentials)})"


class SettingsCredentialStore:
    """Built-in provider keys from environment-backed ``Settings``."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get(self, provider_key: str) -> Optional[str]:
        if provider_key == BuiltInProvider.anthropic.value:
            return self._settings.anthropic.api_key
        if provider_key == BuiltInProvider.openai.value:
            return self._settings.openai.api_key
        if provider_key == BuiltInProvider.google.value:
            return self._settings.google.api_key
        return None


class LayeredCredentialStore:
    """Consult several stores in order and return the first configured secret."""

    def __init__(self, stores: Iterable[CredentialStore]) -> None:
        self._stores: List[CredentialStore] = list(stores)

    def get(self, provider_key: str) -> Optional[str]:
        for store in self._stores:
            secret = store.get(provider_key)
            if secret:
                return secret
        return None


class InMemoryProviderStore:
    """
    In-memory registry of custom provider configurations.

    Notes:
        - ``save`` rejects a second provider with the same name.
        - ``save`` on an existing id replaces it and keeps ``created_at``.
    """

    def __init__(self, providers: Optional[Iterable[CustomProviderConfig]] = None) -> None:
        self._providers: Dict[str, CustomProviderConfig] = {}
        for provider in providers or []:
            self.save(provider)

    def get(self, provider_id: str) -> Optional[CustomProviderConfig]:
        return self._providers.get(provider_id)

    def list(self) -> List[CustomProviderConfig]:
        return sorted(self._providers.values(), key=lambda p: p.created_at)

    def save(self, provider: CustomProviderConfig) -> CustomProviderConfig:
        """
        Register or replace a provider.

        Raises:
            ValueError: If another provider already uses the same name.
        """
        for existing in self._providers.values():
            if existing.id != provider.id and existing.name == provider.name:
                raise ValueError(f'Provider with name "{provider.name}" already exists')
        previous = self._providers.get(provider.id)
        if previous is not None:
            provider = provider.model_copy(
                update={"created_at": previous.created_at, "updated_at": datetime.now(timezone.utc)}
            )
        self._providers[provider.id] = provider
        return provider

    def delete(self, provider_id: str) -> bool:
        return self._providers.pop(provider_id, None) is not None
