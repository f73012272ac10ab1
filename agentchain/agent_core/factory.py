from __future__ import annotations

"""Convenience factories for wiring the agent core.

Helpers to build the default provider router from ``Settings`` and to
instantiate a ``WorkflowEngine`` or ``WorkflowService`` with in-memory stores.

Tests and embedding applications can pass their own ``httpx.AsyncClient``
(for example one backed by ``httpx.MockTransport``), stores and sleep function.
"""

from typing import Awaitable, Callable, Optional

import httpx

from ..core.config import Settings
from .providers.builtin import AnthropicAdapter, GeminiAdapter, OpenAIAdapter
from .providers.custom import CustomProviderAdapter
from .providers.router import ProviderRouter
from .runtime import EngineDeps
from .runtime.engine import WorkflowEngine
from .runtime.executor import AgentExecutor
from .schemas.domain import BuiltInProvider
from .service import WorkflowService
from .stores import (
    InMemoryCredentialStore,
    InMemoryProviderStore,
    LayeredCredentialStore,
    SettingsCredentialStore,
)


def build_router(settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> ProviderRouter:
    """Build a ``ProviderRouter`` with every built-in adapter and the custom adapter."""
    engine_cfg = settings.engine
    common = {"client": client, "timeout": engine_cfg.request_timeout}
    router = ProviderRouter(custom=CustomProviderAdapter(**common))
    router.register(
        BuiltInProvider.anthropic,
        AnthropicAdapter(
            base_url=settings.anthropic.base_url,
            api_version=settings.anthropic.api_version,
            max_tokens=engine_cfg.max_output_tokens,
            **common,
        ),
    )
    router.register(
        BuiltInProvider.openai,
        OpenAIAdapter(base_url=settings.openai.base_url, max_tokens=engine_cfg.max_output_tokens, **common),
    )
    router.register(
        BuiltInProvider.google,
        GeminiAdapter(base_url=settings.google.base_url, max_tokens=engine_cfg.max_output_tokens, **common),
    )
    return router


def build_engine(*, deps: EngineDeps) -> WorkflowEngine:
    """Construct a ``WorkflowEngine`` from dependencies."""
    return WorkflowEngine(deps=deps)


def build_service(
    settings: Optional[Settings] = None,
    *,
    providers: Optional[InMemoryProviderStore] = None,
    client: Optional[httpx.AsyncClient] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> WorkflowService:
    """Wire router, executor, stores and engine into a ``WorkflowService``.

    Credentials are looked up in per-request overrides first, then in the
    settings-backed store.
    """
    if settings is None:
        from ..core.config import settings as default_settings

        settings = default_settings

    router = build_router(settings, client=client)
    executor_kwargs = {
        "max_retries": settings.engine.max_retries,
        "base_delay": settings.engine.retry_base_delay,
    }
    if sleep is not None:
        executor_kwargs["sleep"] = sleep
    executor = AgentExecutor(router, **executor_kwargs)

    overrides = InMemoryCredentialStore()
    credentials = LayeredCredentialStore([overrides, SettingsCredentialStore(settings)])
    provider_store = providers if providers is not None else InMemoryProviderStore()
    engine = build_engine(
        deps=EngineDeps(executor=executor, credentials=credentials, providers=provider_store)
    )
    return WorkflowService(
        engine=engine,
        providers=provider_store,
        credential_overrides=overrides,
        router=router,
    )
