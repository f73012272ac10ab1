"""Pydantic schemas for the agent core.

- ``domain``: agent definitions, results and run state.
- ``provider``: custom provider configuration and request template variants.
"""

from .base import BaseSchema, FrozenSchema
from .domain import (
    CANCELLED_MESSAGE,
    NO_INDEX,
    AgentDefinition,
    AgentResult,
    AgentStatus,
    BuiltInProvider,
    CustomProviderRef,
    ProviderRef,
    RunState,
    RunStatus,
    TokenUsage,
    provider_key,
)
from .provider import (
    AuthKind,
    AuthSpec,
    BareRequestTemplate,
    CustomProviderConfig,
    HttpMethod,
    RequestTemplate,
    StructuredRequestTemplate,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "CANCELLED_MESSAGE",
    "NO_INDEX",
    "AgentDefinition",
    "AgentResult",
    "AgentStatus",
    "BuiltInProvider",
    "CustomProviderRef",
    "ProviderRef",
    "RunState",
    "RunStatus",
    "TokenUsage",
    "provider_key",
    "AuthKind",
    "AuthSpec",
    "BareRequestTemplate",
    "CustomProviderConfig",
    "HttpMethod",
    "RequestTemplate",
    "StructuredRequestTemplate",
]
