"""Workflow execution core: providers, runtime and run control.

This package contains the "engine room" of the agent chain.

Design overview
---------------

- ``agent_core.providers`` turns ``(provider, model, prompt, credentials)``
  into text plus token usage, for built-in vendors and template-driven custom
  providers, and classifies failures as retryable or not.
- ``agent_core.runtime`` executes the chain with LangGraph: one agent at a
  time, each agent's output feeding the next, with retries, resume from an
  index and cooperative cancellation.
- ``agent_core.stores`` defines the credential and custom provider lookups the
  engine depends on.

Typical usage
-------------

Most applications should use ``agent_core.factory.build_service`` and drive
runs through ``WorkflowService``:

1. Build the service from ``Settings``.
2. ``start`` a list of ``AgentDefinition`` objects.
3. On failure, ``retry_from_failed`` or ``retry_entire_workflow``.
"""

from .factory import build_engine, build_router, build_service
from .schemas.domain import (
    AgentDefinition,
    AgentResult,
    AgentStatus,
    BuiltInProvider,
    CustomProviderRef,
    RunState,
    RunStatus,
    TokenUsage,
)
from .service import WorkflowService

__all__ = [
    "AgentDefinition",
    "AgentResult",
    "AgentStatus",
    "BuiltInProvider",
    "CustomProviderRef",
    "RunState",
    "RunStatus",
    "TokenUsage",
    "WorkflowService",
    "build_engine",
    "build_router",
    "build_service",
]
