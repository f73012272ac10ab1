"""Domain models for workflow definitions and run state.

These are the records the workflow engine reads and produces:

- ``AgentDefinition``: one user-authored step of the chain. Immutable during a run.
- ``AgentResult``: the output of one successfully completed agent. Created once,
  never mutated.
- ``AgentStatus`` / ``RunState``: the observable state of the current run. Only
  the engine's state machine mutates these; consumers receive deep copies.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema, FrozenSchema

#: Sentinel used for ``current_index`` / ``failed_index`` when no agent applies.
NO_INDEX = -1

#: ``run_error`` value recorded when a run is stopped by the user.
CANCELLED_MESSAGE = "Workflow stopped by user"


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


class BuiltInProvider(str, Enum):
    """Providers with a fixed, vendor-specific protocol."""

    anthropic = "anthropic"
    openai = "openai"
    google = "google"


class RunStatus(str, Enum):
    """Lifecycle status of a workflow run."""

    idle = "idle"
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class CustomProviderRef(FrozenSchema):
    """Reference from an agent to a registered custom provider configuration."""

    type: Literal["custom"] = "custom"
    id: str
    name: Optional[str] = None


ProviderRef = Union[BuiltInProvider, CustomProviderRef]


def provider_key(ref: ProviderRef) -> str:
    """Return the identifier used to look up credentials for ``ref``.

    Built-in providers are keyed by their tag, custom providers by their id.
    """
    if isinstance(ref, BuiltInProvider):
        return ref.value
    return ref.id


class AgentDefinition(FrozenSchema):
    """
    One step of the workflow: a role prompt bound to a provider and model.

    ``provider`` and ``model`` may be unset while a workflow is being edited; a
    run refuses to start until every agent it will execute has both.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    prompt: str
    provider: Optional[ProviderRef] = None
    model: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.provider is not None and bool(self.model)


class TokenUsage(FrozenSchema):
    """
    Token accounting for one agent call.

    ``approximate`` is True when the provider did not report counts and they
    were estimated from character length.
    """

    input_tokens: int = 0
    output_tokens: int = 0
    approximate: bool = False

    @classmethod
    def estimate(cls, prompt: str, output: str) -> "TokenUsage":
        """Estimate usage at roughly four characters per token."""
        return cls(
            input_tokens=math.ceil(len(prompt) / 4),
            output_tokens=math.ceil(len(output) / 4),
            approximate=True,
        )

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class AgentResult(FrozenSchema):
    """Output of one successfully completed agent."""

    agent_index: int
    agent_id: str
    input_text: str
    output_text: str
    execution_time_ms: int
    usage: TokenUsage = Field(default_factory=TokenUsage)
    timestamp: datetime = Field(default_factory=_utc_now)


class AgentStatus(BaseSchema):
    """Per-agent progress as seen by consumers of the run state."""

    agent_id: str
    is_executing: bool = False
    is_complete: bool = False
    error: Optional[str] = None
    execution_time_ms: Optional[int] = None
    retry_count: int = 0


class RunState(BaseSchema):
    """
    Observable state of one workflow run.

    ``results`` is append-only during a run and always holds the results for
    agents ``0..len(results)-1`` in order.
    """

    status: RunStatus = RunStatus.idle
    is_running: bool = False
    current_index: int = NO_INDEX
    results: List[AgentResult] = Field(default_factory=list)
    agent_status: Dict[str, AgentStatus] = Field(default_factory=dict)
    run_error: Optional[str] = None
    failed_index: int = NO_INDEX
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
