"""Error types for workflow execution.

Defines a small hierarchy of exceptions raised by the engine and the agent
executor to signal configuration problems, concurrent starts, cancellation
and terminal agent failures.
"""

from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    """Base error for all workflow execution exceptions."""


class WorkflowConfigurationError(WorkflowError):
    """Raised before any network call when a workflow cannot start.

    Carries the offending agent's index and title.
    """

    def __init__(self, message: str, *, agent_index: int, agent_title: Optional[str] = None) -> None:
        text = f"{agent_title}: {message}" if agent_title else message
        super().__init__(text)
        self.reason = message
        self.agent_index = agent_index
        self.agent_title = agent_title


class WorkflowAlreadyRunningError(WorkflowError):
    """Raised when a run is started while another is active."""

    def __init__(self) -> None:
        super().__init__("A workflow run is already in progress")


class WorkflowCancelledError(WorkflowError):
    """Raised inside the executor when a stop is observed before a retry."""


class AgentExecutionError(WorkflowError):
    """Terminal failure of one agent after the retry policy ran out.

    Attributes:
        cause: The last underlying exception.
        retry_count: Retries performed before giving up.
        elapsed_ms: Wall-clock time spent on the agent, retries included.
    """

    def __init__(self, cause: BaseException, *, retry_count: int, elapsed_ms: int) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
        self.retry_count = retry_count
        self.elapsed_ms = elapsed_ms
