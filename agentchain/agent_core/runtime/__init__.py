"""LangGraph-based execution runtime for agent workflows.

 The runtime takes an ordered list of agent definitions and executes them as a
 linear chain:

 - ``AgentExecutor`` performs one provider call with retry and backoff.
 - ``RunStateMachine`` owns the observable run state and its transitions.
 - ``WorkflowEngine`` sequences the agents, threads outputs into inputs, and
   implements resume-from-index and cooperative cancellation.
 """

from .engine import WorkflowEngine, compose_prompt
from .errors import (
    AgentExecutionError,
    WorkflowAlreadyRunningError,
    WorkflowCancelledError,
    WorkflowConfigurationError,
    WorkflowError,
)
from .executor import AgentExecutor, ExecutionOutcome
from .models import EngineDeps
from .state import RunStateMachine

__all__ = [
    "AgentExecutionError",
    "AgentExecutor",
    "EngineDeps",
    "ExecutionOutcome",
    "RunStateMachine",
    "WorkflowAlreadyRunningError",
    "WorkflowCancelledError",
    "WorkflowConfigurationError",
    "WorkflowEngine",
    "WorkflowError",
    "compose_prompt",
]
