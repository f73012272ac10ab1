from __future__ import annotations

"""Runtime dependency bundle and LangGraph state types.

- ``EngineDeps`` collects the collaborators the engine needs.
- ``_GraphState`` is the mutable state passed between LangGraph nodes.
"""

from dataclasses import dataclass
from typing import List, NotRequired, Optional, Required, TypedDict

from ..schemas.domain import AgentDefinition
from ..stores import CredentialStore, ProviderStore
from .executor import AgentExecutor


@dataclass(frozen=True)
class EngineDeps:
    """Dependency bundle for ``WorkflowEngine``.

    - ``executor`` performs one agent's provider call with retries.
    - ``credentials`` resolves secrets by provider identifier.
    - ``providers`` resolves custom provider references to configurations.
    """

    executor: AgentExecutor
    credentials: CredentialStore
    providers: ProviderStore


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single engine run.

    Required keys:

    - ``agents``: the full agent list of the run.
    - ``idx``: index of the next agent to execute.
    - ``previous_output``: output of agent ``idx - 1``, None before agent 0.

    Optional keys:

    - ``_finished``: every agent completed.
    - ``_halted``: the run failed or was cancelled; the graph ends without
      the finish node.
    """

    agents: Required[List[AgentDefinition]]
    idx: Required[int]
    previous_output: Required[Optional[str]]
    _finished: NotRequired[bool]
    _halted: NotRequired[bool]
