from __future__ import annotations

"""LangGraph workflow execution engine.

``WorkflowEngine`` runs an ordered list of ``AgentDefinition`` objects so that
each agent's output becomes the next agent's input.

Execution model
--------------

- Each graph run executes a LangGraph state machine over ``_GraphState``.
- Each pass through the ``execute`` node runs exactly one agent at ``idx``.
- Agents run strictly one after another; the only suspension points are the
  provider call and the executor's backoff sleep.

Start and resume
----------------

``start(agents, from_index=k)`` is the single entry point. Guards are checked
synchronously before the run transitions to running:

1. No other run is active.
2. ``results[0..k)`` of the previous run are still available.
3. Every agent in ``agents[k..]`` has a provider and a model, its custom
   provider is registered, and a credential is configured.

A violation is surfaced on the run state (``run_error``/``failed_index``) and
raised as ``WorkflowConfigurationError``. With ``k > 0`` the preserved prefix
is carried over and the last carried output feeds agent ``k``.

Failure and cancellation
------------------------

Agent errors never escape the graph: they are converted into a ``failed``
state at the failing index, with every earlier result untouched. ``stop()``
is cooperative: the in-flight call is allowed to finish and is recorded, then
no further agent starts. A stop observed during a retry backoff ends the run
without another attempt.
"""

import asyncio
import logging
from typing import Callable, List, Sequence, Tuple

from langgraph.graph import END, StateGraph

from ..providers.base import ProviderDescriptor
from ..schemas.domain import (
    AgentDefinition,
    AgentResult,
    BuiltInProvider,
    CustomProviderRef,
    RunState,
    provider_key,
)
from .errors import (
    AgentExecutionError,
    WorkflowAlreadyRunningError,
    WorkflowCancelledError,
    WorkflowConfigurationError,
)
from .models import EngineDeps, _GraphState
from .state import RunStateMachine, StateListener

logger = logging.getLogger(__name__)


def compose_prompt(agent: AgentDefinition, input_text: str, *, first: bool) -> str:
    """Combine an agent's role prompt with its input, role first."""
    label = "USER INPUT" if first else "CONTENT TO PROCESS"
    return f"YOUR ROLE: {agent.prompt}\n\n{label}: {input_text}"


class WorkflowEngine:
    """Drive a linear chain of agents and own its run state."""

    def __init__(self, *, deps: EngineDeps, machine: RunStateMachine | None = None) -> None:
        """
        Initialize the WorkflowEngine.

        Args:
            deps: Executor, credential store and provider store.
            machine: Run state owner; a fresh one is created when omitted.
        """
        self._deps = deps
        self._machine = machine or RunStateMachine()
        self._stop_requested = False
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_edge("start", "execute")

        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {
                "halt": END,
                "finish": "finish",
                "continue": "execute",
            },
        )
        g.add_edge("finish", END)
        return g.compile()

    @property
    def state(self) -> RunState:
        """Deep-copied snapshot of the current run state."""
        return self._machine.snapshot()

    @property
    def is_running(self) -> bool:
        return self._machine.is_running

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._machine.subscribe(listener)

    async def start(self, agents: Sequence[AgentDefinition], *, from_index: int = 0) -> RunState:
        """Run ``agents`` from ``from_index`` to a terminal state.

        Returns:
            Snapshot of the terminal run state (completed, failed or cancelled).

        Raises:
            WorkflowAlreadyRunningError: If a run is active.
            WorkflowConfigurationError: If a start guard fails.
        """
        state = self._begin(agents, from_index)
        await self._drive(state)
        return self._machine.snapshot()

    async def resume(self, agents: Sequence[AgentDefinition], *, from_index: int) -> RunState:
        """Same contract as ``start``; kept as a separate name for readability."""
        return await self.start(agents, from_index=from_index)

    def launch(self, agents: Sequence[AgentDefinition], *, from_index: int = 0) -> "asyncio.Task[None]":
        """Check the start guards now and drive the run in a background task."""
        state = self._begin(agents, from_index)
        return asyncio.get_running_loop().create_task(self._drive(state))

    def stop(self) -> bool:
        """Request cancellation of the active run.

        Returns:
            True if a run was active and will stop before its next agent.
        """
        if not self._machine.is_running:
            return False
        logger.info("Stop requested for the active workflow run")
        self._stop_requested = True
        return True

    def _begin(self, agents: Sequence[AgentDefinition], from_index: int) -> _GraphState:
        if self._machine.is_running:
            raise WorkflowAlreadyRunningError()

        agent_list: List[AgentDefinition] = list(agents)
        try:
            self._check_startable(agent_list, from_index)
        except WorkflowConfigurationError as e:
            logger.warning("Workflow rejected: %s", e)
            self._machine.reject(str(e), e.agent_index)
            raise

        carried = self._machine.carried_results(from_index)
        self._stop_requested = False
        self._machine.begin(agent_list, from_index=from_index, carried=carried)
        logger.info("Starting workflow with %s agents from index %s", len(agent_list), from_index)
        return {
            "agents": agent_list,
            "idx": from_index,
            "previous_output": carried[-1].output_text if carried else None,
        }

    async def _drive(self, state: _GraphState) -> None:
        try:
            await self._graph.ainvoke(state, config={"recursion_limit": len(state["agents"]) + 10})
        except asyncio.CancelledError:
            if self._machine.is_running:
                self._machine.cancel()
            raise
        except Exception as e:
            logger.exception("Workflow engine error")
            if self._machine.is_running:
                self._machine.abort(f"Workflow engine error: {e}")

    def _check_startable(self, agents: List[AgentDefinition], from_index: int) -> None:
        if from_index < 0 or from_index > len(agents):
            raise WorkflowConfigurationError(
                f"Start index {from_index} is out of range for {len(agents)} agents",
                agent_index=from_index,
            )
        if from_index > self._machine.result_count:
            raise WorkflowConfigurationError(
                f"Cannot resume at index {from_index}: only {self._machine.result_count} results are preserved",
                agent_index=from_index,
            )
        for idx in range(from_index, len(agents)):
            self._resolve(idx, agents[idx])

    def _resolve(self, idx: int, agent: AgentDefinition) -> Tuple[ProviderDescriptor, str]:
        """Resolve an agent's provider descriptor and credential.

        Raises:
            WorkflowConfigurationError: If anything needed for the call is missing.
        """
        if not agent.is_configured:
            raise WorkflowConfigurationError(
                "Provider and model must be selected", agent_index=idx, agent_title=agent.title
            )
        ref = agent.provider
        descriptor: ProviderDescriptor
        if isinstance(ref, CustomProviderRef):
            config = self._deps.providers.get(ref.id)
            if config is None:
                raise WorkflowConfigurationError(
                    f"Custom provider {ref.name or ref.id} not found", agent_index=idx, agent_title=agent.title
                )
            descriptor = config
        else:
            descriptor = BuiltInProvider(ref)
        key = provider_key(ref)
        credentials = self._deps.credentials.get(key)
        if not credentials:
            raise WorkflowConfigurationError(
                f"No API key configured for {key}", agent_index=idx, agent_title=agent.title
            )
        return descriptor, credentials

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Graph entry node. Currently a no-op."""
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Execute the agent at ``idx``.

        This node is responsible for:

        - detecting completion (idx >= len(agents)),
        - observing a stop request before the agent starts,
        - calling the executor and recording success or failure.
        """
        agents = state["agents"]
        idx = int(state["idx"])
        if idx >= len(agents):
            state["_finished"] = True
            return state

        if self._stop_requested:
            logger.info("Workflow stopped before agent %s", idx)
            self._machine.cancel()
            state["_halted"] = True
            return state

        agent = agents[idx]
        self._machine.mark_executing(idx, agent)
        first = idx == 0
        input_text = agent.prompt if first else str(state["previous_output"] or "")
        prompt = compose_prompt(agent, input_text, first=first)

        def _on_retry(retry_count: int, delay: float, error: Exception) -> None:
            self._machine.record_retry(agent, retry_count)

        try:
            descriptor, credentials = self._resolve(idx, agent)
            outcome = await self._deps.executor.execute(
                descriptor,
                str(agent.model),
                prompt,
                credentials,
                on_retry=_on_retry,
                should_continue=lambda: not self._stop_requested,
            )
        except WorkflowCancelledError:
            logger.info("Workflow stopped while agent %s (%s) was retrying", idx, agent.title)
            self._machine.cancel(agent)
            state["_halted"] = True
            return state
        except WorkflowConfigurationError as e:
            logger.warning("Agent %s (%s) cannot run: %s", idx, agent.title, e.reason)
            self._machine.record_failure(idx, agent, e.reason, elapsed_ms=0, retry_count=0)
            state["_halted"] = True
            return state
        except AgentExecutionError as e:
            logger.error("Agent %s (%s) failed: %s", idx, agent.title, e)
            self._machine.record_failure(
                idx, agent, str(e), elapsed_ms=e.elapsed_ms, retry_count=e.retry_count
            )
            state["_halted"] = True
            return state

        result = AgentResult(
            agent_index=idx,
            agent_id=agent.id,
            input_text=input_text,
            output_text=outcome.response.text,
            execution_time_ms=outcome.elapsed_ms,
            usage=outcome.response.usage,
        )
        self._machine.record_success(result, agent, retry_count=outcome.retry_count)
        logger.debug("Agent %s (%s) completed in %sms", idx, agent.title, outcome.elapsed_ms)

        state["previous_output"] = result.output_text
        state["idx"] = idx + 1
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        """Finish node. Marks the run completed."""
        self._machine.complete()
        logger.info("Workflow completed with %s results", self._machine.result_count)
        return state

    def _route_after_execute(self, state: _GraphState) -> str:
        """Route to halt/finish/continue after executing an agent."""
        if state.get("_halted"):
            return "halt"
        if state.get("_finished"):
            return "finish"
        return "continue"
