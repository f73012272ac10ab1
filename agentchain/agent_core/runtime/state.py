from __future__ import annotations

"""Run State ownership and transitions.

``RunStateMachine`` is the only mutator of ``RunState``. The engine drives it
through named transitions; everything else sees deep-copied snapshots.

Transitions
-----------

- ``begin``: fresh state seeded with the carried result prefix.
- ``mark_executing`` / ``record_retry``: progress of the current agent.
- ``record_success``: append a result and complete the agent.
- ``record_failure``: terminal failure of one agent; results are untouched.
- ``complete`` / ``cancel`` / ``abort``: terminal states of a whole run.
- ``reject``: surface a start-time configuration violation without starting.

Listeners registered with ``subscribe`` are called with a snapshot after each
transition. A failing listener is logged and does not affect the run.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Sequence

from ..schemas.domain import (
    CANCELLED_MESSAGE,
    NO_INDEX,
    AgentDefinition,
    AgentResult,
    AgentStatus,
    RunState,
    RunStatus,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[RunState], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunStateMachine:
    """Own one ``RunState`` instance and apply transitions to it."""

    def __init__(self) -> None:
        self._state = RunState()
        self._listeners: List[StateListener] = []

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def failed_index(self) -> int:
        return self._state.failed_index

    @property
    def result_count(self) -> int:
        return len(self._state.results)

    def carried_results(self, from_index: int) -> List[AgentResult]:
        """Results that survive a resume at ``from_index``."""
        if from_index <= 0:
            return []
        return list(self._state.results[:from_index])

    def snapshot(self) -> RunState:
        """Return a deep copy of the current state."""
        return self._state.model_copy(deep=True)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def begin(
        self,
        agents: Sequence[AgentDefinition],
        *,
        from_index: int,
        carried: Sequence[AgentResult],
    ) -> None:
        statuses = {
            agents[result.agent_index].id: AgentStatus(
                agent_id=agents[result.agent_index].id,
                is_complete=True,
                execution_time_ms=result.execution_time_ms,
            )
            for result in carried
            if result.agent_index < len(agents)
        }
        self._state = RunState(
            status=RunStatus.running,
            is_running=True,
            current_index=from_index,
            results=list(carried),
            agent_status=statuses,
            started_at=_utc_now(),
        )
        self._notify()

    def mark_executing(self, index: int, agent: AgentDefinition) -> None:
        self._state.current_index = index
        self._state.agent_status[agent.id] = AgentStatus(agent_id=agent.id, is_executing=True)
        self._notify()

    def record_retry(self, agent: AgentDefinition, retry_count: int) -> None:
        status = self._state.agent_status.get(agent.id)
        if status is None:
            status = AgentStatus(agent_id=agent.id, is_executing=True)
            self._state.agent_status[agent.id] = status
        status.retry_count = retry_count
        self._notify()

    def record_success(self, result: AgentResult, agent: AgentDefinition, *, retry_count: int = 0) -> None:
        self._state.results.append(result)
        self._state.agent_status[agent.id] = AgentStatus(
            agent_id=agent.id,
            is_complete=True,
            execution_time_ms=result.execution_time_ms,
            retry_count=retry_count,
        )
        self._notify()

    def record_failure(
        self,
        index: int,
        agent: AgentDefinition,
        message: str,
        *,
        elapsed_ms: int,
        retry_count: int,
    ) -> None:
        """Fail the run at ``index``; ``results`` are left exactly as they were."""
        self._state.agent_status[agent.id] = AgentStatus(
            agent_id=agent.id,
            error=message,
            execution_time_ms=elapsed_ms,
            retry_count=retry_count,
        )
        self._state.status = RunStatus.failed
        self._state.is_running = False
        self._state.current_index = NO_INDEX
        self._state.run_error = f"{agent.title}: {message}"
        self._state.failed_index = index
        self._state.finished_at = _utc_now()
        self._notify()

    def complete(self) -> None:
        self._state.status = RunStatus.completed
        self._state.is_running = False
        self._state.current_index = NO_INDEX
        self._state.run_error = None
        self._state.failed_index = NO_INDEX
        self._state.finished_at = _utc_now()
        self._notify()

    def cancel(self, agent: AgentDefinition | None = None) -> None:
        """Stop the run. ``agent`` is the abandoned in-flight agent, if any."""
        if agent is not None:
            status = self._state.agent_status.get(agent.id)
            if status is not None and status.is_executing:
                status.is_executing = False
        self._state.status = RunStatus.cancelled
        self._state.is_running = False
        self._state.current_index = NO_INDEX
        self._state.run_error = CANCELLED_MESSAGE
        self._state.finished_at = _utc_now()
        self._notify()

    def abort(self, message: str) -> None:
        """Fail the run at whatever agent was current when the engine broke."""
        self._state.status = RunStatus.failed
        self._state.is_running = False
        self._state.failed_index = self._state.current_index
        self._state.current_index = NO_INDEX
        self._state.run_error = message
        self._state.finished_at = _utc_now()
        self._notify()

    def reject(self, message: str, index: int) -> None:
        """Record a configuration violation; the run does not start.

        ``failed_index`` only moves when no results are preserved, so a
        refused resume keeps the earlier failure as the resume point.
        """
        self._state.run_error = message
        if not self._state.results:
            self._state.failed_index = index
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Run state listener failed")
