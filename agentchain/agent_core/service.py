from __future__ import annotations

"""High-level run control for agent workflows.

``WorkflowService`` gives applications one object to drive the engine with:

- ``start``: run a workflow from an index (0 by default).
- ``stop``: request cooperative cancellation of the active run.
- ``retry_from_failed``: resume at the failed agent, keeping earlier results.
  Does nothing when the last run has no failed agent.
- ``retry_entire_workflow``: run again from agent 0, discarding prior results.

Every entry point can either await the run (``wait=True``) or return as soon
as the start guards pass and let the run continue in a background task.

``WorkflowService`` is intentionally thin: execution semantics live in
``WorkflowEngine``.
"""

import asyncio
import logging
from typing import Callable, Mapping, Optional, Sequence, Set

from ..core.monitoring import log_error, log_workflow_completion, log_workflow_run
from .providers.router import ProviderRouter
from .runtime.engine import WorkflowEngine
from .runtime.errors import WorkflowAlreadyRunningError, WorkflowConfigurationError
from .runtime.state import StateListener
from .schemas.domain import AgentDefinition, RunState
from .stores import InMemoryCredentialStore, InMemoryProviderStore

logger = logging.getLogger(__name__)


class WorkflowService:
    """Start, stop and recover workflow runs."""

    def __init__(
        self,
        *,
        engine: WorkflowEngine,
        providers: InMemoryProviderStore,
        credential_overrides: Optional[InMemoryCredentialStore] = None,
        router: Optional[ProviderRouter] = None,
    ) -> None:
        """
        Args:
            engine: The engine that owns the run state.
            providers: Custom provider registry shared with the engine.
            credential_overrides: Store consulted by the engine before the
                settings-backed credentials; request keys are written here.
            router: Provider router closed by ``aclose``.
        """
        self._engine = engine
        self._providers = providers
        self._overrides = credential_overrides
        self._router = router
        self._tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> RunState:
        return self._engine.state

    @property
    def providers(self) -> InMemoryProviderStore:
        return self._providers

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self._engine.subscribe(listener)

    def use_credentials(self, api_keys: Optional[Mapping[str, str]]) -> None:
        """Override credentials for subsequent runs, keyed by provider identifier."""
        if not api_keys:
            return
        if self._overrides is None:
            raise RuntimeError("This service does not accept credential overrides")
        for key, secret in api_keys.items():
            if secret:
                self._overrides.set(key, secret)

    async def start(
        self,
        agents: Sequence[AgentDefinition],
        *,
        from_index: int = 0,
        wait: bool = True,
        api_keys: Optional[Mapping[str, str]] = None,
    ) -> RunState:
        """Run ``agents`` from ``from_index``.

        ``api_keys`` are applied with ``use_credentials`` once no other run is
        active, so a refused concurrent start leaves the credentials alone.

        Returns:
            The terminal state when ``wait`` is True, else the state right
            after the run started.

        Raises:
            WorkflowAlreadyRunningError: If a run is active.
            WorkflowConfigurationError: If the workflow cannot start.
        """
        if self._engine.is_running:
            raise WorkflowAlreadyRunningError()
        self.use_credentials(api_keys)
        log_workflow_run(len(agents), from_index)
        try:
            if wait:
                final = await self._engine.start(agents, from_index=from_index)
                self._report(final)
                return final
            task = self._engine.launch(agents, from_index=from_index)
        except WorkflowConfigurationError as e:
            log_error("WorkflowConfigurationError", str(e), {"agent_index": e.agent_index})
            raise
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return self._engine.state

    def stop(self) -> bool:
        return self._engine.stop()

    async def retry_from_failed(
        self,
        agents: Sequence[AgentDefinition],
        *,
        wait: bool = True,
        api_keys: Optional[Mapping[str, str]] = None,
    ) -> Optional[RunState]:
        """Resume at the failed agent. Returns None when nothing failed."""
        failed_index = self._engine.state.failed_index
        if failed_index < 0:
            logger.info("No failed agent to retry from")
            return None
        return await self.start(agents, from_index=failed_index, wait=wait, api_keys=api_keys)

    async def retry_entire_workflow(
        self,
        agents: Sequence[AgentDefinition],
        *,
        wait: bool = True,
        api_keys: Optional[Mapping[str, str]] = None,
    ) -> RunState:
        return await self.start(agents, from_index=0, wait=wait, api_keys=api_keys)

    async def wait(self) -> RunState:
        """Wait for background runs to finish and return the final state."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        return self._engine.state

    async def aclose(self) -> None:
        """Stop the active run, wait for it, and close provider clients."""
        self._engine.stop()
        await self.wait()
        if self._router is not None:
            await self._router.aclose()

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        self._report(self._engine.state)

    def _report(self, state: RunState) -> None:
        logger.info(
            "Workflow run finished: status=%s results=%s failed_index=%s",
            state.status.value,
            len(state.results),
            state.failed_index,
        )
        log_workflow_completion(state.status.value, len(state.results), state.failed_index)
