"""
Workflow Run API Endpoints.

This module exposes run control over the single workflow engine instance:
reading the run state, starting a run, stopping it, and the two recovery
actions (retry from the failed agent, retry everything).

Configuration problems are answered with 422 and a concurrent start with 409
by the exception handlers; agent failures are never HTTP errors, they are
reported in the returned run state.
"""

from fastapi import APIRouter

from agentchain.agent_core.schemas.domain import RunState
from agentchain.core.logging_config import get_logger
from agentchain.server.schemas import RetryRequest, RunRequest, StopResponse
from agentchain.server.services.deps import WorkflowServiceDep

logger = get_logger(__name__)
router = APIRouter()


@router.get(
    "/state",
    response_model=RunState,
    summary="Get Run State",
    description="Snapshot of the current (or last) workflow run.",
)
async def get_state(service: WorkflowServiceDep):
    return service.state


@router.post(
    "/run",
    response_model=RunState,
    summary="Run Workflow",
    description="Start the workflow from `from_index`. Results before that index are carried over from the last run.",
    responses={
        409: {"description": "A run is already in progress"},
        422: {"description": "The workflow is not configured well enough to start"},
    },
)
async def run_workflow(request: RunRequest, service: WorkflowServiceDep):
    """
    Start a workflow run.

    - **agents**: Ordered agent chain.
    - **from_index**: First agent to execute (0 for a fresh run).
    - **api_keys**: Optional credentials overriding the server configuration.
    - **wait**: Respond only once the run has finished.
    """
    logger.info(f"Starting workflow: {len(request.agents)} agents from index {request.from_index}")
    return await service.start(
        request.agents, from_index=request.from_index, wait=request.wait, api_keys=request.api_keys
    )


@router.post(
    "/stop",
    response_model=StopResponse,
    summary="Stop Workflow",
    description="Ask the active run to stop. The agent currently executing is allowed to finish.",
)
async def stop_workflow(service: WorkflowServiceDep):
    return StopResponse(stopped=service.stop())


@router.post(
    "/retry-failed",
    response_model=RunState,
    summary="Retry From Failed Agent",
    description="Resume the last run at its failed agent, keeping every earlier result.",
)
async def retry_failed(request: RetryRequest, service: WorkflowServiceDep):
    state = await service.retry_from_failed(request.agents, wait=request.wait, api_keys=request.api_keys)
    if state is None:
        return service.state
    return state


@router.post(
    "/retry-all",
    response_model=RunState,
    summary="Retry Entire Workflow",
    description="Run the whole workflow again from the first agent.",
)
async def retry_all(request: RetryRequest, service: WorkflowServiceDep):
    return await service.retry_entire_workflow(request.agents, wait=request.wait, api_keys=request.api_keys)
