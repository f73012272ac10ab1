"""
Workflow Service Singleton.

Holds the process-wide ``WorkflowService`` used by the API endpoints. The run
state lives in the service's engine, so every request must see the same
instance.
"""

from __future__ import annotations

from typing import Optional

from agentchain.agent_core.factory import build_service
from agentchain.agent_core.service import WorkflowService
from agentchain.core.logging_config import get_logger

logger = get_logger(__name__)

# Global singleton
_workflow_service: Optional[WorkflowService] = None


def get_workflow_service() -> WorkflowService:
    global _workflow_service
    if _workflow_service is None:
        logger.info("Creating workflow service")
        _workflow_service = build_service()
    return _workflow_service


async def shutdown_workflow_service() -> None:
    """Stop the active run and close provider clients."""
    global _workflow_service
    if _workflow_service is not None:
        await _workflow_service.aclose()
        _workflow_service = None
