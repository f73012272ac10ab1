"""
Workflow Service Dependency.

Provides the singleton ``WorkflowService`` to API endpoints.
"""

from typing import Annotated

from fastapi import Depends

from agentchain.agent_core.service import WorkflowService
from agentchain.server.services.workflow import get_workflow_service

WorkflowServiceDep = Annotated[WorkflowService, Depends(get_workflow_service)]
