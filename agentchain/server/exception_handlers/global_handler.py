"""
Exception Handlers for the FastAPI Application.

Maps the workflow and provider error taxonomy to HTTP responses:

- ``WorkflowConfigurationError`` -> 422, naming the offending agent.
- ``WorkflowAlreadyRunningError`` -> 409.
- ``ProviderConfigValidationError`` -> 400 with every field error.
- anything else -> 500 with an error ID, logged with full context.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from agentchain.agent_core.providers.errors import ProviderConfigValidationError
from agentchain.agent_core.runtime.errors import (
    WorkflowAlreadyRunningError,
    WorkflowConfigurationError,
)
from agentchain.core.logging_config import get_logger
from agentchain.core.monitoring import log_error

logger = get_logger(__name__)


async def workflow_configuration_handler(request: Request, exc: WorkflowConfigurationError) -> JSONResponse:
    logger.warning(f"Workflow rejected in {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "agent_index": exc.agent_index,
            "agent_title": exc.agent_title,
        },
    )


async def workflow_already_running_handler(request: Request, exc: WorkflowAlreadyRunningError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


async def provider_validation_handler(request: Request, exc: ProviderConfigValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid provider configuration", "errors": exc.errors},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(WorkflowConfigurationError, workflow_configuration_handler)
    app.add_exception_handler(WorkflowAlreadyRunningError, workflow_already_running_handler)
    app.add_exception_handler(ProviderConfigValidationError, provider_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
