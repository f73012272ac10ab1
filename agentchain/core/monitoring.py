"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing workflow
runs and the provider HTTP calls they make:
- Workflow run lifecycle (started, completed, failed, cancelled)
- HTTPX request tracing for provider calls
- FastAPI endpoint tracing
- Error tracking

The integration is opt-in: nothing is sent unless ``LOGFIRE_ENABLED`` is set and
a ``LOGFIRE_TOKEN`` is available. Every helper degrades to a debug log when
Logfire is not configured.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "agentchain")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

# Feature flags
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Initialize Logfire for monitoring and tracing.

    Args:
        app: FastAPI application instance for endpoint instrumentation (optional).

    Returns:
        True when Logfire was configured, False when it is disabled or failed.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_HTTPX:
            try:
                # Header capture stays off so provider credentials never reach the exporter
                logfire.instrument_httpx(capture_headers=False)
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument HTTPX: {e}")

        if LOGFIRE_TRACE_FASTAPI and app is not None:
            try:
                logfire.instrument_fastapi(app=app)
                logger.info("Logfire: FastAPI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument FastAPI: {e}")

        logger.info(
            f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}"
        )
        return True
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False


def log_workflow_run(agent_count: int, from_index: int) -> None:
    """
    Log the start of a workflow run.

    Args:
        agent_count: Number of agents in the chain
        from_index: Index the run starts (or resumes) from
    """
    try:
        import logfire

        logfire.info("Workflow run started", agent_count=agent_count, from_index=from_index)
    except Exception:
        logger.debug(f"Could not log workflow run to Logfire: agents={agent_count}, from_index={from_index}")


def log_workflow_completion(status: str, result_count: int, failed_index: int = -1) -> None:
    """
    Log the end of a workflow run.

    Args:
        status: Terminal status (completed, failed, cancelled)
        result_count: Number of preserved agent results
        failed_index: Index of the failing agent, -1 when none
    """
    try:
        import logfire

        logfire.info(
            "Workflow run finished",
            status=status,
            result_count=result_count,
            failed_index=failed_index,
        )
    except Exception:
        logger.debug(f"Could not log workflow completion to Logfire: status={status}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    try:
        import logfire

        logfire.error(
            f"{error_type}: {error_message}",
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
