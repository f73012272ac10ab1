"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
exception handlers and monitoring, and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentchain import __version__
from agentchain.core.logging_config import get_logger, setup_logging
from agentchain.core.monitoring import initialize_logfire

from .api.v1 import health, providers, workflow
from .core import constant
from .exception_handlers import setup_exception_handlers
from .services.workflow import shutdown_workflow_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Configures logging on startup and stops any active run and closes provider
    HTTP clients on shutdown.
    """
    setup_logging()
    logger.info("Starting up AgentChain Server...")

    yield

    logger.info("Shutting down AgentChain Server...")
    await shutdown_workflow_service()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    AgentChain Server API

    Run a linear chain of LLM agents where each agent's output feeds the next,
    and manage the template-driven custom providers those agents can use.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(workflow.router, prefix=f"{constant.API_V1_STR}/workflow", tags=["workflow"])
app.include_router(providers.router, prefix=f"{constant.API_V1_STR}/providers", tags=["providers"])
