"""
Unit tests for server exception handlers.

Tests cover the workflow and provider error mappings and the global
exception handler, both called directly and through a FastAPI app.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from agentchain.agent_core.providers.errors import ProviderConfigValidationError
from agentchain.agent_core.runtime.errors import (
    WorkflowAlreadyRunningError,
    WorkflowConfigurationError,
)
from agentchain.server.exception_handlers import setup_exception_handlers
from agentchain.server.exception_handlers.global_handler import (
    global_exception_handler,
    workflow_configuration_handler,
)


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/api/v1/workflow/run"
    return request


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/config-error")
    async def _config_error():
        raise WorkflowConfigurationError("Provider and model must be selected", agent_index=2, agent_title="Editor")

    @app.get("/busy")
    async def _busy():
        raise WorkflowAlreadyRunningError()

    @app.get("/bad-provider")
    async def _bad_provider():
        raise ProviderConfigValidationError([{"field": "endpoint", "message": "Endpoint is required"}])

    @app.get("/boom")
    async def _boom():
        raise RuntimeError("boom")

    return app


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        """Test that exception handler logs errors."""
        exc = ValueError("Test error")

        with patch("agentchain.server.exception_handlers.global_handler.logger") as mock_logger:
            await global_exception_handler(mock_request, exc)

            mock_logger.error.assert_called_once()
            call_args = mock_logger.error.call_args
            assert "Unhandled exception" in call_args[0][0]
            assert call_args[1]["extra"]["error_type"] == "ValueError"

    @pytest.mark.asyncio
    async def test_exception_handler_returns_500_with_error_id(self, mock_request):
        exc = RuntimeError("Test error")

        with patch("agentchain.server.exception_handlers.global_handler.logger"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body["error_id"] == id(exc)
        assert body["error_type"] == "RuntimeError"
        assert body["detail"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_exception_handler_reports_to_monitoring(self, mock_request):
        exc = KeyError("missing")

        with patch("agentchain.server.exception_handlers.global_handler.log_error") as mock_log_error:
            await global_exception_handler(mock_request, exc)

        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][0] == "KeyError"


class TestWorkflowErrorHandlers:
    @pytest.mark.asyncio
    async def test_configuration_handler_names_agent(self, mock_request):
        exc = WorkflowConfigurationError("No API key configured for openai", agent_index=0, agent_title="Writer")

        response = await workflow_configuration_handler(mock_request, exc)

        assert response.status_code == 422
        assert json.loads(response.body.decode()) == {
            "detail": "Writer: No API key configured for openai",
            "agent_index": 0,
            "agent_title": "Writer",
        }

    @pytest.mark.asyncio
    async def test_handlers_registered_on_app(self, app):
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            config_error = await client.get("/config-error")
            busy = await client.get("/busy")
            bad_provider = await client.get("/bad-provider")
            boom = await client.get("/boom")

        assert config_error.status_code == 422
        assert config_error.json()["agent_index"] == 2
        assert busy.status_code == 409
        assert busy.json() == {"detail": "A workflow run is already in progress"}
        assert bad_provider.status_code == 400
        assert bad_provider.json()["errors"] == [{"field": "endpoint", "message": "Endpoint is required"}]
        assert boom.status_code == 500
        assert boom.json()["error_type"] == "RuntimeError"
