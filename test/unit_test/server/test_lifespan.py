"""
Unit tests for FastAPI application lifespan management.

Tests verify that logging is configured on startup and that the workflow
service is shut down when the application stops.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI

from agentchain.server.main import lifespan

pytestmark = pytest.mark.asyncio


class TestLifespan:
    async def test_startup_configures_logging(self):
        with patch("agentchain.server.main.setup_logging") as mock_setup, patch(
            "agentchain.server.main.shutdown_workflow_service", new_callable=AsyncMock
        ):
            async with lifespan(FastAPI()):
                mock_setup.assert_called_once_with()

    async def test_shutdown_closes_workflow_service(self):
        with patch("agentchain.server.main.setup_logging"), patch(
            "agentchain.server.main.shutdown_workflow_service", new_callable=AsyncMock
        ) as mock_shutdown:
            async with lifespan(FastAPI()):
                mock_shutdown.assert_not_awaited()

        mock_shutdown.assert_awaited_once()
