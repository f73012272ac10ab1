import asyncio
import json
from typing import AsyncGenerator, Callable, Dict, List, Optional
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from agentchain.agent_core.factory import build_service
from agentchain.agent_core.service import WorkflowService
from agentchain.core.config import Settings


class OpenAIStub:
    """MockTransport handler answering like the chat completions API.

    Requests to a host listed in ``routes`` go to that handler instead.
    """

    def __init__(self) -> None:
        self.prompts: List[str] = []
        self.fail_on: set[int] = set()
        self.gate: Optional[asyncio.Event] = None
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def __call__(self, request: httpx.Request):
        if request.url.host in self.routes:
            return self.routes[request.url.host](request)
        if self.gate is not None:
            return self._gated(request)
        return self._respond(request)

    async def _gated(self, request: httpx.Request) -> httpx.Response:
        await self.gate.wait()
        return self._respond(request)

    def _respond(self, request: httpx.Request) -> httpx.Response:
        self.prompts.append(json.loads(request.content)["messages"][0]["content"])
        n = len(self.prompts)
        if n in self.fail_on:
            return httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})
        return httpx.Response(200, json={"choices": [{"message": {"content": f"answer {n}"}}]})


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def openai_stub() -> OpenAIStub:
    return OpenAIStub()


@pytest_asyncio.fixture
async def workflow_service(openai_stub: OpenAIStub) -> AsyncGenerator[WorkflowService, None]:
    """Service wired to the stub instead of the real provider APIs."""
    settings = Settings(OPENAI_BASE_URL="https://mock.openai")
    transport_client = httpx.AsyncClient(transport=httpx.MockTransport(openai_stub))
    service = build_service(settings, client=transport_client, sleep=_no_sleep)
    yield service
    await service.aclose()
    await transport_client.aclose()


@pytest_asyncio.fixture(name="client")
async def client_fixture(workflow_service: WorkflowService) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from agentchain.server.main import app
    from agentchain.server.services.workflow import get_workflow_service

    app.dependency_overrides[get_workflow_service] = lambda: workflow_service

    # Mock the lifespan so the real singleton is never built
    async def mock_lifespan(app):
        yield

    with patch("agentchain.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
