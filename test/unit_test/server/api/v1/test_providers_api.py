from typing import Any, Dict

import httpx
import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

API = "/api/v1/providers"


def _config(**overrides: Any) -> Dict[str, Any]:
    config: Dict[str, Any] = {
        "name": "Echo LLM",
        "endpoint": "https://mock.echo/v1/generate",
        "auth": {"type": "header", "key": "X-Api-Key"},
        "requestTemplate": {"body": {"input": "{{prompt}}", "model": "{{model}}"}},
        "responsePath": "output.text",
        "models": ["echo-1"],
    }
    config.update(overrides)
    return config


async def test_register_list_get_delete(client: AsyncClient):
    created = await client.post(f"{API}/", json=_config())

    assert created.status_code == 201
    provider = created.json()
    provider_id = provider["id"]
    assert provider["name"] == "Echo LLM"
    assert provider["requestTemplate"]["shape"] == "structured"

    listed = await client.get(f"{API}/")
    assert [p["id"] for p in listed.json()] == [provider_id]

    fetched = await client.get(f"{API}/{provider_id}")
    assert fetched.status_code == 200
    assert fetched.json()["responsePath"] == "output.text"

    deleted = await client.delete(f"{API}/{provider_id}")
    assert deleted.status_code == 204
    assert (await client.get(f"{API}/{provider_id}")).status_code == 404
    assert (await client.delete(f"{API}/{provider_id}")).status_code == 404


async def test_register_invalid_configuration_returns_every_error(client: AsyncClient):
    response = await client.post(f"{API}/", json={"name": "Broken", "endpoint": "not a url"})

    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Invalid provider configuration"
    fields = {e["field"] for e in data["errors"]}
    assert {"endpoint", "auth", "requestTemplate", "responsePath", "models"} <= fields


async def test_register_duplicate_name_conflicts(client: AsyncClient):
    assert (await client.post(f"{API}/", json=_config())).status_code == 201

    response = await client.post(f"{API}/", json=_config())

    assert response.status_code == 409
    assert "already exists" in response.json()["detail"]


async def test_validate_does_not_register(client: AsyncClient):
    ok = await client.post(f"{API}/validate", json=_config())
    assert ok.status_code == 200
    assert ok.json() == {"valid": True, "errors": []}

    bad = await client.post(f"{API}/validate", json=_config(auth={"type": "oauth"}, models=[]))
    assert bad.status_code == 200
    body = bad.json()
    assert body["valid"] is False
    assert {e["field"] for e in body["errors"]} >= {"auth.type", "models"}

    assert (await client.get(f"{API}/")).json() == []


async def test_templates_are_listed(client: AsyncClient):
    response = await client.get(f"{API}/templates")

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == ["openai-compatible", "google-ai", "custom"]


async def test_registered_provider_runs_in_workflow(client: AsyncClient, openai_stub):
    """A registered provider is reachable from a workflow run through the shared router."""
    requests = []

    def _echo(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"output": {"text": "echoed"}})

    openai_stub.routes["mock.echo"] = _echo

    provider_id = (await client.post(f"{API}/", json=_config())).json()["id"]
    body = {
        "agents": [
            {
                "title": "Echo",
                "prompt": "repeat",
                "provider": {"type": "custom", "id": provider_id},
                "model": "echo-1",
            }
        ],
        "api_keys": {provider_id: "echo-secret"},
        "wait": True,
    }

    response = await client.post("/api/v1/workflow/run", json=body)

    assert response.status_code == 200
    assert response.json()["results"][0]["output_text"] == "echoed"
    assert requests[0].headers["X-Api-Key"] == "echo-secret"
