"""Fixtures for exercising the HTTP API against the shared in-memory database."""

import pytest
import pytest_asyncio
from agentgraph_api.main import create_app
from agentgraph_common.config.credentials import CredentialStoreSettings
from agentgraph_common.config.settings import Settings
from httpx import ASGITransport, AsyncClient


@pytest.fixture
def app(database):
    settings = Settings(credentials=CredentialStoreSettings(CREDENTIAL_STORE_TYPES="memory"))
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def api_project(client):
    response = await client.post(
        "/tenants/tenant-1/projects", json={"id": "project-1", "name": "Test Project"}
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest_asyncio.fixture
async def api_graph(client, api_project):
    """Graph ``support`` with sub-agents ``router`` and ``writer`` and external ``partner``."""
    response = await client.post(
        "/tenants/tenant-1/projects/project-1/graph",
        json={
            "id": "support",
            "name": "Support",
            "defaultSubAgentId": "router",
            "subAgents": {
                "router": {"name": "Router", "canTransferTo": ["writer"]},
                "writer": {"name": "Writer"},
                "partner": {"name": "Partner", "baseUrl": "https://partner.example.com/a2a"},
            },
        },
    )
    assert response.status_code == 201
    return response.json()["data"]
