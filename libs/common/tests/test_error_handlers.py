import pytest
from agentgraph_common.exceptions.errors import (
    AgentGraphError,
    CredentialStoreError,
    GraphValidationError,
    RelationTargetError,
    ResourceConflict,
    ResourceNotFound,
)
from agentgraph_common.exceptions.registration import register_error_handlers
from agentgraph_common.scopes.context import ProjectScope
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

pytestmark = pytest.mark.asyncio

SCOPE = ProjectScope(tenant_id="tenant-1", project_id="project-1")

ERRORS = {
    "not-found": ResourceNotFound("tool", "tool-1", SCOPE),
    "conflict": ResourceConflict("Tool 'tool-1' already exists", resource_type="tool"),
    "invalid-graph": GraphValidationError(["Default sub-agent 'x' does not exist"], "graph-1"),
    "invalid-target": RelationTargetError("Must specify either targetAgentId or externalAgentId"),
    "store": CredentialStoreError("Credential store 'vault' is not registered", "vault"),
    "generic": AgentGraphError("boom"),
}


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise ERRORS[name]

    return app


async def _get(app: FastAPI, name: str):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(f"/raise/{name}")


@pytest.mark.parametrize(
    ("name", "status_code", "error_code"),
    [
        ("not-found", 404, "RESOURCE_NOT_FOUND"),
        ("conflict", 409, "RESOURCE_CONFLICT"),
        ("invalid-graph", 400, "GRAPH_VALIDATION_FAILED"),
        ("invalid-target", 400, "INVALID_RELATION_TARGET"),
        ("store", 500, "CREDENTIAL_STORE_ERROR"),
        ("generic", 500, "INTERNAL_ERROR"),
    ],
)
async def test_error_mapping(app, name, status_code, error_code):
    response = await _get(app, name)

    assert response.status_code == status_code
    body = response.json()
    assert body["error_code"] == error_code
    assert set(body) == {"error", "detail", "error_code"}


async def test_validation_errors_are_listed(app):
    response = await _get(app, "invalid-graph")
    assert response.json()["detail"] == ["Default sub-agent 'x' does not exist"]


async def test_not_found_does_not_echo_the_scope(app):
    detail = (await _get(app, "not-found")).json()["detail"]
    assert "tenant-1" not in detail
    assert detail == "The requested tool does not exist"


def test_error_string_carries_context():
    error = AgentGraphError("failed", tenant_id="t", project_id="p", resource_id="r")
    assert str(error) == "failed (tenant_id=t, project_id=p, resource_id=r)"
