import pytest
from agentgraph_tools.infrastructure.repository import ToolRepository

pytestmark = pytest.mark.asyncio

MCP_CONFIG = {"type": "mcp", "mcp": {"server": {"url": "https://mcp.example.com"}}}


@pytest.fixture
def repository(db_session, project_scope, project):
    return ToolRepository(db_session, project_scope)


class TestToolRepository:
    async def test_new_tool_status_is_unknown(self, repository):
        tool = await repository.create(id="search", name="Search", config=MCP_CONFIG)
        assert tool.status == "unknown"

    async def test_update_status_normalizes_discovered_tools(self, repository):
        await repository.create(id="search", name="Search", config=MCP_CONFIG)

        tool = await repository.update_status(
            "search",
            "healthy",
            available_tools=[
                {
                    "name": "lookup",
                    "parameters": {"properties": {"q": {"type": "string"}}},
                }
            ],
        )

        assert tool.status == "healthy"
        assert tool.last_health_check is not None
        assert tool.last_tools_sync is not None
        assert tool.available_tools == [
            {
                "name": "lookup",
                "description": None,
                "inputSchema": {
                    "type": "object",
                    "properties": {"q": {"type": "string"}},
                    "required": [],
                },
            }
        ]

    async def test_update_status_without_discovery_keeps_tool_list(self, repository):
        await repository.create(
            id="search", name="Search", config=MCP_CONFIG, available_tools=[{"name": "lookup"}]
        )

        tool = await repository.update_status("search", "unhealthy", last_error="timeout")

        assert tool.last_error == "timeout"
        assert tool.available_tools == [{"name": "lookup"}]
        assert tool.last_tools_sync is None

    async def test_update_status_of_unknown_tool(self, repository):
        assert await repository.update_status("missing", "healthy") is None

    async def test_list_by_status(self, repository):
        await repository.create(id="a", name="A", config=MCP_CONFIG, status="healthy")
        await repository.create(id="b", name="B", config=MCP_CONFIG)

        assert [t.id for t in await repository.list_by_status("healthy")] == ["a"]
