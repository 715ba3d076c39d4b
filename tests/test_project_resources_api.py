import pytest

PROJECT_URL = "/tenants/tenant-1/projects/project-1"

pytestmark = pytest.mark.asyncio


def mcp_tool(tool_id: str = "search") -> dict:
    return {
        "id": tool_id,
        "name": tool_id.title(),
        "config": {"type": "mcp", "mcp": {"server": {"url": f"https://mcp.example.com/{tool_id}"}}},
    }


class TestToolsApi:
    async def test_create_and_get(self, client, api_project):
        response = await client.post(f"{PROJECT_URL}/tools", json=mcp_tool())

        assert response.status_code == 201
        data = (await client.get(f"{PROJECT_URL}/tools/search")).json()["data"]
        assert data["status"] == "unknown"
        assert data["config"]["mcp"]["server"]["url"] == "https://mcp.example.com/search"

    async def test_duplicate(self, client, api_project):
        await client.post(f"{PROJECT_URL}/tools", json=mcp_tool())
        response = await client.post(f"{PROJECT_URL}/tools", json=mcp_tool())
        assert response.status_code == 409

    async def test_list_filters_by_status(self, client, api_project):
        for tool_id in ("search", "fetch"):
            await client.post(f"{PROJECT_URL}/tools", json=mcp_tool(tool_id))

        unknown = await client.get(f"{PROJECT_URL}/tools", params={"status": "unknown"})
        healthy = await client.get(f"{PROJECT_URL}/tools", params={"status": "healthy"})

        assert unknown.json()["pagination"]["total"] == 2
        assert healthy.json()["data"] == []

    async def test_patch(self, client, api_project):
        await client.post(f"{PROJECT_URL}/tools", json=mcp_tool())

        response = await client.patch(
            f"{PROJECT_URL}/tools/search", json={"description": "Web search"}
        )

        assert response.json()["data"]["description"] == "Web search"
        assert response.json()["data"]["name"] == "Search"

    async def test_delete(self, client, api_project):
        await client.post(f"{PROJECT_URL}/tools", json=mcp_tool())

        assert (await client.delete(f"{PROJECT_URL}/tools/search")).status_code == 204
        assert (await client.get(f"{PROJECT_URL}/tools/search")).status_code == 404


class TestContextConfigsApi:
    async def test_crud(self, client, api_project):
        created = await client.post(
            f"{PROJECT_URL}/context-configs",
            json={"id": "headers", "headersSchema": {"type": "object"}},
        )
        assert created.status_code == 201
        assert created.json()["data"]["name"] == ""

        updated = await client.patch(
            f"{PROJECT_URL}/context-configs/headers", json={"name": "Request headers"}
        )
        assert updated.json()["data"]["name"] == "Request headers"
        assert updated.json()["data"]["headersSchema"] == {"type": "object"}

        listed = await client.get(f"{PROJECT_URL}/context-configs")
        assert [c["id"] for c in listed.json()["data"]] == ["headers"]

        assert (await client.delete(f"{PROJECT_URL}/context-configs/headers")).status_code == 204
        assert (await client.get(f"{PROJECT_URL}/context-configs/headers")).status_code == 404

    async def test_duplicate(self, client, api_project):
        await client.post(f"{PROJECT_URL}/context-configs", json={"id": "headers"})
        response = await client.post(f"{PROJECT_URL}/context-configs", json={"id": "headers"})
        assert response.status_code == 409
