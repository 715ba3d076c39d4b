import pytest

GRAPH_URL = "/tenants/tenant-1/projects/project-1/graphs/support"

pytestmark = pytest.mark.asyncio


class TestSubAgentsApi:
    async def test_create_and_get(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agents",
            json={"id": "critic", "name": "Critic", "stopWhen": {"stepCountIs": 4}},
        )

        assert response.status_code == 201
        data = (await client.get(f"{GRAPH_URL}/sub-agents/critic")).json()["data"]
        assert data["graphId"] == "support"
        assert data["stopWhen"] == {"stepCountIs": 4}

    async def test_create_in_missing_graph(self, client, api_project):
        response = await client.post(
            "/tenants/tenant-1/projects/project-1/graphs/missing/sub-agents",
            json={"id": "critic", "name": "Critic"},
        )
        assert response.status_code == 404

    async def test_duplicate(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agents", json={"id": "router", "name": "Router"}
        )
        assert response.status_code == 409

    async def test_list(self, client, api_graph):
        body = (await client.get(f"{GRAPH_URL}/sub-agents")).json()
        assert sorted(agent["id"] for agent in body["data"]) == ["router", "writer"]
        assert body["pagination"]["total"] == 2

    async def test_patch_only_changes_sent_fields(self, client, api_graph):
        response = await client.patch(
            f"{GRAPH_URL}/sub-agents/writer", json={"prompt": "Write clearly"}
        )

        data = response.json()["data"]
        assert data["prompt"] == "Write clearly"
        assert data["name"] == "Writer"

    async def test_delete(self, client, api_graph):
        assert (await client.delete(f"{GRAPH_URL}/sub-agents/writer")).status_code == 204
        assert (await client.get(f"{GRAPH_URL}/sub-agents/writer")).status_code == 404


class TestSubAgentRelationsApi:
    async def test_graph_relations_are_listed(self, client, api_graph):
        body = (await client.get(f"{GRAPH_URL}/sub-agent-relations")).json()

        assert [
            (r["sourceSubAgentId"], r["targetSubAgentId"], r["relationType"]) for r in body["data"]
        ] == [("router", "writer", "transfer")]

    async def test_create_external_relation(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agent-relations",
            json={
                "sourceSubAgentId": "writer",
                "externalAgentId": "partner",
                "relationType": "delegate",
            },
        )

        assert response.status_code == 201
        relation = response.json()["data"]
        assert relation["targetSubAgentId"] is None
        filtered = await client.get(
            f"{GRAPH_URL}/sub-agent-relations",
            params={"sourceSubAgentId": "writer", "relationType": "delegate"},
        )
        assert [r["id"] for r in filtered.json()["data"]] == [relation["id"]]

    async def test_both_targets(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agent-relations",
            json={
                "sourceSubAgentId": "router",
                "targetSubAgentId": "writer",
                "externalAgentId": "partner",
                "relationType": "transfer",
            },
        )
        assert response.status_code == 422

    async def test_unknown_target(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agent-relations",
            json={
                "sourceSubAgentId": "router",
                "targetSubAgentId": "ghost",
                "relationType": "transfer",
            },
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_RELATION_TARGET"

    async def test_unknown_source(self, client, api_graph):
        response = await client.post(
            f"{GRAPH_URL}/sub-agent-relations",
            json={
                "sourceSubAgentId": "ghost",
                "targetSubAgentId": "writer",
                "relationType": "transfer",
            },
        )
        assert response.status_code == 404

    async def test_delete(self, client, api_graph):
        relations = (await client.get(f"{GRAPH_URL}/sub-agent-relations")).json()["data"]
        url = f"{GRAPH_URL}/sub-agent-relations/{relations[0]['id']}"

        assert (await client.delete(url)).status_code == 204
        assert (await client.get(url)).status_code == 404
