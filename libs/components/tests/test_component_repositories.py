import pytest
import pytest_asyncio
from agentgraph_components.infrastructure.repository import (
    ArtifactComponentRepository,
    DataComponentRepository,
    SubAgentArtifactComponentRepository,
    SubAgentDataComponentRepository,
)
from agentgraph_graphs.infrastructure.repository import AgentGraphRepository, SubAgentRepository

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def graph_scope(db_session, project_scope, project):
    """Graph ``support`` with sub-agents ``router`` and ``writer``."""
    await AgentGraphRepository(db_session, project_scope).create(id="support", name="Support")
    scope = project_scope.for_graph("support")
    sub_agents = SubAgentRepository(db_session, scope)
    await sub_agents.create(id="router", name="Router")
    await sub_agents.create(id="writer", name="Writer")
    return scope


@pytest_asyncio.fixture
async def components(db_session, project_scope, project):
    await DataComponentRepository(db_session, project_scope).create(
        id="weather-card", name="Weather card", props={"type": "object"}
    )
    await ArtifactComponentRepository(db_session, project_scope).create(
        id="report", name="Report", summary_props={"type": "object"}
    )


class TestSubAgentDataComponentRepository:
    async def test_associate_and_list(self, db_session, graph_scope, components):
        repository = SubAgentDataComponentRepository(db_session, graph_scope)

        relation = await repository.associate("router", "weather-card")

        assert relation.graph_id == "support"
        assert await repository.is_associated("router", "weather-card")
        assert not await repository.is_associated("writer", "weather-card")
        assert [c.id for c in await repository.list_for_agent("router")] == ["weather-card"]

    async def test_upsert_relation_is_idempotent(self, db_session, graph_scope, components):
        repository = SubAgentDataComponentRepository(db_session, graph_scope)

        first = await repository.upsert_relation("router", "weather-card")
        second = await repository.upsert_relation("router", "weather-card")

        assert first.id == second.id
        assert await repository.count_for_agent("router") == 1

    async def test_remove(self, db_session, graph_scope, components):
        repository = SubAgentDataComponentRepository(db_session, graph_scope)
        await repository.associate("router", "weather-card")

        assert await repository.remove("router", "weather-card") is True
        assert await repository.remove("router", "weather-card") is False

    async def test_list_agents_using_spans_the_project(
        self, db_session, project_scope, graph_scope, components
    ):
        repository = SubAgentDataComponentRepository(db_session, graph_scope)
        await repository.associate("router", "weather-card")
        await repository.associate("writer", "weather-card")

        users = await SubAgentDataComponentRepository(
            db_session, project_scope
        ).list_agents_using("weather-card")

        assert sorted(u["sub_agent_id"] for u in users) == ["router", "writer"]
        assert {u["graph_id"] for u in users} == {"support"}

    async def test_deleting_sub_agent_cascades(self, db_session, graph_scope, components):
        repository = SubAgentDataComponentRepository(db_session, graph_scope)
        await repository.associate("router", "weather-card")

        await SubAgentRepository(db_session, graph_scope).delete("router")

        assert await repository.count() == 0


class TestSubAgentArtifactComponentRepository:
    async def test_graph_has_artifact_components(
        self, db_session, project_scope, graph_scope, components
    ):
        repository = SubAgentArtifactComponentRepository(db_session, graph_scope)
        assert not await repository.graph_has_artifact_components("support")

        await repository.associate("writer", "report")

        assert await repository.graph_has_artifact_components("support")
        assert [c.name for c in await repository.list_for_agent("writer")] == ["Report"]
