import pytest
import pytest_asyncio
from agentgraph_common.exceptions.errors import RelationTargetError
from agentgraph_graphs.domain.schemas import ExternalTarget, InternalTarget
from agentgraph_graphs.infrastructure.repository import (
    AgentGraphRepository,
    ExternalAgentRepository,
    SubAgentRelationRepository,
    SubAgentRepository,
)

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def relations(db_session, project_scope, project):
    await AgentGraphRepository(db_session, project_scope).create(id="support", name="Support")
    scope = project_scope.for_graph("support")
    sub_agents = SubAgentRepository(db_session, scope)
    await sub_agents.create(id="router", name="Router")
    await sub_agents.create(id="writer", name="Writer")
    await ExternalAgentRepository(db_session, scope).create(
        id="partner", name="Partner", base_url="https://partner.example.com/a2a"
    )
    return SubAgentRelationRepository(db_session, scope)


class TestSubAgentRelationRepository:
    async def test_internal_relation(self, relations):
        relation = await relations.create_relation(
            "router", "transfer", target_sub_agent_id="writer"
        )

        assert relation.target_sub_agent_id == "writer"
        assert relation.external_agent_id is None
        assert relation.target_id == "writer"

    async def test_external_relation(self, relations):
        relation = await relations.create_relation(
            "router", "delegate", external_agent_id="partner"
        )

        assert relation.target_sub_agent_id is None
        assert [r.id for r in await relations.list_external_relations()] == [relation.id]

    async def test_both_targets_rejected(self, relations):
        with pytest.raises(RelationTargetError):
            await relations.create_relation(
                "router", "transfer", target_sub_agent_id="writer", external_agent_id="partner"
            )
        assert await relations.count() == 0

    async def test_no_target_rejected(self, relations):
        with pytest.raises(RelationTargetError):
            await relations.create_relation("router", "transfer")

    async def test_unknown_relation_type(self, relations):
        with pytest.raises(RelationTargetError, match="Invalid relation type"):
            await relations.create_for_target("router", InternalTarget(sub_agent_id="writer"), "x")

    async def test_upsert_relation_reuses_match(self, relations):
        target = ExternalTarget(external_agent_id="partner")

        first = await relations.upsert_relation("router", target, "delegate")
        second = await relations.upsert_relation("router", target, "delegate")

        assert first.id == second.id

    async def test_related_agents(self, relations):
        await relations.create_relation("router", "transfer", target_sub_agent_id="writer")
        await relations.create_relation("router", "delegate", external_agent_id="partner")

        related = await relations.get_related_agents("router")

        assert [a.id for a in related["internal"]] == ["writer"]
        assert [a.id for a in related["external"]] == ["partner"]

    async def test_target_validation(self, relations):
        assert await relations.validate_internal_target("writer")
        assert not await relations.validate_internal_target("partner")
        assert await relations.validate_external_target("partner")
