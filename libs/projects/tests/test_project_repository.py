import pytest
from agentgraph_common.scopes.context import TenantScope
from agentgraph_projects.infrastructure.repository import ProjectRepository

pytestmark = pytest.mark.asyncio


class TestProjectRepository:
    async def test_stop_when_and_models_read_back(self, db_session, tenant_scope):
        repository = ProjectRepository(db_session, tenant_scope)
        await repository.create(
            id="limits",
            name="Limits",
            stop_when={"transferCountIs": 3, "stepCountIs": 20},
            models={"base": {"model": "openai/gpt-4o"}},
        )

        assert await repository.get_stop_when("limits") == {
            "transferCountIs": 3,
            "stepCountIs": 20,
        }
        assert (await repository.get_models("limits"))["base"]["model"] == "openai/gpt-4o"

    async def test_missing_project_has_no_settings(self, db_session, tenant_scope):
        repository = ProjectRepository(db_session, tenant_scope)
        assert await repository.get_stop_when("missing") is None
        assert await repository.get_models("missing") is None

    async def test_project_ids_are_unique_per_tenant_only(self, project, other_project, db_session):
        own = await ProjectRepository(db_session, TenantScope(tenant_id="tenant-1")).list_all()
        other = await ProjectRepository(db_session, TenantScope(tenant_id="tenant-2")).list_all()

        assert [p.name for p in own] == ["Test Project"]
        assert [p.name for p in other] == ["Other Tenant Project"]
