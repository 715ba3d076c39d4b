"""Scoped repository behaviour, exercised through the context config repository."""

from datetime import datetime, timedelta

import pytest
from agentgraph_common.base.pagination import Pagination
from agentgraph_common.exceptions.errors import ResourceNotFound
from agentgraph_common.scopes.context import ProjectScope
from agentgraph_context.infrastructure.repository import ContextConfigRepository

pytestmark = pytest.mark.asyncio


@pytest.fixture
def repository(db_session, project_scope, project):
    return ContextConfigRepository(db_session, project_scope)


class TestScopedRepository:
    async def test_create_injects_scope(self, repository):
        config = await repository.create(id="config-1", name="headers")

        assert config.tenant_id == "tenant-1"
        assert config.project_id == "project-1"
        assert await repository.exists("config-1")

    async def test_scope_passed_by_caller_is_ignored(self, repository):
        config = await repository.create(id="config-1", name="headers", tenant_id="intruder")
        assert config.tenant_id == "tenant-1"

    async def test_get_by_id_or_raise(self, repository):
        with pytest.raises(ResourceNotFound) as exc_info:
            await repository.get_by_id_or_raise("missing")
        assert exc_info.value.resource_type == "context_config"

    async def test_get_by_ids(self, repository):
        await repository.create(id="a", name="a")
        await repository.create(id="b", name="b")
        await repository.create(id="c", name="c")

        found = await repository.get_by_ids(["a", "c", "unknown"])

        assert sorted(config.id for config in found) == ["a", "c"]
        assert await repository.get_by_ids([]) == []

    async def test_update_keeps_scope_and_id(self, repository):
        await repository.create(id="config-1", name="before")

        updated = await repository.update(
            "config-1", name="after", tenant_id="tenant-2", project_id="other", id="renamed"
        )

        assert updated.name == "after"
        assert updated.id == "config-1"
        assert updated.tenant_id == "tenant-1"
        assert updated.project_id == "project-1"

    async def test_update_missing_returns_none(self, repository):
        assert await repository.update("missing", name="x") is None

    async def test_upsert_second_write_wins(self, repository):
        first = await repository.upsert("config-1", name="first", description="kept")
        created_at = first.created_at

        second = await repository.upsert("config-1", name="second")

        assert second.name == "second"
        assert second.description == "kept"
        assert second.created_at == created_at
        assert await repository.count() == 1

    async def test_delete_reports_whether_a_row_was_removed(self, repository):
        await repository.create(id="config-1", name="headers")

        assert await repository.delete("config-1") is True
        assert await repository.delete("config-1") is False

    async def test_delete_where_returns_count(self, repository):
        for index in range(3):
            await repository.create(id=f"config-{index}", name="shared")
        await repository.create(id="other", name="different")

        assert await repository.delete_where(name="shared") == 3
        assert await repository.count() == 1

    async def test_list_paginated_newest_first(self, repository):
        start = datetime(2025, 1, 1)
        for index in range(25):
            await repository.create(
                id=f"config-{index:02d}", name="c", created_at=start + timedelta(minutes=index)
            )

        page = await repository.list_paginated(Pagination.from_params(page=1, limit=10))

        assert [config.id for config in page.data][:2] == ["config-24", "config-23"]
        assert page.pagination.total == 25
        assert page.pagination.pages == 3

        last = await repository.list_paginated(Pagination.from_params(page=3, limit=10))
        assert len(last.data) == 5

    async def test_filters_on_none_and_lists(self, repository):
        await repository.create(id="a", name="a", description="x")
        await repository.create(id="b", name="b", description="y")

        assert [c.id for c in await repository.list_all(name=["a", "b"], description="y")] == [
            "b"
        ]


class TestScopeIsolation:
    async def test_rows_of_another_tenant_are_invisible(
        self, db_session, project_scope, project, other_project
    ):
        mine = ContextConfigRepository(db_session, project_scope)
        theirs = ContextConfigRepository(
            db_session, ProjectScope(tenant_id="tenant-2", project_id="project-1")
        )
        await mine.create(id="shared-id", name="mine")
        await theirs.create(id="shared-id", name="theirs")
        await theirs.create(id="only-theirs", name="theirs")

        assert [c.name for c in await mine.list_all()] == ["mine"]
        assert await mine.count() == 1
        assert await mine.get_by_id("only-theirs") is None
        assert (await theirs.get_by_id("shared-id")).name == "theirs"

    async def test_delete_cannot_reach_another_tenant(
        self, db_session, project_scope, project, other_project
    ):
        mine = ContextConfigRepository(db_session, project_scope)
        theirs = ContextConfigRepository(
            db_session, ProjectScope(tenant_id="tenant-2", project_id="project-1")
        )
        await theirs.create(id="config-1", name="theirs")

        assert await mine.delete("config-1") is False
        assert await theirs.exists("config-1")
