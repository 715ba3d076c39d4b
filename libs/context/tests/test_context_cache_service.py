from unittest.mock import AsyncMock

import pytest
from agentgraph_context.application.context_cache_service import ContextCacheService
from agentgraph_context.domain.schemas import REQUEST_CONTEXT_KEY, ContextCacheEntryCreate
from sqlalchemy.exc import OperationalError

pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(db_session, project_scope, project):
    return ContextCacheService(db_session, project_scope)


def entry(key: str = "user", value=None, request_hash: str | None = "hash-1"):
    return ContextCacheEntryCreate(
        conversation_id="conv-1",
        context_config_id="config-1",
        context_variable_key=key,
        value=value if value is not None else {"name": "Ada"},
        request_hash=request_hash,
    )


def broken_database_error() -> OperationalError:
    return OperationalError("SELECT", {}, Exception("no such table: context_cache"))


class TestContextCacheService:
    async def test_hit_after_set(self, service):
        stored = await service.set_cache_entry(entry())

        found = await service.get_cache_entry("conv-1", "config-1", "user", "hash-1")

        assert found is not None
        assert found.id == stored.id
        assert found.value == {"name": "Ada"}
        assert found.fetch_source == "config-1:user"

    async def test_hash_mismatch_is_a_miss(self, service):
        await service.set_cache_entry(entry())
        assert await service.get_cache_entry("conv-1", "config-1", "user", "hash-2") is None

    async def test_no_hash_given_matches_any(self, service):
        await service.set_cache_entry(entry())
        assert await service.get_cache_entry("conv-1", "config-1", "user") is not None

    async def test_set_replaces_previous_value(self, service):
        await service.set_cache_entry(entry(value={"name": "Ada"}))
        await service.set_cache_entry(entry(value={"name": "Grace"}, request_hash="hash-2"))

        entries = await service.get_conversation_cache_entries("conv-1")

        assert len(entries) == 1
        assert entries[0].value == {"name": "Grace"}
        assert entries[0].request_hash == "hash-2"

    async def test_read_failure_is_a_miss(self, service):
        service.repository.get_entry = AsyncMock(side_effect=broken_database_error())
        assert await service.get_cache_entry("conv-1", "config-1", "user") is None

    async def test_write_failure_is_dropped(self, service):
        service.repository.upsert_entry = AsyncMock(side_effect=broken_database_error())
        assert await service.set_cache_entry(entry()) is None

    async def test_delete_failure_counts_zero(self, service):
        service.repository.delete_where = AsyncMock(side_effect=broken_database_error())
        assert await service.clear_conversation_cache("conv-1") == 0

    async def test_invalidate_request_context_only(self, service):
        await service.set_cache_entry(entry(key=REQUEST_CONTEXT_KEY))
        await service.set_cache_entry(entry(key="user"))

        removed = await service.invalidate_request_context_cache("conv-1", "config-1")

        assert removed == 1
        remaining = await service.get_context_config_cache_entries("config-1")
        assert [e.context_variable_key for e in remaining] == ["user"]

    async def test_invalidate_invocation_definitions(self, service):
        for key in ("a", "b", "c"):
            await service.set_cache_entry(entry(key=key))

        assert await service.invalidate_invocation_definitions_cache("conv-1", "config-1", []) == 0
        assert (
            await service.invalidate_invocation_definitions_cache(
                "conv-1", "config-1", ["a", "b"]
            )
            == 2
        )

    async def test_cleanup_removes_everything_in_scope(self, service):
        await service.set_cache_entry(entry(key="a"))
        await service.set_cache_entry(entry(key="b"))

        assert await service.cleanup_tenant_cache() == 2
        assert await service.get_conversation_cache_entries("conv-1") == []
