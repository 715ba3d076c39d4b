from unittest.mock import AsyncMock

import pytest
from agentgraph_common.exceptions.errors import CredentialStoreError
from agentgraph_credentials.application.registry import CredentialStoreRegistry
from agentgraph_credentials.application.resolver import CredentialResolver
from agentgraph_credentials.domain.models import CredentialReference
from agentgraph_credentials.infrastructure.memory_store import InMemoryCredentialStore

pytestmark = pytest.mark.asyncio


def reference(store_id: str = "memory-default", retrieval_params=None) -> CredentialReference:
    return CredentialReference(
        id="github-token",
        type="memory",
        credential_store_id=store_id,
        retrieval_params=retrieval_params,
    )


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def resolver(store):
    return CredentialResolver(CredentialStoreRegistry([store]))


class TestCredentialResolver:
    async def test_resolves_by_retrieval_key(self, resolver, store):
        await store.set("GITHUB_TOKEN", "ghp_secret")
        assert await resolver.resolve(reference(retrieval_params={"key": "GITHUB_TOKEN"})) == (
            "ghp_secret"
        )

    async def test_falls_back_to_reference_id(self, resolver, store):
        await store.set("github-token", "ghp_secret")
        assert await resolver.resolve(reference()) == "ghp_secret"

    async def test_unknown_store_resolves_to_none(self, resolver):
        assert await resolver.resolve(reference(store_id="vault")) is None

    async def test_missing_key_resolves_to_none(self, resolver):
        assert await resolver.resolve(reference(retrieval_params={"key": "missing"})) is None

    async def test_store_error_resolves_to_none(self, resolver, store):
        store.get = AsyncMock(side_effect=CredentialStoreError("decrypt failed"))
        assert await resolver.resolve(reference()) is None

    async def test_discard_removes_secret(self, resolver, store):
        await store.set("GITHUB_TOKEN", "ghp_secret")

        assert await resolver.discard(reference(retrieval_params={"key": "GITHUB_TOKEN"}))
        assert not await store.has("GITHUB_TOKEN")

    async def test_discard_without_retrieval_params(self, resolver, store):
        await store.set("github-token", "ghp_secret")

        assert await resolver.discard(reference()) is False
        assert await store.has("github-token")

    async def test_discard_store_error(self, resolver, store):
        store.delete = AsyncMock(side_effect=CredentialStoreError("unavailable"))
        assert await resolver.discard(reference(retrieval_params={"key": "k"})) is False
