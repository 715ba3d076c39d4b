import base64
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from agentgraph_common.exceptions.errors import ResourceNotFound
from agentgraph_graphs.application.api_key_service import (
    ApiKeyService,
    extract_public_id,
    hash_api_key,
    validate_and_get,
    verify_api_key,
)
from agentgraph_graphs.infrastructure.repository import AgentGraphRepository
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def service(db_session, project_scope, project):
    await AgentGraphRepository(db_session, project_scope).create(id="support", name="Support")
    return ApiKeyService(db_session, project_scope)


class TestKeyFormat:
    def test_extract_public_id(self):
        assert extract_public_id("sk_abc123.secret") == "abc123"

    @pytest.mark.parametrize("key", ["abc123.secret", "sk_abc123", "sk_.secret", "sk_abc."])
    def test_malformed_keys(self, key):
        assert extract_public_id(key) is None

    def test_hash_is_salted(self):
        first, second = hash_api_key("sk_a.b"), hash_api_key("sk_a.b")

        assert first != second
        assert verify_api_key("sk_a.b", first)
        assert verify_api_key("sk_a.b", second)
        assert not verify_api_key("sk_a.c", first)

    def test_corrupt_hash(self):
        assert not verify_api_key("sk_a.b", "not base64!")

    def test_hash_is_salt_then_scrypt_digest(self):
        salt = b"s" * 32

        combined = base64.b64decode(hash_api_key("sk_a.b", salt=salt))

        assert combined[:32] == salt
        Scrypt(salt=salt, length=64, n=16384, r=8, p=1).verify(b"sk_a.b", combined[32:])

    def test_truncated_hash(self):
        stored = hash_api_key("sk_a.b")
        truncated = base64.b64encode(base64.b64decode(stored)[:40]).decode("ascii")
        assert not verify_api_key("sk_a.b", truncated)


class TestApiKeyService:
    async def test_generate_returns_plaintext_once(self, service):
        record, key = await service.generate_and_create("support", name="CI")

        assert key.startswith(f"sk_{record.public_id}.")
        assert record.key_prefix == key[:12]
        assert key not in record.key_hash
        assert record.name == "CI"

    async def test_generate_for_missing_graph(self, service):
        with pytest.raises(ResourceNotFound):
            await service.generate_and_create("missing")

    async def test_validate(self, service, db_session):
        record, key = await service.generate_and_create("support")

        found = await validate_and_get(db_session, key)

        assert found.id == record.id
        assert await validate_and_get(db_session, key + "x") is None
        assert await validate_and_get(db_session, "sk_unknown.secret") is None

    async def test_expired_key_is_rejected(self, service, db_session):
        _, key = await service.generate_and_create(
            "support", expires_at=datetime.now() - timedelta(minutes=1)
        )
        assert await validate_and_get(db_session, key) is None

    async def test_update_last_used(self, service):
        record, _ = await service.generate_and_create("support")

        updated = await service.update_last_used(record.id)

        assert updated.last_used_at is not None
