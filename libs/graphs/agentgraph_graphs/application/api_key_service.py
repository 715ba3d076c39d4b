"""Graph API keys.

Keys look like ``sk_<publicId>.<secret>``. The public id gives an indexed
lookup; the whole key is verified against a salted scrypt hash.
"""

import base64
import binascii
import logging
import secrets
import string
from datetime import datetime
from uuid import uuid4

from agentgraph_common.exceptions.errors import ResourceNotFound
from agentgraph_common.scopes.context import ProjectScope
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_graphs.domain.models import ApiKey
from agentgraph_graphs.infrastructure.repository import (
    AgentGraphRepository,
    ApiKeyRepository,
    find_api_key_by_public_id,
)

logger = logging.getLogger(__name__)

KEY_PREFIX = "sk_"
SECRET_BYTES = 32
SALT_LENGTH = 32
HASH_LENGTH = 64
PUBLIC_ID_LENGTH = 12
KEY_PREFIX_LENGTH = 12
PUBLIC_ID_ALPHABET = string.ascii_letters + string.digits + "-"

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1


def generate_public_id() -> str:
    return "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(PUBLIC_ID_LENGTH))


def _kdf(salt: bytes) -> Scrypt:
    return Scrypt(salt=salt, length=HASH_LENGTH, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)


def hash_api_key(key: str, salt: bytes | None = None) -> str:
    """Base64 of ``salt + scrypt(key, salt)``."""
    salt = salt or secrets.token_bytes(SALT_LENGTH)
    derived = _kdf(salt).derive(key.encode("utf-8"))
    return base64.b64encode(salt + derived).decode("ascii")


def verify_api_key(key: str, stored_hash: str) -> bool:
    try:
        combined = base64.b64decode(stored_hash.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        logger.error("Stored API key hash is not valid base64")
        return False
    salt, expected = combined[:SALT_LENGTH], combined[SALT_LENGTH:]
    if len(salt) != SALT_LENGTH or len(expected) != HASH_LENGTH:
        return False
    try:
        _kdf(salt).verify(key.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True


def extract_public_id(key: str) -> str | None:
    if not key.startswith(KEY_PREFIX):
        return None
    head, separator, secret = key[len(KEY_PREFIX) :].partition(".")
    if not separator or not head or not secret:
        return None
    return head


class ApiKeyService:
    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        self.session = session
        self.scopes = scopes
        self.api_keys = ApiKeyRepository(session, scopes)
        self.graphs = AgentGraphRepository(session, scopes)

    async def generate_and_create(
        self, graph_id: str, name: str | None = None, expires_at: datetime | None = None
    ) -> tuple[ApiKey, str]:
        """Create a key for ``graph_id``.

        Returns:
            The stored record and the plaintext key, which is not kept anywhere
        """
        if not await self.graphs.exists(graph_id):
            raise ResourceNotFound("agent_graph", graph_id, self.scopes)

        public_id = generate_public_id()
        key = f"{KEY_PREFIX}{public_id}.{secrets.token_urlsafe(SECRET_BYTES)}"
        record = await self.api_keys.create(
            id=str(uuid4()),
            graph_id=graph_id,
            public_id=public_id,
            key_hash=hash_api_key(key),
            key_prefix=key[:KEY_PREFIX_LENGTH],
            name=name,
            expires_at=expires_at,
        )
        logger.info(
            "Created API key",
            extra={"api_key_id": record.id, "graph_id": graph_id, "key_prefix": record.key_prefix},
        )
        return record, key

    async def update_last_used(self, api_key_id: str) -> ApiKey | None:
        return await self.api_keys.update_last_used(api_key_id)


async def validate_and_get(session: AsyncSession, key: str) -> ApiKey | None:
    """Return the active record for ``key``, or None if it is unknown, wrong or expired."""
    public_id = extract_public_id(key)
    if public_id is None:
        return None
    record = await find_api_key_by_public_id(session, public_id)
    if record is None or not verify_api_key(key, record.key_hash):
        return None
    if record.is_expired():
        logger.info("Rejected expired API key", extra={"api_key_id": record.id})
        return None
    return record
