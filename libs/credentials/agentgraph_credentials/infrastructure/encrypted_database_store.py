"""Database-backed credential store with Fernet encryption.

Secrets live in the ``encrypted_credentials`` table, scoped by tenant and
project. The store writes through the caller's session and never commits.
"""

import logging
from datetime import datetime

from agentgraph_common.base.repository import dialect_insert
from agentgraph_common.exceptions.errors import CredentialStoreError
from agentgraph_common.scopes.context import ProjectScope
from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_credentials.domain.interfaces import CredentialStore, CredentialStoreType
from agentgraph_credentials.domain.models import EncryptedCredential

logger = logging.getLogger(__name__)


class EncryptedDatabaseCredentialStore(CredentialStore):
    def __init__(
        self,
        session: AsyncSession,
        scopes: ProjectScope,
        encryption_key: str | None,
        store_id: str = "database-default",
    ):
        """Initialize the store.

        Args:
            session: SQLAlchemy async session for database operations
            scopes: Tenant/project the secrets belong to
            encryption_key: Fernet key (required)
            store_id: Registry id of this store
        """
        super().__init__(store_id)
        self.session = session
        self.scopes = scopes
        self._fernet = self._load_key(encryption_key)

    @property
    def type(self) -> str:
        return CredentialStoreType.DATABASE

    @staticmethod
    def _load_key(encryption_key: str | None) -> Fernet:
        if not encryption_key:
            raise CredentialStoreError(
                "Encryption key is required for the database credential store. "
                "Set CREDENTIAL_ENCRYPTION_KEY."
            )
        try:
            return Fernet(encryption_key.encode("utf-8"))
        except ValueError as e:
            raise CredentialStoreError(f"Invalid credential encryption key: {e}") from e

    def _encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")

    def _decrypt(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            logger.error("Failed to decrypt credential value", extra={"store_id": self.id})
            raise CredentialStoreError(
                "Failed to decrypt credential. Key may have changed.", store_id=self.id
            ) from e

    def _key_filter(self, key: str):
        return (
            EncryptedCredential.tenant_id == self.scopes.tenant_id,
            EncryptedCredential.project_id == self.scopes.project_id,
            EncryptedCredential.key == key,
        )

    async def get(self, key: str) -> str | None:
        result = await self.session.execute(
            select(EncryptedCredential.encrypted_value).where(*self._key_filter(key))
        )
        encrypted_value = result.scalar_one_or_none()
        if encrypted_value is None:
            logger.debug("Credential not found", extra={"store_id": self.id, "key": key})
            return None
        return self._decrypt(encrypted_value)

    async def set(self, key: str, value: str) -> None:
        now = datetime.now()
        stmt = dialect_insert(self.session, EncryptedCredential.__table__).values(
            tenant_id=self.scopes.tenant_id,
            project_id=self.scopes.project_id,
            key=key,
            encrypted_value=self._encrypt(value),
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["tenant_id", "project_id", "key"],
            set_={
                "encrypted_value": stmt.excluded.encrypted_value,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)
        logger.info(
            "Stored credential",
            extra={"store_id": self.id, "tenant_id": self.scopes.tenant_id, "key": key},
        )

    async def has(self, key: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(EncryptedCredential).where(*self._key_filter(key))
        )
        return (result.scalar() or 0) > 0

    async def delete(self, key: str) -> bool:
        result = await self.session.execute(
            delete(EncryptedCredential).where(*self._key_filter(key))
        )
        return (result.rowcount or 0) > 0
