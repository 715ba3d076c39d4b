"""Builds credential store registries from settings."""

import logging

from agentgraph_common.config.credentials import CredentialStoreSettings
from agentgraph_common.exceptions.errors import CredentialStoreError
from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_credentials.domain.interfaces import CredentialStoreType
from agentgraph_credentials.infrastructure.encrypted_database_store import (
    EncryptedDatabaseCredentialStore,
)
from agentgraph_credentials.infrastructure.memory_store import InMemoryCredentialStore

from .registry import CredentialStoreRegistry

logger = logging.getLogger(__name__)

SUPPORTED_STORE_TYPES = (CredentialStoreType.MEMORY, CredentialStoreType.DATABASE)


class CredentialStoreFactory:
    """Creates per-request registries of the configured credential stores.

    The in-memory store is shared by every registry the factory creates, so
    values set through one request are visible to the next.
    """

    def __init__(self, settings: CredentialStoreSettings):
        self.settings = settings
        self._validate_configuration()
        self._memory_store = InMemoryCredentialStore()

    def _validate_configuration(self) -> None:
        unknown = [t for t in self.settings.store_types if t not in SUPPORTED_STORE_TYPES]
        if unknown:
            raise CredentialStoreError(
                f"Unsupported credential store type(s): {', '.join(unknown)}. "
                f"Supported types: {', '.join(SUPPORTED_STORE_TYPES)}"
            )
        if (
            CredentialStoreType.DATABASE in self.settings.store_types
            and not self.settings.CREDENTIAL_ENCRYPTION_KEY
        ):
            raise CredentialStoreError(
                "CREDENTIAL_ENCRYPTION_KEY is required when the database credential store "
                "is enabled. Generate one with: "
                "python -c 'from cryptography.fernet import Fernet; "
                "print(Fernet.generate_key().decode())'"
            )
        logger.info(f"Credential stores configured: {self.settings.store_types}")

    @property
    def memory_store(self) -> InMemoryCredentialStore:
        return self._memory_store

    def create_registry(
        self, session: AsyncSession, scopes: ProjectScope
    ) -> CredentialStoreRegistry:
        registry = CredentialStoreRegistry()
        for store_type in self.settings.store_types:
            if store_type == CredentialStoreType.MEMORY:
                registry.add(self._memory_store)
            elif store_type == CredentialStoreType.DATABASE:
                registry.add(
                    EncryptedDatabaseCredentialStore(
                        session=session,
                        scopes=scopes,
                        encryption_key=self.settings.CREDENTIAL_ENCRYPTION_KEY,
                    )
                )
        return registry
