"""Credential store configuration."""

from functools import lru_cache

from .base import BaseAppSettings


class CredentialStoreSettings(BaseAppSettings):
    """Credential store configuration.

    Supported CREDENTIAL_STORE_TYPES entries (comma separated):
    - "memory": process-local store, the default for development and tests
    - "database": Fernet-encrypted rows in the application database
    """

    CREDENTIAL_STORE_TYPES: str = "memory"
    CREDENTIAL_ENCRYPTION_KEY: str | None = None  # Required for the database store
    DEFAULT_CREDENTIAL_STORE_ID: str = "memory-default"

    @property
    def store_types(self) -> list[str]:
        return [t.strip().lower() for t in self.CREDENTIAL_STORE_TYPES.split(",") if t.strip()]


@lru_cache
def get_credential_store_settings() -> CredentialStoreSettings:
    """Get credential store settings."""
    return CredentialStoreSettings()
