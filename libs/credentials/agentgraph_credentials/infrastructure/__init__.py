from .encrypted_database_store import EncryptedDatabaseCredentialStore
from .memory_store import InMemoryCredentialStore
from .repository import CredentialReferenceRepository

__all__ = [
    "CredentialReferenceRepository",
    "EncryptedDatabaseCredentialStore",
    "InMemoryCredentialStore",
]
