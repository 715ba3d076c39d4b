from .interfaces import CredentialStore, CredentialStoreType
from .models import CredentialReference, EncryptedCredential

__all__ = ["CredentialReference", "CredentialStore", "CredentialStoreType", "EncryptedCredential"]
