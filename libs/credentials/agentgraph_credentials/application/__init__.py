from .factory import CredentialStoreFactory
from .registry import CredentialStoreRegistry
from .resolver import CredentialResolver

__all__ = ["CredentialResolver", "CredentialStoreFactory", "CredentialStoreRegistry"]
