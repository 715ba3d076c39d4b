from .services import (
    ApiKeyServiceDep,
    CredentialStoreRegistryDep,
    GraphFullServiceDep,
    ProjectServiceDep,
)

__all__ = [
    "ApiKeyServiceDep",
    "CredentialStoreRegistryDep",
    "GraphFullServiceDep",
    "ProjectServiceDep",
]
