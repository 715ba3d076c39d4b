"""Service dependencies bound to the request session and scope."""

from typing import Annotated

from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import ProjectScopeDep, TenantScopeDep
from agentgraph_credentials.application.factory import CredentialStoreFactory
from agentgraph_credentials.application.registry import CredentialStoreRegistry
from agentgraph_graphs.application.api_key_service import ApiKeyService
from agentgraph_graphs.application.graph_full_service import GraphFullService
from agentgraph_graphs.application.project_service import ProjectService
from fastapi import Depends, Request


async def get_project_service(session: DatabaseSession, scope: TenantScopeDep) -> ProjectService:
    return ProjectService(session, scope)


async def get_graph_full_service(
    session: DatabaseSession, scope: ProjectScopeDep
) -> GraphFullService:
    return GraphFullService(session, scope)


async def get_api_key_service(session: DatabaseSession, scope: ProjectScopeDep) -> ApiKeyService:
    return ApiKeyService(session, scope)


def get_credential_store_factory(request: Request) -> CredentialStoreFactory:
    """The factory created at startup; one per application."""
    return request.app.state.credential_store_factory


async def get_credential_store_registry(
    session: DatabaseSession,
    scope: ProjectScopeDep,
    factory: Annotated[CredentialStoreFactory, Depends(get_credential_store_factory)],
) -> CredentialStoreRegistry:
    return factory.create_registry(session, scope)


ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
GraphFullServiceDep = Annotated[GraphFullService, Depends(get_graph_full_service)]
ApiKeyServiceDep = Annotated[ApiKeyService, Depends(get_api_key_service)]
CredentialStoreRegistryDep = Annotated[
    CredentialStoreRegistry, Depends(get_credential_store_registry)
]
