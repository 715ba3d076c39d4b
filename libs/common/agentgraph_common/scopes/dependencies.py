"""FastAPI dependencies that turn path parameters into scope objects.

Provides:
- get_tenant_scope: tenant scope from the ``tenant_id`` path parameter
- get_project_scope: tenant + project scope
- get_graph_scope: tenant + project + graph scope

Each dependency also records the scope in ``ScopeContextManager`` so that
log records and error handlers emitted during the request carry it.
"""

from typing import Annotated

from fastapi import Depends, Path

from ..base.schemas import RESOURCE_ID_PATTERN
from .context import GraphScope, ProjectScope, TenantScope
from .context_manager import ScopeContextManager

TenantIdParam = Annotated[str, Path(min_length=1, max_length=255, pattern=RESOURCE_ID_PATTERN)]
ProjectIdParam = Annotated[str, Path(min_length=1, max_length=255, pattern=RESOURCE_ID_PATTERN)]
GraphIdParam = Annotated[str, Path(min_length=1, max_length=255, pattern=RESOURCE_ID_PATTERN)]


async def get_tenant_scope(tenant_id: TenantIdParam) -> TenantScope:
    scope = TenantScope(tenant_id=tenant_id)
    ScopeContextManager.set_context(scope)
    return scope


async def get_project_scope(tenant_id: TenantIdParam, project_id: ProjectIdParam) -> ProjectScope:
    scope = ProjectScope(tenant_id=tenant_id, project_id=project_id)
    ScopeContextManager.set_context(scope)
    return scope


async def get_graph_scope(
    tenant_id: TenantIdParam, project_id: ProjectIdParam, graph_id: GraphIdParam
) -> GraphScope:
    scope = GraphScope(tenant_id=tenant_id, project_id=project_id, graph_id=graph_id)
    ScopeContextManager.set_context(scope)
    return scope


# Type aliases for dependency injection
TenantScopeDep = Annotated[TenantScope, Depends(get_tenant_scope)]
ProjectScopeDep = Annotated[ProjectScope, Depends(get_project_scope)]
GraphScopeDep = Annotated[GraphScope, Depends(get_graph_scope)]
