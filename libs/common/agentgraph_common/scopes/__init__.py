from .context import AgentScope, GraphScope, ProjectScope, TenantScope
from .context_manager import ScopeContextManager
from .dependencies import (
    GraphScopeDep,
    ProjectScopeDep,
    TenantScopeDep,
    get_graph_scope,
    get_project_scope,
    get_tenant_scope,
)

__all__ = [
    "AgentScope",
    "GraphScope",
    "GraphScopeDep",
    "ProjectScope",
    "ProjectScopeDep",
    "ScopeContextManager",
    "TenantScope",
    "TenantScopeDep",
    "get_graph_scope",
    "get_project_scope",
    "get_tenant_scope",
]
