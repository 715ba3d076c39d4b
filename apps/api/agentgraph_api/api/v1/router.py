"""Routes of the management API, all nested under a tenant."""

from fastapi import APIRouter

from . import api_keys, context_configs, credentials, graphs, projects, relations, sub_agents, tools

tenant_router = APIRouter(prefix="/tenants/{tenant_id}")
tenant_router.include_router(projects.router)

project_router = APIRouter(prefix="/projects/{project_id}")
project_router.include_router(graphs.router)
project_router.include_router(sub_agents.router)
project_router.include_router(relations.router)
project_router.include_router(tools.router)
project_router.include_router(context_configs.router)
project_router.include_router(credentials.router)
project_router.include_router(credentials.stores_router)
project_router.include_router(api_keys.router)

tenant_router.include_router(project_router)
