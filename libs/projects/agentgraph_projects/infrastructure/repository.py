from typing import Any

from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.scopes.context import TenantScope
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_projects.domain.models import Project


class ProjectRepository(ScopedRepository[Project]):
    """Projects of a single tenant."""

    resource_type = "project"

    def __init__(self, session: AsyncSession, scopes: TenantScope):
        super().__init__(session, Project, TenantScope(tenant_id=scopes.tenant_id))

    async def get_stop_when(self, project_id: str) -> dict[str, Any] | None:
        project = await self.get_by_id(project_id)
        return project.stop_when if project else None

    async def get_models(self, project_id: str) -> dict[str, Any] | None:
        project = await self.get_by_id(project_id)
        return project.models if project else None
