"""Project lifecycle rules that span the libraries owning project resources."""

import logging
from typing import Any

from agentgraph_common.base.pagination import Pagination, PaginatedResult
from agentgraph_common.base.schemas import dump_optional
from agentgraph_common.exceptions.errors import ResourceConflict, ResourceNotFound
from agentgraph_common.scopes.context import ProjectScope, TenantScope
from agentgraph_components.infrastructure.repository import (
    ArtifactComponentRepository,
    DataComponentRepository,
)
from agentgraph_context.infrastructure.repository import ContextConfigRepository
from agentgraph_credentials.infrastructure.repository import CredentialReferenceRepository
from agentgraph_projects.domain.models import Project
from agentgraph_projects.domain.schemas import ProjectCreate, ProjectUpdate
from agentgraph_projects.infrastructure.repository import ProjectRepository
from agentgraph_tools.infrastructure.repository import ToolRepository
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_graphs.infrastructure.repository import AgentGraphRepository, SubAgentRepository

logger = logging.getLogger(__name__)


def _with_limit(
    stop_when: dict[str, Any] | None, key: str, value: int | None
) -> dict[str, Any] | None:
    result = {k: v for k, v in (stop_when or {}).items() if k != key}
    if value is not None:
        result[key] = value
    return result or None


class ProjectService:
    """Projects of one tenant, with resource-aware delete and limit cascades."""

    def __init__(self, session: AsyncSession, scopes: TenantScope):
        self.session = session
        self.scopes = TenantScope(tenant_id=scopes.tenant_id)
        self.projects = ProjectRepository(session, self.scopes)

    async def list_projects(self, pagination: Pagination | None = None) -> PaginatedResult[Project]:
        return await self.projects.list_paginated(pagination)

    async def get_project(self, project_id: str) -> Project:
        return await self.projects.get_by_id_or_raise(project_id)

    async def create_project(self, data: ProjectCreate) -> Project:
        if await self.projects.exists(data.id):
            raise ResourceConflict(
                f"Project '{data.id}' already exists",
                resource_type="project",
                resource_id=data.id,
                scope=self.scopes,
            )
        return await self.projects.create(
            id=data.id,
            name=data.name,
            description=data.description,
            models=dump_optional(data.models),
            stop_when=dump_optional(data.stop_when),
            sandbox_config=dump_optional(data.sandbox_config),
        )

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        """Apply a partial update.

        When ``stopWhen`` changes, graphs and sub-agents that had no value or
        still carried the old project value follow the new one.
        """
        project = await self.projects.get_by_id_or_raise(project_id)
        old_stop_when = dict(project.stop_when or {})

        values: dict[str, Any] = {}
        for field in data.model_fields_set:
            value = getattr(data, field)
            values[field] = value.to_json_dict() if hasattr(value, "to_json_dict") else value
        updated = await self.projects.update_or_raise(project_id, **values)

        if "stop_when" in values:
            await self._cascade_stop_when(project_id, old_stop_when, values["stop_when"] or {})
        return updated

    async def _cascade_stop_when(
        self, project_id: str, old: dict[str, Any], new: dict[str, Any]
    ) -> None:
        scope = self.scopes.for_project(project_id)
        graphs = AgentGraphRepository(self.session, scope)

        old_transfer, new_transfer = old.get("transferCountIs"), new.get("transferCountIs")
        old_step, new_step = old.get("stepCountIs"), new.get("stepCountIs")

        for graph in await graphs.list_all():
            current = graph.transfer_count_is
            if old_transfer != new_transfer and current in (None, old_transfer):
                await graphs.update(
                    graph.id,
                    stop_when=_with_limit(graph.stop_when, "transferCountIs", new_transfer),
                )
            if old_step == new_step:
                continue
            sub_agents = SubAgentRepository(self.session, scope.for_graph(graph.id))
            for agent in await sub_agents.list_all():
                if agent.step_count_is in (None, old_step):
                    await sub_agents.update(
                        agent.id, stop_when=_with_limit(agent.stop_when, "stepCountIs", new_step)
                    )
        logger.info(
            "Cascaded project stopWhen",
            extra={"project_id": project_id, "old_stop_when": old, "new_stop_when": new},
        )

    async def get_resource_counts(self, project_id: str) -> dict[str, int]:
        scope = ProjectScope(tenant_id=self.scopes.tenant_id, project_id=project_id)
        return {
            "graphs": await AgentGraphRepository(self.session, scope).count(),
            "tools": await ToolRepository(self.session, scope).count(),
            "data_components": await DataComponentRepository(self.session, scope).count(),
            "artifact_components": await ArtifactComponentRepository(self.session, scope).count(),
            "credential_references": await CredentialReferenceRepository(
                self.session, scope
            ).count(),
            "context_configs": await ContextConfigRepository(self.session, scope).count(),
        }

    async def has_resources(self, project_id: str) -> bool:
        counts = await self.get_resource_counts(project_id)
        return any(counts.values())

    async def delete_project(self, project_id: str) -> None:
        """Delete an empty project.

        Raises:
            ResourceNotFound: if the project does not exist
            ResourceConflict: if the project still owns resources
        """
        if not await self.projects.exists(project_id):
            raise ResourceNotFound("project", project_id, self.scopes)
        if await self.has_resources(project_id):
            raise ResourceConflict(
                "Cannot delete project with existing resources",
                resource_type="project",
                resource_id=project_id,
                scope=self.scopes,
            )
        await self.projects.delete(project_id)
