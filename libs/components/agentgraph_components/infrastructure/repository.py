from typing import Any, TypeVar
from uuid import uuid4

from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_components.domain.models import (
    ArtifactComponent,
    DataComponent,
    SubAgentArtifactComponent,
    SubAgentDataComponent,
)

J = TypeVar("J")


class DataComponentRepository(ScopedRepository[DataComponent]):
    resource_type = "data_component"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, DataComponent, scopes)


class ArtifactComponentRepository(ScopedRepository[ArtifactComponent]):
    resource_type = "artifact_component"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, ArtifactComponent, scopes)


class SubAgentComponentRepository(ScopedRepository[J]):
    """Associations between sub-agents and one kind of component.

    Built with a ``GraphScope`` it manages one graph; built with a
    ``ProjectScope`` it spans every graph of the project.
    """

    component_model: type
    component_field: str

    @property
    def _component_column(self):
        return getattr(self.model_class, self.component_field)

    async def list_for_agent(self, sub_agent_id: str) -> list[Any]:
        """Components associated with ``sub_agent_id``."""
        component = self.component_model
        query = (
            select(component)
            .join(
                self.model_class,
                and_(
                    self.model_class.tenant_id == component.tenant_id,
                    self.model_class.project_id == component.project_id,
                    self._component_column == component.id,
                ),
            )
            .where(self._get_scope_filter(), self.model_class.sub_agent_id == sub_agent_id)
            .order_by(self.model_class.created_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().unique().all())

    async def list_relations_for_agent(self, sub_agent_id: str) -> list[J]:
        return await self.list_all(sub_agent_id=sub_agent_id)

    async def associate(self, sub_agent_id: str, component_id: str, id: str | None = None) -> J:
        return await self.create(
            id=id or str(uuid4()), sub_agent_id=sub_agent_id, **{self.component_field: component_id}
        )

    async def remove(self, sub_agent_id: str, component_id: str) -> bool:
        removed = await self.delete_where(
            sub_agent_id=sub_agent_id, **{self.component_field: component_id}
        )
        return removed > 0

    async def is_associated(self, sub_agent_id: str, component_id: str) -> bool:
        count = await self.count(sub_agent_id=sub_agent_id, **{self.component_field: component_id})
        return count > 0

    async def upsert_relation(self, sub_agent_id: str, component_id: str) -> J:
        """Return the existing association or create it."""
        existing = await self.find_one_by(
            sub_agent_id=sub_agent_id, **{self.component_field: component_id}
        )
        if existing is not None:
            return existing
        return await self.associate(sub_agent_id, component_id)

    async def delete_by_agent(self, sub_agent_id: str) -> int:
        return await self.delete_where(sub_agent_id=sub_agent_id)

    async def list_agents_using(self, component_id: str) -> list[dict[str, Any]]:
        """Sub-agents using a component, newest association first."""
        query = (
            select(
                self.model_class.graph_id,
                self.model_class.sub_agent_id,
                self.model_class.created_at,
            )
            .where(self._get_scope_filter(), self._component_column == component_id)
            .order_by(self.model_class.created_at.desc())
        )
        result = await self.session.execute(query)
        return [
            {"graph_id": graph_id, "sub_agent_id": sub_agent_id, "created_at": created_at}
            for graph_id, sub_agent_id, created_at in result.all()
        ]

    async def count_for_agent(self, sub_agent_id: str) -> int:
        return await self.count(sub_agent_id=sub_agent_id)


class SubAgentDataComponentRepository(SubAgentComponentRepository[SubAgentDataComponent]):
    resource_type = "sub_agent_data_component"
    component_model = DataComponent
    component_field = "data_component_id"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, SubAgentDataComponent, scopes)


class SubAgentArtifactComponentRepository(
    SubAgentComponentRepository[SubAgentArtifactComponent]
):
    resource_type = "sub_agent_artifact_component"
    component_model = ArtifactComponent
    component_field = "artifact_component_id"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, SubAgentArtifactComponent, scopes)

    async def graph_has_artifact_components(self, graph_id: str) -> bool:
        query = (
            select(func.count())
            .select_from(SubAgentArtifactComponent)
            .where(self._get_scope_filter(), SubAgentArtifactComponent.graph_id == graph_id)
        )
        result = await self.session.execute(query)
        return (result.scalar() or 0) > 0
