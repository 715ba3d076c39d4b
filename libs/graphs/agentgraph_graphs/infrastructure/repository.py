from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import uuid4

from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.exceptions.errors import RelationTargetError
from agentgraph_common.scopes.context import GraphScope, ProjectScope
from agentgraph_tools.domain.models import Tool
from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_graphs.domain.models import (
    AgentGraph,
    ApiKey,
    ExternalAgent,
    SubAgent,
    SubAgentFunctionToolRelation,
    SubAgentRelation,
    SubAgentToolRelation,
)
from agentgraph_graphs.domain.schemas import (
    VALID_RELATION_TYPES,
    ExternalTarget,
    InternalTarget,
    resolve_relation_target,
)


class AgentGraphRepository(ScopedRepository[AgentGraph]):
    resource_type = "agent_graph"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, AgentGraph, scopes)

    async def get_with_default_sub_agent(self, graph_id: str) -> dict[str, Any] | None:
        graph = await self.get_by_id(graph_id)
        if graph is None:
            return None
        default_sub_agent = None
        if graph.default_sub_agent_id:
            sub_agents = SubAgentRepository(self.session, self.scopes.for_graph(graph_id))
            default_sub_agent = await sub_agents.get_by_id(graph.default_sub_agent_id)
        return {"graph": graph, "default_sub_agent": default_sub_agent}

    async def get_graph_sub_agent_infos(self, graph_id: str) -> list[dict[str, Any]]:
        """Id, name and description of each sub-agent of the graph."""
        result = await self.session.execute(
            select(SubAgent.id, SubAgent.name, SubAgent.description)
            .where(
                SubAgent.tenant_id == self.scopes.tenant_id,
                SubAgent.project_id == self.scopes.project_id,
                SubAgent.graph_id == graph_id,
            )
            .order_by(SubAgent.created_at)
        )
        return [
            {"id": id, "name": name, "description": description}
            for id, name, description in result.all()
        ]


class SubAgentRepository(ScopedRepository[SubAgent]):
    resource_type = "sub_agent"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, SubAgent, scopes)

    async def list_missing_step_count(self) -> list[SubAgent]:
        return [agent for agent in await self.list_all() if agent.step_count_is is None]


class ExternalAgentRepository(ScopedRepository[ExternalAgent]):
    resource_type = "external_agent"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, ExternalAgent, scopes)

    async def get_by_url(self, base_url: str) -> ExternalAgent | None:
        return await self.find_one_by(base_url=base_url)

    async def url_exists(self, base_url: str, exclude_id: str | None = None) -> bool:
        matches = await self.list_all(base_url=base_url)
        return any(agent.id != exclude_id for agent in matches)


class SubAgentRelationRepository(ScopedRepository[SubAgentRelation]):
    """Transfer and delegate edges between the agents of one graph."""

    resource_type = "sub_agent_relation"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, SubAgentRelation, scopes)

    @staticmethod
    def _target_columns(target: InternalTarget | ExternalTarget) -> dict[str, str | None]:
        if isinstance(target, InternalTarget):
            return {"target_sub_agent_id": target.sub_agent_id, "external_agent_id": None}
        return {"target_sub_agent_id": None, "external_agent_id": target.external_agent_id}

    @staticmethod
    def _check_relation_type(relation_type: str) -> None:
        if relation_type not in VALID_RELATION_TYPES:
            raise RelationTargetError(
                f"Invalid relation type '{relation_type}'. "
                f"Expected one of: {', '.join(VALID_RELATION_TYPES)}"
            )

    async def create_relation(
        self,
        source_sub_agent_id: str,
        relation_type: str,
        target_sub_agent_id: str | None = None,
        external_agent_id: str | None = None,
        id: str | None = None,
    ) -> SubAgentRelation:
        """Create a relation from raw target columns.

        Raises:
            RelationTargetError: if not exactly one target is given or the
                relation type is unknown
        """
        self._check_relation_type(relation_type)
        target = resolve_relation_target(target_sub_agent_id, external_agent_id)
        return await self.create_for_target(source_sub_agent_id, target, relation_type, id=id)

    async def create_for_target(
        self,
        source_sub_agent_id: str,
        target: InternalTarget | ExternalTarget,
        relation_type: str,
        id: str | None = None,
    ) -> SubAgentRelation:
        self._check_relation_type(relation_type)
        return await self.create(
            id=id or str(uuid4()),
            source_sub_agent_id=source_sub_agent_id,
            relation_type=relation_type,
            **self._target_columns(target),
        )

    async def get_by_params(
        self,
        source_sub_agent_id: str,
        target: InternalTarget | ExternalTarget,
        relation_type: str,
    ) -> SubAgentRelation | None:
        return await self.find_one_by(
            source_sub_agent_id=source_sub_agent_id,
            relation_type=relation_type,
            **self._target_columns(target),
        )

    async def upsert_relation(
        self,
        source_sub_agent_id: str,
        target: InternalTarget | ExternalTarget,
        relation_type: str,
    ) -> SubAgentRelation:
        """Return the matching relation, creating it when absent."""
        existing = await self.get_by_params(source_sub_agent_id, target, relation_type)
        if existing is not None:
            return existing
        return await self.create_for_target(source_sub_agent_id, target, relation_type)

    async def list_by_source(
        self, source_sub_agent_id: str, relation_type: str | None = None
    ) -> list[SubAgentRelation]:
        filters: dict[str, Any] = {"source_sub_agent_id": source_sub_agent_id}
        if relation_type is not None:
            filters["relation_type"] = relation_type
        return await self.list_all(**filters)

    async def list_by_target(self, target_sub_agent_id: str) -> list[SubAgentRelation]:
        return await self.list_all(target_sub_agent_id=target_sub_agent_id)

    async def list_external_relations(
        self, external_agent_id: str | None = None
    ) -> list[SubAgentRelation]:
        if external_agent_id is not None:
            return await self.list_all(external_agent_id=external_agent_id)
        result = await self.session.execute(
            self._scoped_select()
            .where(SubAgentRelation.external_agent_id.is_not(None))
            .order_by(SubAgentRelation.created_at)
        )
        return list(result.scalars().all())

    async def get_related_agents(self, source_sub_agent_id: str) -> dict[str, list[Any]]:
        """Internal and external agents reachable from ``source_sub_agent_id``."""
        relations = await self.list_by_source(source_sub_agent_id)
        internal_ids = [r.target_sub_agent_id for r in relations if r.target_sub_agent_id]
        external_ids = [r.external_agent_id for r in relations if r.external_agent_id]
        sub_agents = SubAgentRepository(self.session, self.scopes)
        external_agents = ExternalAgentRepository(self.session, self.scopes)
        return {
            "internal": await sub_agents.get_by_ids(internal_ids),
            "external": await external_agents.get_by_ids(external_ids),
        }

    async def validate_internal_target(self, target_sub_agent_id: str) -> bool:
        return await SubAgentRepository(self.session, self.scopes).exists(target_sub_agent_id)

    async def validate_external_target(self, external_agent_id: str) -> bool:
        return await ExternalAgentRepository(self.session, self.scopes).exists(external_agent_id)

    async def delete_by_graph(self) -> int:
        return await self.delete_where()


class SubAgentToolRelationRepository(ScopedRepository[SubAgentToolRelation]):
    resource_type = "sub_agent_tool_relation"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, SubAgentToolRelation, scopes)

    async def add_tool_to_agent(
        self,
        sub_agent_id: str,
        tool_id: str,
        selected_tools: list[str] | None = None,
        headers: dict[str, str] | None = None,
        id: str | None = None,
    ) -> SubAgentToolRelation:
        return await self.create(
            id=id or str(uuid4()),
            sub_agent_id=sub_agent_id,
            tool_id=tool_id,
            selected_tools=selected_tools,
            headers=headers,
        )

    async def remove_tool_from_agent(self, sub_agent_id: str, tool_id: str) -> bool:
        return await self.delete_where(sub_agent_id=sub_agent_id, tool_id=tool_id) > 0

    async def upsert_tool_relation(
        self,
        sub_agent_id: str,
        tool_id: str,
        selected_tools: list[str] | None = None,
        headers: dict[str, str] | None = None,
        relation_id: str | None = None,
    ) -> SubAgentToolRelation:
        """Upsert by relation id; without one a new relation is created."""
        if relation_id is None:
            return await self.add_tool_to_agent(sub_agent_id, tool_id, selected_tools, headers)
        return await self.upsert(
            relation_id,
            sub_agent_id=sub_agent_id,
            tool_id=tool_id,
            selected_tools=selected_tools,
            headers=headers,
        )

    async def list_for_agent(self, sub_agent_id: str) -> list[SubAgentToolRelation]:
        return await self.list_all(sub_agent_id=sub_agent_id)

    async def list_for_tool(self, tool_id: str) -> list[SubAgentToolRelation]:
        return await self.list_all(tool_id=tool_id)

    async def delete_by_agent(self, sub_agent_id: str) -> int:
        return await self.delete_where(sub_agent_id=sub_agent_id)

    async def delete_for_agent_except(self, sub_agent_id: str, keep_ids: Iterable[str]) -> int:
        """Delete the agent's tool relations whose ids are not in ``keep_ids``."""
        keep = list(keep_ids)
        query = delete(SubAgentToolRelation).where(
            self._get_scope_filter(), SubAgentToolRelation.sub_agent_id == sub_agent_id
        )
        if keep:
            query = query.where(SubAgentToolRelation.id.not_in(keep))
        result = await self.session.execute(query)
        removed = result.rowcount or 0
        if removed:
            self.audit_logger.log_delete(
                self.resource_type,
                self.scopes,
                resource_id=None,
                sub_agent_id=sub_agent_id,
                count=removed,
            )
        return removed

    async def get_healthy_for_agent(self, sub_agent_id: str) -> list[Tool]:
        """Tools of the agent whose last health check succeeded."""
        query = (
            select(Tool)
            .join(
                SubAgentToolRelation,
                and_(
                    SubAgentToolRelation.tenant_id == Tool.tenant_id,
                    SubAgentToolRelation.project_id == Tool.project_id,
                    SubAgentToolRelation.tool_id == Tool.id,
                ),
            )
            .where(
                self._get_scope_filter(),
                SubAgentToolRelation.sub_agent_id == sub_agent_id,
                Tool.status == "healthy",
            )
        )
        result = await self.session.execute(query)
        return list(result.scalars().unique().all())


class SubAgentFunctionToolRelationRepository(ScopedRepository[SubAgentFunctionToolRelation]):
    resource_type = "sub_agent_function_tool_relation"

    def __init__(self, session: AsyncSession, scopes: GraphScope):
        super().__init__(session, SubAgentFunctionToolRelation, scopes)

    async def add_function_tool_to_agent(
        self, sub_agent_id: str, function_tool_id: str, id: str | None = None
    ) -> SubAgentFunctionToolRelation:
        return await self.create(
            id=id or str(uuid4()), sub_agent_id=sub_agent_id, function_tool_id=function_tool_id
        )

    async def upsert_function_tool_relation(
        self, sub_agent_id: str, function_tool_id: str, relation_id: str | None = None
    ) -> SubAgentFunctionToolRelation:
        if relation_id is None:
            return await self.add_function_tool_to_agent(sub_agent_id, function_tool_id)
        return await self.upsert(
            relation_id, sub_agent_id=sub_agent_id, function_tool_id=function_tool_id
        )

    async def list_for_agent(self, sub_agent_id: str) -> list[SubAgentFunctionToolRelation]:
        return await self.list_all(sub_agent_id=sub_agent_id)

    async def delete_by_agent(self, sub_agent_id: str) -> int:
        return await self.delete_where(sub_agent_id=sub_agent_id)


class ApiKeyRepository(ScopedRepository[ApiKey]):
    resource_type = "api_key"
    immutable_fields = ("id", "created_at", "public_id", "key_hash", "key_prefix", "graph_id")

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, ApiKey, scopes)

    async def get_by_public_id(self, public_id: str) -> ApiKey | None:
        return await self.find_one_by(public_id=public_id)

    async def list_for_graph(self, graph_id: str) -> list[ApiKey]:
        return await self.list_all(graph_id=graph_id)

    async def update_last_used(self, id: str, when: datetime | None = None) -> ApiKey | None:
        record = await self.get_by_id(id)
        if record is None:
            return None
        record.last_used_at = when or datetime.now()
        await self.session.flush()
        return record


async def find_api_key_by_public_id(session: AsyncSession, public_id: str) -> ApiKey | None:
    """Look up a key across all tenants; public ids are globally unique."""
    result = await session.execute(select(ApiKey).where(ApiKey.public_id == public_id))
    return result.scalar_one_or_none()
