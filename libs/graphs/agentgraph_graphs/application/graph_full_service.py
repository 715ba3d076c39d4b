"""Create, update, read and delete a graph together with everything it references.

Writes run inside one SAVEPOINT so a failed entity upsert rolls back the
whole cascade. Each relation row gets its own nested SAVEPOINT; a failed
relation is logged and skipped. One session is never used concurrently, so
the fan-out is sequential.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from agentgraph_common.base.schemas import dump_optional, model_from_row
from agentgraph_common.exceptions.errors import (
    AgentGraphError,
    GraphValidationError,
    ResourceNotFound,
)
from agentgraph_common.logging.context_logger import get_context_logger
from agentgraph_common.scopes.context import GraphScope, ProjectScope
from agentgraph_components.domain.schemas import (
    ArtifactComponentDefinition,
    DataComponentDefinition,
)
from agentgraph_components.infrastructure.repository import (
    ArtifactComponentRepository,
    DataComponentRepository,
    SubAgentArtifactComponentRepository,
    SubAgentDataComponentRepository,
)
from agentgraph_context.domain.schemas import ContextConfigDefinition
from agentgraph_context.infrastructure.repository import ContextConfigRepository
from agentgraph_credentials.infrastructure.repository import CredentialReferenceRepository
from agentgraph_projects.domain.models import Project
from agentgraph_projects.infrastructure.repository import ProjectRepository
from agentgraph_tools.domain.schemas import (
    FunctionDefinition,
    FunctionToolDefinition,
    ToolDefinition,
)
from agentgraph_tools.infrastructure.repository import (
    FunctionRepository,
    FunctionToolRepository,
    ToolRepository,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_graphs.domain.schemas import (
    CanUseItem,
    ExternalAgentDefinition,
    ExternalTarget,
    FullGraphDefinition,
    InternalSubAgentDefinition,
    InternalTarget,
)
from agentgraph_graphs.infrastructure.repository import (
    AgentGraphRepository,
    ExternalAgentRepository,
    SubAgentFunctionToolRelationRepository,
    SubAgentRelationRepository,
    SubAgentRepository,
    SubAgentToolRelationRepository,
)

from .inheritance import apply_execution_limits_inheritance, cascade_models, inherit_step_count
from .validation import validate_and_type_graph_data, validate_graph_structure


@dataclass
class _GraphRepositories:
    sub_agents: SubAgentRepository
    external_agents: ExternalAgentRepository
    function_tools: FunctionToolRepository
    relations: SubAgentRelationRepository
    tool_relations: SubAgentToolRelationRepository
    function_tool_relations: SubAgentFunctionToolRelationRepository
    data_component_relations: SubAgentDataComponentRepository
    artifact_component_relations: SubAgentArtifactComponentRepository

    @classmethod
    def for_scope(cls, session: AsyncSession, scope: GraphScope) -> "_GraphRepositories":
        return cls(
            sub_agents=SubAgentRepository(session, scope),
            external_agents=ExternalAgentRepository(session, scope),
            function_tools=FunctionToolRepository(session, scope),
            relations=SubAgentRelationRepository(session, scope),
            tool_relations=SubAgentToolRelationRepository(session, scope),
            function_tool_relations=SubAgentFunctionToolRelationRepository(session, scope),
            data_component_relations=SubAgentDataComponentRepository(session, scope),
            artifact_component_relations=SubAgentArtifactComponentRepository(session, scope),
        )


class GraphFullService:
    """Full-graph cascade for one project."""

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        self.session = session
        self.scopes = ProjectScope(tenant_id=scopes.tenant_id, project_id=scopes.project_id)
        self.logger = get_context_logger(__name__, self.scopes)

        self.projects = ProjectRepository(session, self.scopes)
        self.graphs = AgentGraphRepository(session, self.scopes)
        self.credential_references = CredentialReferenceRepository(session, self.scopes)
        self.tools = ToolRepository(session, self.scopes)
        self.functions = FunctionRepository(session, self.scopes)
        self.data_components = DataComponentRepository(session, self.scopes)
        self.artifact_components = ArtifactComponentRepository(session, self.scopes)
        self.context_configs = ContextConfigRepository(session, self.scopes)

    def _graph_repositories(self, graph_id: str) -> _GraphRepositories:
        return _GraphRepositories.for_scope(self.session, self.scopes.for_graph(graph_id))

    async def _get_project_or_raise(self) -> Project:
        project = await self.projects.get_by_id(self.scopes.project_id)
        if project is None:
            raise ResourceNotFound("project", self.scopes.project_id, self.scopes)
        return project

    async def _validate(self, definition: FullGraphDefinition) -> None:
        repos = self._graph_repositories(definition.id)
        tool_ids = [tool.id for tool in await self.tools.list_all()]
        tool_ids += [ft.id for ft in await repos.function_tools.list_all()]
        validate_graph_structure(
            definition,
            existing_tool_ids=tool_ids,
            existing_data_component_ids=[c.id for c in await self.data_components.list_all()],
            existing_artifact_component_ids=[
                c.id for c in await self.artifact_components.list_all()
            ],
            existing_function_ids=[f.id for f in await self.functions.list_all()],
        )

    async def _run_relation(
        self, description: str, context: dict[str, Any], operation: Callable[[], Awaitable[Any]]
    ) -> bool:
        """Run one relation write in its own SAVEPOINT, logging and skipping failures."""
        try:
            async with self.session.begin_nested():
                await operation()
            return True
        except (SQLAlchemyError, AgentGraphError) as e:
            self.logger.error(f"Failed to create {description}", extra={**context, "error": str(e)})
            return False

    # -- create / update -------------------------------------------------------

    async def create_full_graph(
        self, definition: FullGraphDefinition | dict[str, Any]
    ) -> FullGraphDefinition:
        """Create (or overwrite) a graph and everything it declares.

        Raises:
            GraphValidationError: if the definition is malformed or inconsistent
            ResourceNotFound: if the project does not exist
        """
        typed = validate_and_type_graph_data(definition)
        project = await self._get_project_or_raise()
        await self._validate(typed)
        typed = apply_execution_limits_inheritance(typed, project.stop_when)

        self.logger.info("Creating full graph", extra={"graph_id": typed.id})
        async with self.session.begin_nested():
            await self._write_graph(typed, old_graph_models=None, is_update=False)
            await self.materialize_execution_limits(typed.id)
        self.logger.info("Full graph created", extra={"graph_id": typed.id})

        return await self._get_full_graph_or_raise(typed.id)

    async def update_full_graph(
        self, graph_id: str, definition: FullGraphDefinition | dict[str, Any]
    ) -> FullGraphDefinition:
        """Bring a stored graph in line with ``definition``; creates it when missing.

        Sub-agents and external agents missing from the definition are
        deleted. Tool relations are kept by ``canUse[].agentToolRelationId``;
        the other junction rows are cleared and recreated.
        """
        typed = validate_and_type_graph_data(definition)
        if typed.id != graph_id:
            raise GraphValidationError(
                [f"Graph ID mismatch: expected {graph_id}, got {typed.id}"], graph_id=graph_id
            )

        project = await self._get_project_or_raise()
        existing = await self.graphs.get_by_id(graph_id)
        if existing is None:
            self.logger.info("Graph does not exist, creating it", extra={"graph_id": graph_id})
            return await self.create_full_graph(typed)

        await self._validate(typed)
        typed = apply_execution_limits_inheritance(typed, project.stop_when)

        self.logger.info("Updating full graph", extra={"graph_id": graph_id})
        async with self.session.begin_nested():
            await self._write_graph(typed, old_graph_models=existing.models, is_update=True)
            await self.materialize_execution_limits(graph_id)
        self.logger.info("Full graph updated", extra={"graph_id": graph_id})

        return await self._get_full_graph_or_raise(graph_id)

    async def _write_graph(
        self,
        typed: FullGraphDefinition,
        old_graph_models: dict[str, Any] | None,
        is_update: bool,
    ) -> None:
        graph_id = typed.id
        repos = self._graph_repositories(graph_id)

        await self._write_project_resources(typed)

        await self.graphs.upsert(
            graph_id,
            name=typed.name,
            description=typed.description,
            default_sub_agent_id=typed.default_sub_agent_id,
            context_config_id=None,
            models=dump_optional(typed.models),
            status_updates=dump_optional(typed.status_updates),
            graph_prompt=typed.graph_prompt,
            stop_when=dump_optional(typed.stop_when),
        )

        if typed.context_config is not None:
            context_config = typed.context_config
            await self.context_configs.upsert(
                context_config.id,
                name=context_config.name,
                description=context_config.description,
                headers_schema=context_config.headers_schema,
                context_variables=context_config.context_variables,
            )
            await self.graphs.update(graph_id, context_config_id=context_config.id)

        for function_tool_id, function_tool in (typed.function_tools or {}).items():
            await repos.function_tools.upsert(
                function_tool_id,
                name=function_tool.name,
                description=function_tool.description,
                function_id=function_tool.function_id,
            )

        await self._write_sub_agents(typed, repos, old_graph_models, is_update)
        await self._write_tool_relations(typed, repos, is_update)
        await self._write_component_relations(typed, repos, is_update)
        await self._write_agent_relations(typed, repos, is_update)

    async def _write_project_resources(self, typed: FullGraphDefinition) -> None:
        for reference_id, reference in (typed.credential_references or {}).items():
            await self.credential_references.upsert(
                reference_id,
                type=reference.type,
                credential_store_id=reference.credential_store_id,
                retrieval_params=reference.retrieval_params,
            )
        for tool_id, tool in (typed.tools or {}).items():
            await self.tools.upsert(
                tool_id,
                name=tool.name,
                description=tool.description,
                config=tool.config.to_json_dict(),
                credential_reference_id=tool.credential_reference_id,
                headers=tool.headers,
                image_url=tool.image_url,
                capabilities=tool.capabilities,
            )
        for function_id, function in (typed.functions or {}).items():
            await self.functions.upsert(
                function_id,
                input_schema=function.input_schema,
                execute_code=function.execute_code,
                dependencies=function.dependencies,
            )
        for component_id, component in (typed.data_components or {}).items():
            await self.data_components.upsert(
                component_id,
                name=component.name,
                description=component.description,
                props=component.props,
            )
        for component_id, component in (typed.artifact_components or {}).items():
            await self.artifact_components.upsert(
                component_id,
                name=component.name,
                description=component.description,
                summary_props=component.summary_props,
                full_props=component.full_props,
            )

    async def _write_sub_agents(
        self,
        typed: FullGraphDefinition,
        repos: _GraphRepositories,
        old_graph_models: dict[str, Any] | None,
        is_update: bool,
    ) -> None:
        new_graph_models = dump_optional(typed.models)
        internal = typed.internal_sub_agents
        external = typed.external_agents

        for sub_agent_id, agent in internal.items():
            models = dump_optional(agent.models)
            if is_update:
                stored = await repos.sub_agents.get_by_id(sub_agent_id)
                if stored is not None:
                    models = cascade_models(
                        models, stored.models, old_graph_models, new_graph_models
                    )
            await repos.sub_agents.upsert(
                sub_agent_id,
                name=agent.name,
                description=agent.description,
                prompt=agent.prompt,
                conversation_history_config=dump_optional(agent.conversation_history_config),
                models=models,
                stop_when=dump_optional(agent.stop_when),
            )

        for external_id, agent in external.items():
            await repos.external_agents.upsert(
                external_id,
                name=agent.name,
                description=agent.description,
                base_url=agent.base_url,
                credential_reference_id=agent.credential_reference_id,
                headers=agent.headers,
            )

        if is_update:
            for stored in await repos.sub_agents.list_all():
                if stored.id not in internal:
                    await repos.sub_agents.delete(stored.id)
                    self.logger.info(
                        "Deleted orphaned sub-agent", extra={"sub_agent_id": stored.id}
                    )
            for stored in await repos.external_agents.list_all():
                if stored.id not in external:
                    await repos.external_agents.delete(stored.id)
                    self.logger.info(
                        "Deleted orphaned external agent", extra={"sub_agent_id": stored.id}
                    )

    async def _write_tool_relations(
        self, typed: FullGraphDefinition, repos: _GraphRepositories, is_update: bool
    ) -> None:
        function_tool_ids = set(typed.function_tools or {})
        function_tool_ids |= {ft.id for ft in await repos.function_tools.list_all()}

        for sub_agent_id, agent in typed.internal_sub_agents.items():
            if is_update:
                keep = [
                    item.agent_tool_relation_id
                    for item in agent.can_use
                    if item.agent_tool_relation_id
                ]
                await repos.tool_relations.delete_for_agent_except(sub_agent_id, keep)
                await repos.function_tool_relations.delete_by_agent(sub_agent_id)

            for item in agent.can_use:
                context = {"sub_agent_id": sub_agent_id, "tool_id": item.tool_id}
                if item.tool_id in function_tool_ids:
                    await self._run_relation(
                        "sub-agent function tool relation",
                        context,
                        partial(
                            repos.function_tool_relations.upsert_function_tool_relation,
                            sub_agent_id,
                            item.tool_id,
                            relation_id=item.agent_tool_relation_id,
                        ),
                    )
                else:
                    await self._run_relation(
                        "sub-agent tool relation",
                        context,
                        partial(
                            repos.tool_relations.upsert_tool_relation,
                            sub_agent_id,
                            item.tool_id,
                            selected_tools=item.tool_selection,
                            headers=item.headers,
                            relation_id=item.agent_tool_relation_id,
                        ),
                    )

    async def _write_component_relations(
        self, typed: FullGraphDefinition, repos: _GraphRepositories, is_update: bool
    ) -> None:
        sections = (
            ("data component", repos.data_component_relations, "data_components"),
            ("artifact component", repos.artifact_component_relations, "artifact_components"),
        )
        for label, repository, field in sections:
            for sub_agent_id, agent in typed.internal_sub_agents.items():
                if is_update:
                    await repository.delete_by_agent(sub_agent_id)
                for component_id in getattr(agent, field) or []:
                    await self._run_relation(
                        f"sub-agent {label} relation",
                        {"sub_agent_id": sub_agent_id, "component_id": component_id},
                        partial(repository.upsert_relation, sub_agent_id, component_id),
                    )

    async def _write_agent_relations(
        self, typed: FullGraphDefinition, repos: _GraphRepositories, is_update: bool
    ) -> None:
        if is_update:
            await repos.relations.delete_by_graph()

        external_ids = set(typed.external_agents)
        for sub_agent_id, agent in typed.internal_sub_agents.items():
            for relation_type, targets in (
                ("transfer", agent.can_transfer_to),
                ("delegate", agent.can_delegate_to),
            ):
                for target_id in targets or []:
                    target = (
                        ExternalTarget(external_agent_id=target_id)
                        if target_id in external_ids
                        else InternalTarget(sub_agent_id=target_id)
                    )
                    await self._run_relation(
                        f"{relation_type} relation",
                        {
                            "sub_agent_id": sub_agent_id,
                            "target_id": target_id,
                            "relation_type": relation_type,
                        },
                        partial(
                            repos.relations.upsert_relation, sub_agent_id, target, relation_type
                        ),
                    )

    # -- inheritance -------------------------------------------------------------

    async def materialize_execution_limits(self, graph_id: str) -> int:
        """Persist the project's ``stepCountIs`` on sub-agents that lack one.

        Returns:
            Number of sub-agents updated
        """
        stop_when = await self.projects.get_stop_when(self.scopes.project_id)
        step_count = (stop_when or {}).get("stepCountIs")
        if step_count is None:
            return 0

        sub_agents = self._graph_repositories(graph_id).sub_agents
        updated = 0
        for agent in await sub_agents.list_missing_step_count():
            await sub_agents.update(
                agent.id, stop_when={**(agent.stop_when or {}), "stepCountIs": step_count}
            )
            updated += 1
        if updated:
            self.logger.info(
                "Materialized inherited stepCountIs",
                extra={"graph_id": graph_id, "count": updated, "step_count_is": step_count},
            )
        return updated

    # -- read ----------------------------------------------------------------------

    async def get_full_graph(self, graph_id: str) -> FullGraphDefinition | None:
        """Rebuild the full definition of a stored graph. Never writes."""
        graph = await self.graphs.get_by_id(graph_id)
        if graph is None:
            return None

        repos = self._graph_repositories(graph_id)
        project_stop_when = await self.projects.get_stop_when(self.scopes.project_id)

        tool_relations = defaultdict(list)
        for relation in await repos.tool_relations.list_all():
            tool_relations[relation.sub_agent_id].append(relation)
        function_tool_relations = defaultdict(list)
        for relation in await repos.function_tool_relations.list_all():
            function_tool_relations[relation.sub_agent_id].append(relation)
        data_components = defaultdict(list)
        for relation in await repos.data_component_relations.list_all():
            data_components[relation.sub_agent_id].append(relation.data_component_id)
        artifact_components = defaultdict(list)
        for relation in await repos.artifact_component_relations.list_all():
            artifact_components[relation.sub_agent_id].append(relation.artifact_component_id)
        targets: dict[tuple[str, str], list[str]] = defaultdict(list)
        for relation in await repos.relations.list_all():
            key = (relation.source_sub_agent_id, relation.relation_type)
            targets[key].append(relation.target_id)

        sub_agents: dict[str, Any] = {}
        for agent in sorted(await repos.sub_agents.list_all(), key=lambda a: (a.created_at, a.id)):
            can_use = [
                CanUseItem(
                    agent_tool_relation_id=relation.id,
                    tool_id=relation.tool_id,
                    tool_selection=relation.selected_tools,
                    headers=relation.headers,
                )
                for relation in tool_relations[agent.id]
            ] + [
                CanUseItem(agent_tool_relation_id=relation.id, tool_id=relation.function_tool_id)
                for relation in function_tool_relations[agent.id]
            ]
            sub_agents[agent.id] = model_from_row(
                InternalSubAgentDefinition,
                agent,
                stop_when=inherit_step_count(agent.stop_when, project_stop_when),
                can_use=can_use,
                data_components=data_components[agent.id],
                artifact_components=artifact_components[agent.id],
                can_transfer_to=targets[(agent.id, "transfer")],
                can_delegate_to=targets[(agent.id, "delegate")],
            )
        for agent in sorted(
            await repos.external_agents.list_all(), key=lambda a: (a.created_at, a.id)
        ):
            sub_agents[agent.id] = model_from_row(ExternalAgentDefinition, agent)

        context_config = None
        if graph.context_config_id:
            stored_config = await self.context_configs.get_by_id(graph.context_config_id)
            if stored_config is None:
                self.logger.warning(
                    "Graph references a missing context config",
                    extra={"graph_id": graph_id, "context_config_id": graph.context_config_id},
                )
            else:
                context_config = model_from_row(ContextConfigDefinition, stored_config)

        return model_from_row(
            FullGraphDefinition,
            graph,
            sub_agents=sub_agents,
            context_config=context_config,
            tools={t.id: model_from_row(ToolDefinition, t) for t in await self.tools.list_all()},
            functions={
                f.id: model_from_row(FunctionDefinition, f) for f in await self.functions.list_all()
            },
            function_tools={
                ft.id: model_from_row(FunctionToolDefinition, ft)
                for ft in await repos.function_tools.list_all()
            },
            data_components={
                c.id: model_from_row(DataComponentDefinition, c)
                for c in await self.data_components.list_all()
            },
            artifact_components={
                c.id: model_from_row(ArtifactComponentDefinition, c)
                for c in await self.artifact_components.list_all()
            },
        )

    async def _get_full_graph_or_raise(self, graph_id: str) -> FullGraphDefinition:
        full_graph = await self.get_full_graph(graph_id)
        if full_graph is None:
            raise ResourceNotFound("agent_graph", graph_id, self.scopes)
        return full_graph

    # -- delete --------------------------------------------------------------------

    async def delete_full_graph(self, graph_id: str) -> bool:
        """Delete a graph with its relations and sub-agents.

        Returns:
            False when the graph does not exist
        """
        if not await self.graphs.exists(graph_id):
            self.logger.info("Graph not found for deletion", extra={"graph_id": graph_id})
            return False

        repos = self._graph_repositories(graph_id)
        async with self.session.begin_nested():
            await repos.relations.delete_by_graph()
            for agent in await repos.sub_agents.list_all():
                await repos.tool_relations.delete_by_agent(agent.id)
            await self.graphs.delete(graph_id)
        self.logger.info("Full graph deleted", extra={"graph_id": graph_id})
        return True
