from agentgraph_common.base.pagination import Pagination
from agentgraph_common.base.schemas import dump_optional, model_from_row
from agentgraph_common.exceptions.errors import ResourceConflict
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import GraphScopeDep
from agentgraph_graphs.domain.schemas import SubAgentCreate, SubAgentUpdate
from agentgraph_graphs.infrastructure.repository import AgentGraphRepository, SubAgentRepository
from fastapi import APIRouter, Query, status

from agentgraph_api.api.schemas import (
    DataResponse,
    ListResponse,
    SubAgentResponse,
    changed_values,
)

router = APIRouter(prefix="/graphs/{graph_id}/sub-agents", tags=["sub-agents"])


def _to_response(agent) -> SubAgentResponse:
    return model_from_row(SubAgentResponse, agent)


@router.get("", response_model=ListResponse[SubAgentResponse])
async def list_sub_agents(
    session: DatabaseSession,
    scope: GraphScopeDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
):
    result = await SubAgentRepository(session, scope).list_paginated(
        Pagination.from_params(page, limit)
    )
    return ListResponse.from_result(result, _to_response)


@router.get("/{sub_agent_id}", response_model=DataResponse[SubAgentResponse])
async def get_sub_agent(sub_agent_id: str, session: DatabaseSession, scope: GraphScopeDep):
    agent = await SubAgentRepository(session, scope).get_by_id_or_raise(sub_agent_id)
    return DataResponse(data=_to_response(agent))


@router.post("", response_model=DataResponse[SubAgentResponse], status_code=status.HTTP_201_CREATED)
async def create_sub_agent(data: SubAgentCreate, session: DatabaseSession, scope: GraphScopeDep):
    await AgentGraphRepository(session, scope.project).get_by_id_or_raise(scope.graph_id)
    repository = SubAgentRepository(session, scope)
    if await repository.exists(data.id):
        raise ResourceConflict(
            f"Sub-agent '{data.id}' already exists",
            resource_type="sub_agent",
            resource_id=data.id,
            scope=scope,
        )
    agent = await repository.create(
        id=data.id,
        name=data.name,
        description=data.description,
        prompt=data.prompt,
        conversation_history_config=dump_optional(data.conversation_history_config),
        models=dump_optional(data.models),
        stop_when=dump_optional(data.stop_when),
    )
    return DataResponse(data=_to_response(agent))


@router.patch("/{sub_agent_id}", response_model=DataResponse[SubAgentResponse])
async def update_sub_agent(
    sub_agent_id: str, data: SubAgentUpdate, session: DatabaseSession, scope: GraphScopeDep
):
    agent = await SubAgentRepository(session, scope).update_or_raise(
        sub_agent_id, **changed_values(data)
    )
    return DataResponse(data=_to_response(agent))


@router.delete("/{sub_agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sub_agent(sub_agent_id: str, session: DatabaseSession, scope: GraphScopeDep):
    """Delete a sub-agent; its relations go with it."""
    await SubAgentRepository(session, scope).delete_or_raise(sub_agent_id)
