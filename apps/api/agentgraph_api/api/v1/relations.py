from agentgraph_common.base.schemas import model_from_row
from agentgraph_common.exceptions.errors import RelationTargetError
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import GraphScopeDep
from agentgraph_graphs.domain.schemas import (
    InternalTarget,
    RelationType,
    SubAgentRelationCreate,
)
from agentgraph_graphs.infrastructure.repository import (
    SubAgentRelationRepository,
    SubAgentRepository,
)
from fastapi import APIRouter, Query, status

from agentgraph_api.api.schemas import DataResponse, SubAgentRelationResponse

router = APIRouter(prefix="/graphs/{graph_id}/sub-agent-relations", tags=["sub-agent-relations"])


def _to_response(relation) -> SubAgentRelationResponse:
    return model_from_row(SubAgentRelationResponse, relation)


@router.get("", response_model=DataResponse[list[SubAgentRelationResponse]])
async def list_relations(
    session: DatabaseSession,
    scope: GraphScopeDep,
    source_sub_agent_id: str | None = Query(default=None, alias="sourceSubAgentId"),
    relation_type: RelationType | None = Query(default=None, alias="relationType"),
):
    repository = SubAgentRelationRepository(session, scope)
    if source_sub_agent_id:
        relations = await repository.list_by_source(source_sub_agent_id, relation_type)
    elif relation_type:
        relations = await repository.list_all(relation_type=relation_type)
    else:
        relations = await repository.list_all()
    return DataResponse(data=[_to_response(relation) for relation in relations])


@router.get("/{relation_id}", response_model=DataResponse[SubAgentRelationResponse])
async def get_relation(relation_id: str, session: DatabaseSession, scope: GraphScopeDep):
    relation = await SubAgentRelationRepository(session, scope).get_by_id_or_raise(relation_id)
    return DataResponse(data=_to_response(relation))


@router.post(
    "", response_model=DataResponse[SubAgentRelationResponse], status_code=status.HTTP_201_CREATED
)
async def create_relation(
    data: SubAgentRelationCreate, session: DatabaseSession, scope: GraphScopeDep
):
    """Create a transfer or delegate edge to exactly one internal or external target."""
    repository = SubAgentRelationRepository(session, scope)
    await SubAgentRepository(session, scope).get_by_id_or_raise(data.source_sub_agent_id)

    target = data.target
    if isinstance(target, InternalTarget):
        if not await repository.validate_internal_target(target.sub_agent_id):
            raise RelationTargetError(f"Target sub-agent '{target.sub_agent_id}' does not exist")
    elif not await repository.validate_external_target(target.external_agent_id):
        raise RelationTargetError(f"External agent '{target.external_agent_id}' does not exist")

    relation = await repository.create_for_target(
        data.source_sub_agent_id, target, data.relation_type, id=data.id
    )
    return DataResponse(data=_to_response(relation))


@router.delete("/{relation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relation(relation_id: str, session: DatabaseSession, scope: GraphScopeDep):
    await SubAgentRelationRepository(session, scope).delete_or_raise(relation_id)
