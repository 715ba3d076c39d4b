from agentgraph_common.base.schemas import model_from_row
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import ProjectScopeDep
from agentgraph_graphs.domain.schemas import ApiKeyCreate, ApiKeyResponse, ApiKeyUpdate
from agentgraph_graphs.infrastructure.repository import ApiKeyRepository
from fastapi import APIRouter, Query, status

from agentgraph_api.api.deps import ApiKeyServiceDep
from agentgraph_api.api.schemas import ApiKeyCreatedResponse, DataResponse, changed_values

router = APIRouter(prefix="/api-keys", tags=["api-keys"])


def _to_response(record) -> ApiKeyResponse:
    return model_from_row(ApiKeyResponse, record)


@router.get("", response_model=DataResponse[list[ApiKeyResponse]])
async def list_api_keys(
    session: DatabaseSession,
    scope: ProjectScopeDep,
    graph_id: str | None = Query(default=None, alias="graphId"),
):
    repository = ApiKeyRepository(session, scope)
    records = await repository.list_for_graph(graph_id) if graph_id else await repository.list_all()
    return DataResponse(data=[_to_response(record) for record in records])


@router.post(
    "", response_model=DataResponse[ApiKeyCreatedResponse], status_code=status.HTTP_201_CREATED
)
async def create_api_key(data: ApiKeyCreate, service: ApiKeyServiceDep):
    """Create a key for a graph. The plaintext key is only returned here."""
    record, key = await service.generate_and_create(data.graph_id, data.name, data.expires_at)
    return DataResponse(data=ApiKeyCreatedResponse(api_key=_to_response(record), key=key))


@router.get("/{api_key_id}", response_model=DataResponse[ApiKeyResponse])
async def get_api_key(api_key_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    record = await ApiKeyRepository(session, scope).get_by_id_or_raise(api_key_id)
    return DataResponse(data=_to_response(record))


@router.patch("/{api_key_id}", response_model=DataResponse[ApiKeyResponse])
async def update_api_key(
    api_key_id: str, data: ApiKeyUpdate, session: DatabaseSession, scope: ProjectScopeDep
):
    record = await ApiKeyRepository(session, scope).update_or_raise(
        api_key_id, **changed_values(data)
    )
    return DataResponse(data=_to_response(record))


@router.delete("/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(api_key_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    await ApiKeyRepository(session, scope).delete_or_raise(api_key_id)
