from agentgraph_common.base.pagination import Pagination
from agentgraph_common.base.schemas import model_from_row
from agentgraph_common.exceptions.errors import ResourceConflict
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import ProjectScopeDep
from agentgraph_context.domain.schemas import ContextConfigDefinition, ContextConfigUpdate
from agentgraph_context.infrastructure.repository import ContextConfigRepository
from fastapi import APIRouter, Query, status

from agentgraph_api.api.schemas import (
    ContextConfigResponse,
    DataResponse,
    ListResponse,
    changed_values,
)

router = APIRouter(prefix="/context-configs", tags=["context-configs"])


def _to_response(config) -> ContextConfigResponse:
    return model_from_row(ContextConfigResponse, config)


@router.get("", response_model=ListResponse[ContextConfigResponse])
async def list_context_configs(
    session: DatabaseSession,
    scope: ProjectScopeDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
):
    result = await ContextConfigRepository(session, scope).list_paginated(
        Pagination.from_params(page, limit)
    )
    return ListResponse.from_result(result, _to_response)


@router.get("/{config_id}", response_model=DataResponse[ContextConfigResponse])
async def get_context_config(config_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    config = await ContextConfigRepository(session, scope).get_by_id_or_raise(config_id)
    return DataResponse(data=_to_response(config))


@router.post(
    "", response_model=DataResponse[ContextConfigResponse], status_code=status.HTTP_201_CREATED
)
async def create_context_config(
    data: ContextConfigDefinition, session: DatabaseSession, scope: ProjectScopeDep
):
    repository = ContextConfigRepository(session, scope)
    if await repository.exists(data.id):
        raise ResourceConflict(
            f"Context config '{data.id}' already exists",
            resource_type="context_config",
            resource_id=data.id,
            scope=scope,
        )
    config = await repository.create(**data.model_dump())
    return DataResponse(data=_to_response(config))


@router.patch("/{config_id}", response_model=DataResponse[ContextConfigResponse])
async def update_context_config(
    config_id: str, data: ContextConfigUpdate, session: DatabaseSession, scope: ProjectScopeDep
):
    config = await ContextConfigRepository(session, scope).update_or_raise(
        config_id, **changed_values(data)
    )
    return DataResponse(data=_to_response(config))


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_context_config(config_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    await ContextConfigRepository(session, scope).delete_or_raise(config_id)
