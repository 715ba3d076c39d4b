from agentgraph_common.base.pagination import Pagination
from agentgraph_common.exceptions.errors import ResourceConflict
from agentgraph_common.infrastructure.database import DatabaseSession
from agentgraph_common.scopes.dependencies import ProjectScopeDep
from agentgraph_tools.domain.schemas import ToolDefinition, ToolResponse, ToolUpdate
from agentgraph_tools.infrastructure.repository import ToolRepository
from fastapi import APIRouter, Query, status

from agentgraph_api.api.schemas import DataResponse, ListResponse, changed_values

router = APIRouter(prefix="/tools", tags=["tools"])


@router.get("", response_model=ListResponse[ToolResponse])
async def list_tools(
    session: DatabaseSession,
    scope: ProjectScopeDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    tool_status: str | None = Query(default=None, alias="status"),
):
    """List MCP tools, optionally only those with the given health status."""
    filters = {"status": tool_status} if tool_status else {}
    result = await ToolRepository(session, scope).list_paginated(
        Pagination.from_params(page, limit), **filters
    )
    return ListResponse.from_result(result, ToolResponse.from_domain)


@router.get("/{tool_id}", response_model=DataResponse[ToolResponse])
async def get_tool(tool_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    tool = await ToolRepository(session, scope).get_by_id_or_raise(tool_id)
    return DataResponse(data=ToolResponse.from_domain(tool))


@router.post("", response_model=DataResponse[ToolResponse], status_code=status.HTTP_201_CREATED)
async def create_tool(data: ToolDefinition, session: DatabaseSession, scope: ProjectScopeDep):
    repository = ToolRepository(session, scope)
    if await repository.exists(data.id):
        raise ResourceConflict(
            f"Tool '{data.id}' already exists",
            resource_type="tool",
            resource_id=data.id,
            scope=scope,
        )
    tool = await repository.create(
        id=data.id,
        name=data.name,
        description=data.description,
        config=data.config.to_json_dict(),
        credential_reference_id=data.credential_reference_id,
        headers=data.headers,
        image_url=data.image_url,
        capabilities=data.capabilities,
    )
    return DataResponse(data=ToolResponse.from_domain(tool))


@router.patch("/{tool_id}", response_model=DataResponse[ToolResponse])
async def update_tool(
    tool_id: str, data: ToolUpdate, session: DatabaseSession, scope: ProjectScopeDep
):
    tool = await ToolRepository(session, scope).update_or_raise(tool_id, **changed_values(data))
    return DataResponse(data=ToolResponse.from_domain(tool))


@router.delete("/{tool_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tool(tool_id: str, session: DatabaseSession, scope: ProjectScopeDep):
    await ToolRepository(session, scope).delete_or_raise(tool_id)
