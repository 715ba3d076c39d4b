from typing import Any

from agentgraph_common.base.pagination import Pagination
from agentgraph_common.base.schemas import model_from_row
from agentgraph_common.exceptions.errors import ResourceNotFound
from agentgraph_graphs.domain.schemas import FullGraphDefinition
from fastapi import APIRouter, Body, Query, status

from agentgraph_api.api.deps import GraphFullServiceDep
from agentgraph_api.api.schemas import DataResponse, GraphResponse, ListResponse

router = APIRouter(tags=["graphs"])


@router.get("/graphs", response_model=ListResponse[GraphResponse])
async def list_graphs(
    service: GraphFullServiceDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
):
    result = await service.graphs.list_paginated(Pagination.from_params(page, limit))
    return ListResponse.from_result(result, lambda graph: model_from_row(GraphResponse, graph))


@router.post(
    "/graph",
    response_model=DataResponse[FullGraphDefinition],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_full_graph(service: GraphFullServiceDep, data: dict[str, Any] = Body(...)):
    """Create a graph together with every sub-agent, relation and resource it declares.

    The body is validated by the service so that schema errors come back as
    ``GRAPH_VALIDATION_FAILED`` like structural ones.
    """
    graph = await service.create_full_graph(data)
    return DataResponse(data=graph)


@router.get(
    "/graph/{graph_id}",
    response_model=DataResponse[FullGraphDefinition],
    response_model_exclude_none=True,
)
async def get_full_graph(graph_id: str, service: GraphFullServiceDep):
    graph = await service.get_full_graph(graph_id)
    if graph is None:
        raise ResourceNotFound("agent_graph", graph_id, service.scopes)
    return DataResponse(data=graph)


@router.put(
    "/graph/{graph_id}",
    response_model=DataResponse[FullGraphDefinition],
    response_model_exclude_none=True,
)
async def upsert_full_graph(
    graph_id: str, service: GraphFullServiceDep, data: dict[str, Any] = Body(...)
):
    """Create or update a graph; the body id must match the path."""
    graph = await service.update_full_graph(graph_id, data)
    return DataResponse(data=graph)


@router.delete("/graph/{graph_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_full_graph(graph_id: str, service: GraphFullServiceDep):
    if not await service.delete_full_graph(graph_id):
        raise ResourceNotFound("agent_graph", graph_id, service.scopes)
