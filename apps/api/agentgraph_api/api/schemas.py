"""Response envelopes and read models of the management API."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, Generic, TypeVar

from agentgraph_common.base.pagination import PaginatedResult
from agentgraph_common.base.schemas import CamelModel
from agentgraph_context.domain.schemas import ContextConfigDefinition
from agentgraph_credentials.domain.schemas import CredentialReferenceDefinition
from agentgraph_graphs.domain.schemas import ApiKeyResponse, SubAgentCreate
from agentgraph_projects.domain.schemas import ProjectCreate

T = TypeVar("T")


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class DataResponse(CamelModel, Generic[T]):
    data: T


class ListResponse(CamelModel, Generic[T]):
    data: list[T]
    pagination: PaginationResponse

    @classmethod
    def from_result(cls, result: PaginatedResult, convert: Callable[[Any], T]) -> "ListResponse[T]":
        return cls(
            data=[convert(row) for row in result.data],
            pagination=PaginationResponse(
                page=result.pagination.page,
                limit=result.pagination.limit,
                total=result.pagination.total,
                pages=result.pagination.pages,
            ),
        )


class Timestamps(CamelModel):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectResponse(ProjectCreate, Timestamps):
    pass


class GraphResponse(Timestamps):
    id: str
    name: str
    description: str | None = None
    default_sub_agent_id: str | None = None
    context_config_id: str | None = None
    models: dict[str, Any] | None = None
    stop_when: dict[str, Any] | None = None
    status_updates: dict[str, Any] | None = None
    graph_prompt: str | None = None


class SubAgentResponse(SubAgentCreate, Timestamps):
    graph_id: str


class SubAgentRelationResponse(Timestamps):
    id: str
    graph_id: str
    source_sub_agent_id: str
    target_sub_agent_id: str | None = None
    external_agent_id: str | None = None
    relation_type: str


class ContextConfigResponse(ContextConfigDefinition, Timestamps):
    pass


class CredentialReferenceResponse(CredentialReferenceDefinition, Timestamps):
    pass


class CredentialStoreStatus(CamelModel):
    id: str
    type: str


class CredentialValue(CamelModel):
    key: str
    value: str


class ApiKeyCreatedResponse(CamelModel):
    api_key: ApiKeyResponse
    key: str


def changed_values(data: CamelModel) -> dict[str, Any]:
    """Explicitly sent fields of a partial update, nested models as stored JSON."""
    values: dict[str, Any] = {}
    for field in data.model_fields_set:
        value = getattr(data, field)
        values[field] = value.to_json_dict() if isinstance(value, CamelModel) else value
    return values
