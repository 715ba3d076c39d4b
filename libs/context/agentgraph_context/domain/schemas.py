from typing import Any

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field

REQUEST_CONTEXT_KEY = "requestContext"


class ContextConfigDefinition(CamelModel):
    id: ResourceId
    name: str = Field(default="", max_length=255)
    description: str = ""
    headers_schema: dict[str, Any] | None = None
    context_variables: dict[str, Any] | None = None


class ContextConfigUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    headers_schema: dict[str, Any] | None = None
    context_variables: dict[str, Any] | None = None


class ContextCacheEntryCreate(CamelModel):
    conversation_id: str
    context_config_id: str
    context_variable_key: str
    value: Any
    request_hash: str | None = None
    fetch_source: str | None = None
    fetch_duration_ms: int | None = None
