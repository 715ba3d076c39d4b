from datetime import datetime
from typing import Any, Literal

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field

ToolStatus = Literal["healthy", "unhealthy", "unknown", "needs_auth"]


class McpServerConfig(CamelModel):
    url: str


class McpConfig(CamelModel):
    server: McpServerConfig
    transport: dict[str, Any] | None = None
    active_tools: list[str] | None = None


class ToolConfig(CamelModel):
    type: Literal["mcp"] = "mcp"
    mcp: McpConfig


class ToolDefinition(CamelModel):
    """Project tool as carried in full graph payloads and the tools API."""

    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    config: ToolConfig
    credential_reference_id: str | None = None
    headers: dict[str, str] | None = None
    image_url: str | None = None
    capabilities: dict[str, Any] | None = None


class ToolUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    config: ToolConfig | None = None
    credential_reference_id: str | None = None
    headers: dict[str, str] | None = None
    image_url: str | None = None
    capabilities: dict[str, Any] | None = None


class ToolResponse(ToolDefinition):
    status: str = "unknown"
    last_health_check: datetime | None = None
    last_error: str | None = None
    available_tools: list[dict[str, Any]] | None = None
    last_tools_sync: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, tool) -> "ToolResponse":
        return cls(
            id=tool.id,
            name=tool.name,
            description=tool.description,
            config=tool.config,
            credential_reference_id=tool.credential_reference_id,
            headers=tool.headers,
            image_url=tool.image_url,
            capabilities=tool.capabilities,
            status=tool.status,
            last_health_check=tool.last_health_check,
            last_error=tool.last_error,
            available_tools=tool.available_tools,
            last_tools_sync=tool.last_tools_sync,
            created_at=tool.created_at,
            updated_at=tool.updated_at,
        )


class FunctionDefinition(CamelModel):
    id: ResourceId
    input_schema: dict[str, Any] | None = None
    execute_code: str
    dependencies: dict[str, str] | None = None


class FunctionToolDefinition(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    function_id: ResourceId
