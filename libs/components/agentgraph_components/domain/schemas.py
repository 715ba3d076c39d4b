from typing import Any

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field


class DataComponentDefinition(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    props: dict[str, Any] | None = None


class ArtifactComponentDefinition(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    summary_props: dict[str, Any] | None = None
    full_props: dict[str, Any] | None = None
