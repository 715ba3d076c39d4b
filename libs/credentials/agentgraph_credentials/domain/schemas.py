from typing import Any

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field


class CredentialReferenceDefinition(CamelModel):
    id: ResourceId
    type: str = Field(min_length=1, max_length=50)
    credential_store_id: str = Field(min_length=1, max_length=255)
    retrieval_params: dict[str, Any] | None = None


class CredentialReferenceUpdate(CamelModel):
    type: str | None = Field(default=None, min_length=1, max_length=50)
    credential_store_id: str | None = Field(default=None, min_length=1, max_length=255)
    retrieval_params: dict[str, Any] | None = None
