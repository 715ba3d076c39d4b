"""Request and payload models for graphs, sub-agents and their relations."""

from datetime import datetime
from typing import Annotated, Any, Literal

from agentgraph_common.base.schemas import CamelModel, ResourceId
from agentgraph_common.exceptions.errors import RelationTargetError
from agentgraph_components.domain.schemas import (
    ArtifactComponentDefinition,
    DataComponentDefinition,
)
from agentgraph_context.domain.schemas import ContextConfigDefinition
from agentgraph_credentials.domain.schemas import CredentialReferenceDefinition
from agentgraph_projects.domain.schemas import GraphStopWhen, Models, SubAgentStopWhen
from agentgraph_tools.domain.schemas import (
    FunctionDefinition,
    FunctionToolDefinition,
    ToolDefinition,
)
from pydantic import Discriminator, Field, Tag, model_validator

RelationType = Literal["transfer", "delegate"]
VALID_RELATION_TYPES: tuple[str, ...] = ("transfer", "delegate")


class ConversationHistoryConfig(CamelModel):
    mode: Literal["full", "scoped", "none"] = "full"
    limit: int | None = Field(default=None, ge=1)
    max_output_tokens: int | None = Field(default=None, ge=1)
    include_internal: bool | None = None
    message_types: list[str] | None = None


class StatusComponent(CamelModel):
    type: str
    description: str | None = None
    details_schema: dict[str, Any] | None = None


class StatusUpdates(CamelModel):
    enabled: bool | None = None
    num_events: int | None = Field(default=None, ge=1, le=100)
    time_in_seconds: int | None = Field(default=None, ge=1, le=600)
    prompt: str | None = Field(default=None, max_length=2000)
    status_components: list[StatusComponent] | None = None


# -- relation targets ------------------------------------------------------


class InternalTarget(CamelModel):
    kind: Literal["internal"] = "internal"
    sub_agent_id: ResourceId


class ExternalTarget(CamelModel):
    kind: Literal["external"] = "external"
    external_agent_id: ResourceId


RelationTarget = Annotated[InternalTarget | ExternalTarget, Field(discriminator="kind")]


def resolve_relation_target(
    target_sub_agent_id: str | None, external_agent_id: str | None
) -> InternalTarget | ExternalTarget:
    """Turn the raw pair of target columns into a single typed target."""
    if target_sub_agent_id and external_agent_id:
        raise RelationTargetError("Cannot specify both targetAgentId and externalAgentId")
    if target_sub_agent_id:
        return InternalTarget(sub_agent_id=target_sub_agent_id)
    if external_agent_id:
        return ExternalTarget(external_agent_id=external_agent_id)
    raise RelationTargetError("Must specify either targetAgentId or externalAgentId")


class SubAgentRelationCreate(CamelModel):
    id: ResourceId | None = None
    source_sub_agent_id: ResourceId
    target_sub_agent_id: ResourceId | None = None
    external_agent_id: ResourceId | None = None
    relation_type: RelationType

    @model_validator(mode="after")
    def check_single_target(self) -> "SubAgentRelationCreate":
        resolve_relation_target(self.target_sub_agent_id, self.external_agent_id)
        return self

    @property
    def target(self) -> InternalTarget | ExternalTarget:
        return resolve_relation_target(self.target_sub_agent_id, self.external_agent_id)


# -- sub-agents --------------------------------------------------------------


class SubAgentCreate(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    prompt: str = ""
    conversation_history_config: ConversationHistoryConfig | None = None
    models: Models | None = None
    stop_when: SubAgentStopWhen | None = None


class SubAgentUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    prompt: str | None = None
    conversation_history_config: ConversationHistoryConfig | None = None
    models: Models | None = None
    stop_when: SubAgentStopWhen | None = None


class ExternalAgentCreate(CamelModel):
    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    base_url: str = Field(min_length=1)
    credential_reference_id: str | None = None
    headers: dict[str, str] | None = None


class CanUseItem(CamelModel):
    """A tool or function tool a sub-agent may call."""

    agent_tool_relation_id: str | None = None
    tool_id: str
    tool_selection: list[str] | None = None
    headers: dict[str, str] | None = None


class InternalSubAgentDefinition(SubAgentCreate):
    id: ResourceId | None = None
    type: Literal["internal"] = "internal"
    can_use: list[CanUseItem] = Field(default_factory=list)
    data_components: list[str] | None = None
    artifact_components: list[str] | None = None
    can_transfer_to: list[str] | None = None
    can_delegate_to: list[str] | None = None


class ExternalAgentDefinition(ExternalAgentCreate):
    id: ResourceId | None = None
    type: Literal["external"] = "external"


def _sub_agent_kind(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
        if kind:
            return kind
        return "external" if ("baseUrl" in value or "base_url" in value) else "internal"
    return getattr(value, "type", "internal")


SubAgentDefinition = Annotated[
    Annotated[InternalSubAgentDefinition, Tag("internal")]
    | Annotated[ExternalAgentDefinition, Tag("external")],
    Discriminator(_sub_agent_kind),
]


# -- full graph ----------------------------------------------------------------


class FullGraphDefinition(CamelModel):
    """A graph with every sub-agent, relation and referenced resource.

    Maps are keyed by resource id. A definition that carries its own ``id``
    must agree with its key; a missing ``id`` is filled from the key.
    """

    id: ResourceId
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    default_sub_agent_id: str | None = None
    sub_agents: dict[ResourceId, SubAgentDefinition] = Field(default_factory=dict)
    context_config: ContextConfigDefinition | None = None
    status_updates: StatusUpdates | None = None
    models: Models | None = None
    stop_when: GraphStopWhen | None = None
    graph_prompt: str | None = Field(default=None, max_length=5000)

    credential_references: dict[str, CredentialReferenceDefinition] | None = None
    tools: dict[str, ToolDefinition] | None = None
    functions: dict[str, FunctionDefinition] | None = None
    function_tools: dict[str, FunctionToolDefinition] | None = None
    data_components: dict[str, DataComponentDefinition] | None = None
    artifact_components: dict[str, ArtifactComponentDefinition] | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def check_keyed_ids(self) -> "FullGraphDefinition":
        for key, agent in self.sub_agents.items():
            if agent.id is None:
                agent.id = key
            elif agent.id != key:
                raise ValueError(f"Sub-agent key '{key}' does not match its id '{agent.id}'")
        for section in (
            "credential_references",
            "tools",
            "functions",
            "function_tools",
            "data_components",
            "artifact_components",
        ):
            for key, item in (getattr(self, section) or {}).items():
                if item.id != key:
                    raise ValueError(f"{section} key '{key}' does not match its id '{item.id}'")
        return self

    @property
    def internal_sub_agents(self) -> dict[str, InternalSubAgentDefinition]:
        return {
            key: agent
            for key, agent in self.sub_agents.items()
            if isinstance(agent, InternalSubAgentDefinition)
        }

    @property
    def external_agents(self) -> dict[str, ExternalAgentDefinition]:
        return {
            key: agent
            for key, agent in self.sub_agents.items()
            if isinstance(agent, ExternalAgentDefinition)
        }


# -- API keys ------------------------------------------------------------------


class ApiKeyCreate(CamelModel):
    graph_id: ResourceId
    name: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = None


class ApiKeyUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = None


class ApiKeyResponse(CamelModel):
    id: str
    graph_id: str
    public_id: str
    key_prefix: str
    name: str | None = None
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
