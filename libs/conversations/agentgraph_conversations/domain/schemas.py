"""Payload models for the conversation execution trail."""

from typing import Any, Literal

from agentgraph_common.base.schemas import CamelModel, ResourceId
from pydantic import Field

MessageRole = Literal["user", "agent", "system"]
MessageVisibility = Literal["user-facing", "internal", "system", "external"]
USER_FACING = "user-facing"
DEFAULT_HISTORY_LIMIT = 50
CHARS_PER_TOKEN = 4


class MessageContent(CamelModel):
    text: str | None = None
    parts: list[dict[str, Any]] | None = None


class ConversationCreate(CamelModel):
    id: ResourceId
    active_sub_agent_id: ResourceId
    user_id: str | None = None
    title: str | None = None
    metadata: dict[str, Any] | None = None


class MessageCreate(CamelModel):
    id: ResourceId | None = None
    conversation_id: ResourceId
    role: MessageRole
    content: MessageContent
    visibility: MessageVisibility = USER_FACING
    message_type: str = "chat"
    from_sub_agent_id: str | None = None
    to_sub_agent_id: str | None = None
    from_external_agent_id: str | None = None
    to_external_agent_id: str | None = None
    sub_agent_id: str | None = None
    task_id: str | None = None
    parent_message_id: str | None = None
    a2a_task_id: str | None = None
    a2a_session_id: str | None = None
    metadata: dict[str, Any] | None = None


class TaskCreate(CamelModel):
    id: ResourceId
    context_id: str
    sub_agent_id: str
    status: str = "pending"
    metadata: dict[str, Any] | None = None


class ArtifactPart(CamelModel):
    kind: str
    text: str | None = None
    data: Any = None


class Artifact(CamelModel):
    """A tool-produced artifact as reported by the runtime."""

    artifact_id: str | None = None
    task_id: str | None = None
    type: str | None = None
    name: str | None = None
    description: str | None = None
    parts: list[ArtifactPart] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
