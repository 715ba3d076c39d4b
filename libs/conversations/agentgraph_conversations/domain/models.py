from typing import Any

from agentgraph_common.base.models import RESOURCE_ID_LENGTH, BaseModel, ProjectScopedMixin
from sqlalchemy import JSON, ForeignKeyConstraint, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column


def _project_fk(table: str) -> ForeignKeyConstraint:
    return ForeignKeyConstraint(
        ["tenant_id", "project_id"],
        ["projects.tenant_id", "projects.id"],
        name=f"{table}_project_fk",
        ondelete="CASCADE",
    )


class Conversation(BaseModel, ProjectScopedMixin):
    __tablename__ = "conversations"
    __table_args__ = (_project_fk("conversations"),)

    user_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    active_sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_context_resolution: Mapped[str | None] = mapped_column(String(64), nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)


class Message(BaseModel, ProjectScopedMixin):
    """One entry of the unified chat and agent-to-agent message log."""

    __tablename__ = "messages"
    __table_args__ = (
        _project_fk("messages"),
        Index("messages_conversation_idx", "tenant_id", "project_id", "conversation_id"),
    )

    conversation_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    from_sub_agent_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    to_sub_agent_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    from_external_agent_id: Mapped[str | None] = mapped_column(
        String(RESOURCE_ID_LENGTH), nullable=True
    )
    to_external_agent_id: Mapped[str | None] = mapped_column(
        String(RESOURCE_ID_LENGTH), nullable=True
    )
    content: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    visibility: Mapped[str] = mapped_column(String(32), nullable=False, default="user-facing")
    message_type: Mapped[str] = mapped_column(String(32), nullable=False, default="chat")
    sub_agent_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    task_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    parent_message_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    a2a_task_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    a2a_session_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)


class Task(BaseModel, ProjectScopedMixin):
    __tablename__ = "tasks"
    __table_args__ = (_project_fk("tasks"),)

    context_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)


class TaskRelation(BaseModel, ProjectScopedMixin):
    __tablename__ = "task_relations"
    __table_args__ = (_project_fk("task_relations"),)

    parent_task_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    child_task_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    relation_type: Mapped[str] = mapped_column(String(32), nullable=False, default="parent_child")


class LedgerArtifact(BaseModel, ProjectScopedMixin):
    """Output produced by a tool call, attached to a task and a context."""

    __tablename__ = "ledger_artifacts"
    __table_args__ = (
        _project_fk("ledger_artifacts"),
        UniqueConstraint(
            "task_id", "context_id", "name", name="ledger_artifacts_task_context_name_unique"
        ),
        Index("ledger_artifacts_context_idx", "context_id"),
    )

    task_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    context_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False, default="source")
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    parts: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSON, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    mime: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    visibility: Mapped[str | None] = mapped_column(String(32), nullable=True, default="context")
    allowed_agents: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    derived_from: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
