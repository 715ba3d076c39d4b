from datetime import datetime
from typing import Any

from agentgraph_common.base.models import (
    RESOURCE_ID_LENGTH,
    BaseModel,
    GraphScopedMixin,
    ProjectScopedMixin,
)
from sqlalchemy import JSON, DateTime, ForeignKeyConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column


def _graph_fk(table: str) -> ForeignKeyConstraint:
    return ForeignKeyConstraint(
        ["tenant_id", "project_id", "graph_id"],
        ["agent_graph.tenant_id", "agent_graph.project_id", "agent_graph.id"],
        name=f"{table}_graph_fk",
        ondelete="CASCADE",
    )


def _sub_agent_fk(table: str, column: str = "sub_agent_id") -> ForeignKeyConstraint:
    return ForeignKeyConstraint(
        ["tenant_id", "project_id", "graph_id", column],
        ["sub_agents.tenant_id", "sub_agents.project_id", "sub_agents.graph_id", "sub_agents.id"],
        name=f"{table}_{column}_fk",
        ondelete="CASCADE",
    )


class AgentGraph(BaseModel, ProjectScopedMixin):
    """A graph of sub-agents with an entry point and shared settings.

    ``default_sub_agent_id`` and ``context_config_id`` are plain references:
    the cascade writes the graph before the rows they point at.
    """

    __tablename__ = "agent_graph"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="agent_graph_project_fk",
            ondelete="CASCADE",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_sub_agent_id: Mapped[str | None] = mapped_column(
        String(RESOURCE_ID_LENGTH), nullable=True
    )
    context_config_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    models: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    status_updates: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    graph_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    stop_when: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    @property
    def transfer_count_is(self) -> int | None:
        return (self.stop_when or {}).get("transferCountIs")


class SubAgent(BaseModel, GraphScopedMixin):
    __tablename__ = "sub_agents"
    __table_args__ = (_graph_fk("sub_agents"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    prompt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    conversation_history_config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    models: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    stop_when: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    @property
    def step_count_is(self) -> int | None:
        return (self.stop_when or {}).get("stepCountIs")


class ExternalAgent(BaseModel, GraphScopedMixin):
    """Agent reachable over HTTP, addressed by ``base_url``."""

    __tablename__ = "external_agents"
    __table_args__ = (_graph_fk("external_agents"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    base_url: Mapped[str] = mapped_column(Text, nullable=False)
    credential_reference_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    headers: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)


class SubAgentRelation(BaseModel, GraphScopedMixin):
    """Directed transfer/delegate edge.

    Exactly one of ``target_sub_agent_id`` and ``external_agent_id`` is set.
    """

    __tablename__ = "sub_agent_relations"
    __table_args__ = (
        _graph_fk("sub_agent_relations"),
        _sub_agent_fk("sub_agent_relations", "source_sub_agent_id"),
        _sub_agent_fk("sub_agent_relations", "target_sub_agent_id"),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "graph_id", "external_agent_id"],
            [
                "external_agents.tenant_id",
                "external_agents.project_id",
                "external_agents.graph_id",
                "external_agents.id",
            ],
            name="sub_agent_relations_external_agent_fk",
            ondelete="CASCADE",
        ),
    )

    source_sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    target_sub_agent_id: Mapped[str | None] = mapped_column(
        String(RESOURCE_ID_LENGTH), nullable=True
    )
    external_agent_id: Mapped[str | None] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=True)
    relation_type: Mapped[str] = mapped_column(String(50), nullable=False)

    @property
    def target_id(self) -> str | None:
        return self.target_sub_agent_id or self.external_agent_id


class SubAgentToolRelation(BaseModel, GraphScopedMixin):
    __tablename__ = "sub_agent_tool_relations"
    __table_args__ = (
        _sub_agent_fk("sub_agent_tool_relations"),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "tool_id"],
            ["tools.tenant_id", "tools.project_id", "tools.id"],
            name="sub_agent_tool_relations_tool_fk",
            ondelete="CASCADE",
        ),
    )

    sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    tool_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    selected_tools: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    headers: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)


class SubAgentFunctionToolRelation(BaseModel, GraphScopedMixin):
    __tablename__ = "sub_agent_function_tool_relations"
    __table_args__ = (
        _sub_agent_fk("sub_agent_function_tool_relations"),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "graph_id", "function_tool_id"],
            [
                "function_tools.tenant_id",
                "function_tools.project_id",
                "function_tools.graph_id",
                "function_tools.id",
            ],
            name="sub_agent_function_tool_relations_function_tool_fk",
            ondelete="CASCADE",
        ),
    )

    sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    function_tool_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)


class ApiKey(BaseModel):
    """Graph API key. Only the scrypt hash of the key is stored."""

    __tablename__ = "api_keys"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "graph_id"],
            ["agent_graph.tenant_id", "agent_graph.project_id", "agent_graph.id"],
            name="api_keys_graph_fk",
            ondelete="CASCADE",
        ),
    )

    id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    graph_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    public_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    key_hash: Mapped[str] = mapped_column(Text, nullable=False)
    key_prefix: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now()) > self.expires_at
