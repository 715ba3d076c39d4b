from datetime import datetime
from typing import Any

from agentgraph_common.base.models import BaseModel, GraphScopedMixin, ProjectScopedMixin
from sqlalchemy import JSON, DateTime, ForeignKeyConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class Tool(BaseModel, ProjectScopedMixin):
    """MCP-backed tool server registered in a project.

    ``config`` holds ``{"type": "mcp", "mcp": {"server": {"url": ...}, "transport": ...}}``.
    Health and discovery results are cached on the row.
    """

    __tablename__ = "tools"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="tools_project_fk",
            ondelete="CASCADE",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    credential_reference_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    headers: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    capabilities: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    status: Mapped[str] = mapped_column(String(50), nullable=False, default="unknown")
    last_health_check: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    available_tools: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    last_tools_sync: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


class Function(BaseModel, ProjectScopedMixin):
    """Sandboxed code shared by function tools across graphs."""

    __tablename__ = "functions"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="functions_project_fk",
            ondelete="CASCADE",
        ),
    )

    input_schema: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    execute_code: Mapped[str] = mapped_column(Text, nullable=False)
    dependencies: Mapped[dict[str, str] | None] = mapped_column(JSON, nullable=True)


class FunctionTool(BaseModel, GraphScopedMixin):
    """Graph-level tool that exposes a project function to sub-agents."""

    __tablename__ = "function_tools"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "graph_id"],
            ["agent_graph.tenant_id", "agent_graph.project_id", "agent_graph.id"],
            name="function_tools_graph_fk",
            ondelete="CASCADE",
        ),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "function_id"],
            ["functions.tenant_id", "functions.project_id", "functions.id"],
            name="function_tools_function_fk",
            ondelete="CASCADE",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    function_id: Mapped[str] = mapped_column(String(255), nullable=False)
