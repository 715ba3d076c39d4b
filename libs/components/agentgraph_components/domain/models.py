from typing import Any

from agentgraph_common.base.models import (
    RESOURCE_ID_LENGTH,
    BaseModel,
    GraphScopedMixin,
    ProjectScopedMixin,
)
from sqlalchemy import JSON, ForeignKeyConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column


def _project_fk(table: str) -> ForeignKeyConstraint:
    return ForeignKeyConstraint(
        ["tenant_id", "project_id"],
        ["projects.tenant_id", "projects.id"],
        name=f"{table}_project_fk",
        ondelete="CASCADE",
    )


def _sub_agent_fk(table: str) -> ForeignKeyConstraint:
    return ForeignKeyConstraint(
        ["tenant_id", "project_id", "graph_id", "sub_agent_id"],
        ["sub_agents.tenant_id", "sub_agents.project_id", "sub_agents.graph_id", "sub_agents.id"],
        name=f"{table}_sub_agent_fk",
        ondelete="CASCADE",
    )


class DataComponent(BaseModel, ProjectScopedMixin):
    """Structured UI data block a sub-agent can emit, described by a JSON schema."""

    __tablename__ = "data_components"
    __table_args__ = (_project_fk("data_components"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    props: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class ArtifactComponent(BaseModel, ProjectScopedMixin):
    """Artifact shape with a short summary view and a full view."""

    __tablename__ = "artifact_components"
    __table_args__ = (_project_fk("artifact_components"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    summary_props: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    full_props: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class SubAgentDataComponent(BaseModel, GraphScopedMixin):
    __tablename__ = "sub_agent_data_components"
    __table_args__ = (
        _sub_agent_fk("sub_agent_data_components"),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "data_component_id"],
            ["data_components.tenant_id", "data_components.project_id", "data_components.id"],
            name="sub_agent_data_components_data_component_fk",
            ondelete="CASCADE",
        ),
    )

    sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    data_component_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)


class SubAgentArtifactComponent(BaseModel, GraphScopedMixin):
    __tablename__ = "sub_agent_artifact_components"
    __table_args__ = (
        _sub_agent_fk("sub_agent_artifact_components"),
        ForeignKeyConstraint(
            ["tenant_id", "project_id", "artifact_component_id"],
            [
                "artifact_components.tenant_id",
                "artifact_components.project_id",
                "artifact_components.id",
            ],
            name="sub_agent_artifact_components_artifact_component_fk",
            ondelete="CASCADE",
        ),
    )

    sub_agent_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    artifact_component_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
