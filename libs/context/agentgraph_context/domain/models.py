from datetime import datetime
from typing import Any

from agentgraph_common.base.models import RESOURCE_ID_LENGTH, BaseModel, ProjectScopedMixin
from sqlalchemy import JSON, DateTime, ForeignKeyConstraint, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column


class ContextConfig(BaseModel, ProjectScopedMixin):
    """Request header schema plus named context-variable fetch definitions."""

    __tablename__ = "context_configs"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="context_configs_project_fk",
            ondelete="CASCADE",
        ),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    headers_schema: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    context_variables: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class ContextCache(BaseModel, ProjectScopedMixin):
    """Fetched value of one context variable for one conversation."""

    __tablename__ = "context_cache"
    __table_args__ = (
        ForeignKeyConstraint(
            ["tenant_id", "project_id"],
            ["projects.tenant_id", "projects.id"],
            name="context_cache_project_fk",
            ondelete="CASCADE",
        ),
        UniqueConstraint(
            "tenant_id",
            "project_id",
            "conversation_id",
            "context_config_id",
            "context_variable_key",
            name="context_cache_lookup_unique",
        ),
    )

    conversation_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    context_config_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), nullable=False)
    context_variable_key: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    request_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    fetch_source: Mapped[str | None] = mapped_column(Text, nullable=True)
    fetch_duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
