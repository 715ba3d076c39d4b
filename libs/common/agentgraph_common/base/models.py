from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

RESOURCE_ID_LENGTH = 255


class BaseModel(DeclarativeBase):
    """Base model for all database models."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )

    def __repr__(self) -> str:
        """Return a string representation of the model."""
        return f"<{self.__class__.__name__} {getattr(self, 'id', None)}>"

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary keyed by attribute name."""
        return {attr.key: getattr(self, attr.key) for attr in self.__mapper__.column_attrs}


class TenantScopedMixin:
    """Mixin for rows keyed by (tenant_id, id)."""

    tenant_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)
    id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)

    def is_in_tenant(self, tenant_id: str) -> bool:
        """Check if this record belongs to the specified tenant."""
        return self.tenant_id == tenant_id


class ProjectScopedMixin(TenantScopedMixin):
    """Mixin for rows keyed by (tenant_id, project_id, id)."""

    project_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)

    def is_in_project(self, tenant_id: str, project_id: str) -> bool:
        """Check if this record belongs to the specified project."""
        return self.tenant_id == tenant_id and self.project_id == project_id


class GraphScopedMixin(ProjectScopedMixin):
    """Mixin for rows keyed by (tenant_id, project_id, graph_id, id)."""

    graph_id: Mapped[str] = mapped_column(String(RESOURCE_ID_LENGTH), primary_key=True)

    def is_in_graph(self, graph_id: str) -> bool:
        return self.graph_id == graph_id
