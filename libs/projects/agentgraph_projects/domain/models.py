from typing import Any

from agentgraph_common.base.models import BaseModel, TenantScopedMixin
from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column


class Project(BaseModel, TenantScopedMixin):
    """Project holding default model settings and execution limits.

    Graphs and sub-agents inherit ``models`` and ``stop_when`` when they do
    not set their own.
    """

    __tablename__ = "projects"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    models: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    stop_when: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    sandbox_config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    @property
    def step_count_is(self) -> int | None:
        return (self.stop_when or {}).get("stepCountIs")

    @property
    def transfer_count_is(self) -> int | None:
        return (self.stop_when or {}).get("transferCountIs")
