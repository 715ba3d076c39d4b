"""Scope dataclasses describing the tenant isolation boundary of a query."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProjectScope:
    """Tenant + project scope shared by every project-level table."""

    tenant_id: str
    project_id: str

    def filters(self) -> dict[str, str]:
        """Column/value pairs every scoped query must match."""
        return {"tenant_id": self.tenant_id, "project_id": self.project_id}

    def for_graph(self, graph_id: str) -> "GraphScope":
        return GraphScope(tenant_id=self.tenant_id, project_id=self.project_id, graph_id=graph_id)


@dataclass(frozen=True)
class GraphScope(ProjectScope):
    """Scope of rows owned by a single agent graph."""

    graph_id: str

    def filters(self) -> dict[str, str]:
        return {**super().filters(), "graph_id": self.graph_id}

    @property
    def project(self) -> ProjectScope:
        return ProjectScope(tenant_id=self.tenant_id, project_id=self.project_id)

    def for_agent(self, sub_agent_id: str) -> "AgentScope":
        return AgentScope(
            tenant_id=self.tenant_id,
            project_id=self.project_id,
            graph_id=self.graph_id,
            sub_agent_id=sub_agent_id,
        )


@dataclass(frozen=True)
class AgentScope(GraphScope):
    """Scope of junction rows owned by a single sub-agent."""

    sub_agent_id: str

    def filters(self) -> dict[str, str]:
        return {**super().filters(), "sub_agent_id": self.sub_agent_id}

    @property
    def graph(self) -> GraphScope:
        return GraphScope(
            tenant_id=self.tenant_id, project_id=self.project_id, graph_id=self.graph_id
        )


@dataclass(frozen=True)
class TenantScope:
    """Tenant-only scope, used for the projects table itself."""

    tenant_id: str

    def filters(self) -> dict[str, str]:
        return {"tenant_id": self.tenant_id}

    def for_project(self, project_id: str) -> ProjectScope:
        return ProjectScope(tenant_id=self.tenant_id, project_id=project_id)
