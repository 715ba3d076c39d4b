"""Exception classes for scoped resources and graph operations."""

from typing import Any


class AgentGraphError(Exception):
    """Base exception for agent graph platform errors.

    Carries the tenant/project context the error happened in so that the
    message and the logs identify the affected scope.
    """

    def __init__(
        self,
        message: str,
        tenant_id: str | None = None,
        project_id: str | None = None,
        resource_id: str | None = None,
    ):
        """Initialize the error.

        Args:
            message: Error message
            tenant_id: ID of the tenant where the error occurred
            project_id: ID of the project where the error occurred
            resource_id: ID of the resource that caused the error
        """
        super().__init__(message)
        self.message = message
        self.tenant_id = tenant_id
        self.project_id = project_id
        self.resource_id = resource_id

    def __str__(self) -> str:
        """Return string representation with context."""
        context_parts = []
        if self.tenant_id:
            context_parts.append(f"tenant_id={self.tenant_id}")
        if self.project_id:
            context_parts.append(f"project_id={self.project_id}")
        if self.resource_id:
            context_parts.append(f"resource_id={self.resource_id}")

        if context_parts:
            return f"{self.message} ({', '.join(context_parts)})"
        return self.message


class ResourceNotFound(AgentGraphError):  # noqa: N818
    """Raised when a resource does not exist within the requested scope.

    Rows of another tenant or project are reported as missing, never as
    forbidden.
    """

    def __init__(self, resource_type: str, resource_id: str, scope: Any | None = None):
        tenant_id = getattr(scope, "tenant_id", None)
        project_id = getattr(scope, "project_id", None)
        super().__init__(
            message=f"{resource_type} '{resource_id}' not found",
            tenant_id=tenant_id,
            project_id=project_id,
            resource_id=resource_id,
        )
        self.resource_type = resource_type


class ResourceConflict(AgentGraphError):  # noqa: N818
    """Raised when a write conflicts with existing state."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        scope: Any | None = None,
    ):
        super().__init__(
            message=message,
            tenant_id=getattr(scope, "tenant_id", None),
            project_id=getattr(scope, "project_id", None),
            resource_id=resource_id,
        )
        self.resource_type = resource_type


class GraphValidationError(AgentGraphError):
    """Raised when a full graph definition is structurally invalid.

    All problems found are collected in ``errors``; nothing has been written
    when this is raised.
    """

    def __init__(self, errors: list[str], graph_id: str | None = None):
        self.errors = list(errors)
        message = "Graph validation failed: " + "; ".join(self.errors)
        super().__init__(message=message, resource_id=graph_id)


class RelationTargetError(AgentGraphError, ValueError):
    """Raised when a sub-agent relation does not name exactly one target."""


class CredentialStoreError(AgentGraphError):
    """Raised for credential store misuse (unknown store, unsupported operation)."""

    def __init__(self, message: str, store_id: str | None = None):
        super().__init__(message=message, resource_id=store_id)
        self.store_id = store_id
