"""Audit logging with tenant/project scope for resource operations."""

import json
import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..scopes.context import ProjectScope, TenantScope

AUDIT_LOGGER_NAME = "agentgraph.audit"


class AuditAction(Enum):
    """Audit action types."""

    CREATE = "create"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"
    READ = "read"
    LIST = "list"
    ERROR = "error"


class AuditEvent:
    """Structured audit event carrying the scope it happened in."""

    def __init__(
        self,
        action: AuditAction,
        resource_type: str,
        scopes: TenantScope | ProjectScope,
        resource_id: str | None = None,
        resource_data: dict[str, Any] | None = None,
        error: str | None = None,
        additional_context: dict[str, Any] | None = None,
    ):
        """Initialize audit event.

        Args:
            action: The action being performed
            resource_type: Type of resource (e.g., 'sub_agent', 'tool', 'graph')
            scopes: Scope the operation ran in
            resource_id: ID of the resource being acted upon
            resource_data: Resource data for create/update operations
            error: Error message for error events
            additional_context: Additional context information
        """
        self.timestamp = datetime.now(UTC)
        self.action = action
        self.resource_type = resource_type
        self.tenant_id = scopes.tenant_id
        self.project_id = getattr(scopes, "project_id", None)
        self.graph_id = getattr(scopes, "graph_id", None)
        self.resource_id = str(resource_id) if resource_id is not None else None
        self.resource_data = resource_data or {}
        self.error = error
        self.additional_context = additional_context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert audit event to dictionary for logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "resource_type": self.resource_type,
            "tenant_id": self.tenant_id,
            "project_id": self.project_id,
            "graph_id": self.graph_id,
            "resource_id": self.resource_id,
            "resource_data": self.resource_data,
            "error": self.error,
            "additional_context": self.additional_context,
        }

    def to_json(self) -> str:
        """Convert audit event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class AuditLogger:
    """Audit logger for repository operations."""

    def __init__(self, logger_name: str = AUDIT_LOGGER_NAME):
        self.logger = logging.getLogger(logger_name)

    def log_event(self, event: AuditEvent, level: int = logging.INFO) -> None:
        """Log an audit event as a structured record."""
        self.logger.log(
            level,
            f"AUDIT: {event.action.value.upper()} {event.resource_type}",
            extra={
                "audit_event": event.to_dict(),
                "tenant_id": event.tenant_id,
                "project_id": event.project_id,
                "resource_type": event.resource_type,
                "action": event.action.value,
            },
        )

    def _log(
        self,
        action: AuditAction,
        resource_type: str,
        scopes: TenantScope | ProjectScope,
        resource_id: str | None = None,
        resource_data: dict[str, Any] | None = None,
        error: str | None = None,
        level: int = logging.INFO,
        **additional_context: Any,
    ) -> None:
        event = AuditEvent(
            action=action,
            resource_type=resource_type,
            scopes=scopes,
            resource_id=resource_id,
            resource_data=resource_data,
            error=error,
            additional_context=additional_context,
        )
        self.log_event(event, level=level)

    def log_create(self, resource_type, scopes, resource_id, resource_data=None, **context) -> None:
        self._log(AuditAction.CREATE, resource_type, scopes, resource_id, resource_data, **context)

    def log_update(self, resource_type, scopes, resource_id, resource_data=None, **context) -> None:
        self._log(AuditAction.UPDATE, resource_type, scopes, resource_id, resource_data, **context)

    def log_upsert(self, resource_type, scopes, resource_id, resource_data=None, **context) -> None:
        self._log(AuditAction.UPSERT, resource_type, scopes, resource_id, resource_data, **context)

    def log_delete(self, resource_type, scopes, resource_id, **context) -> None:
        self._log(AuditAction.DELETE, resource_type, scopes, resource_id, **context)

    def log_read(self, resource_type, scopes, resource_id=None, **context) -> None:
        self._log(
            AuditAction.READ, resource_type, scopes, resource_id, level=logging.DEBUG, **context
        )

    def log_list(self, resource_type, scopes, count=None, filters=None, **context) -> None:
        self._log(
            AuditAction.LIST,
            resource_type,
            scopes,
            level=logging.DEBUG,
            count=count,
            filters=filters or {},
            **context,
        )

    def log_error(self, resource_type, scopes, error, resource_id=None, **context) -> None:
        self._log(
            AuditAction.ERROR,
            resource_type,
            scopes,
            resource_id,
            error=error,
            level=logging.ERROR,
            **context,
        )


# Global audit logger instance
_audit_logger: AuditLogger | None = None


def get_audit_logger() -> AuditLogger:
    """Get the global audit logger instance."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger
