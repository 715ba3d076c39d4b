"""Context-aware logger that includes the tenant/project scope."""

import logging
from typing import Any

from ..scopes.context import ProjectScope, TenantScope


class ContextLogger:
    """Logger wrapper that adds a fixed scope to every record it emits."""

    def __init__(self, logger: logging.Logger, scope: TenantScope | ProjectScope | None = None):
        """Initialize context logger.

        Args:
            logger: The underlying logger to wrap
            scope: Scope to include in logs
        """
        self.logger = logger
        self.scope = scope

    def _get_extra_context(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        context = extra.copy() if extra else {}
        if self.scope:
            context.setdefault("tenant_id", self.scope.tenant_id)
            project_id = getattr(self.scope, "project_id", None)
            if project_id:
                context.setdefault("project_id", project_id)
            graph_id = getattr(self.scope, "graph_id", None)
            if graph_id:
                context.setdefault("graph_id", graph_id)
        return context

    def debug(
        self, msg: str, *args: Any, extra: dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self.logger.debug(msg, *args, extra=self._get_extra_context(extra), **kwargs)

    def info(
        self, msg: str, *args: Any, extra: dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self.logger.info(msg, *args, extra=self._get_extra_context(extra), **kwargs)

    def warning(
        self, msg: str, *args: Any, extra: dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self.logger.warning(msg, *args, extra=self._get_extra_context(extra), **kwargs)

    def error(
        self, msg: str, *args: Any, extra: dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self.logger.error(msg, *args, extra=self._get_extra_context(extra), **kwargs)

    def exception(
        self, msg: str, *args: Any, extra: dict[str, Any] | None = None, **kwargs: Any
    ) -> None:
        self.logger.exception(msg, *args, extra=self._get_extra_context(extra), **kwargs)

    def set_scope(self, scope: TenantScope | ProjectScope) -> None:
        self.scope = scope


def get_context_logger(
    name: str, scope: TenantScope | ProjectScope | None = None
) -> ContextLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name
        scope: Scope to attach to every record

    Returns:
        Context-aware logger instance
    """
    return ContextLogger(logging.getLogger(name), scope)
