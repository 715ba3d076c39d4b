"""Context manager for the scope of the request being served."""

from contextvars import ContextVar

from .context import ProjectScope, TenantScope

# Context variable to store the current request scope
_scope_context: ContextVar[TenantScope | ProjectScope | None] = ContextVar(
    "scope_context", default=None
)


class ScopeContextManager:
    """Manager for the tenant/project scope of the running request."""

    @staticmethod
    def set_context(scope: TenantScope | ProjectScope) -> None:
        """Set the current scope.

        Args:
            scope: Scope to set as current
        """
        _scope_context.set(scope)

    @staticmethod
    def get_context() -> TenantScope | ProjectScope | None:
        """Get the current scope, or None when no request scope is active."""
        return _scope_context.get()

    @staticmethod
    def clear_context() -> None:
        """Clear the current scope."""
        _scope_context.set(None)

    @staticmethod
    def get_tenant_id() -> str | None:
        scope = _scope_context.get()
        return scope.tenant_id if scope else None

    @staticmethod
    def get_project_id() -> str | None:
        scope = _scope_context.get()
        return getattr(scope, "project_id", None)
