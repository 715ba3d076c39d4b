"""Logging filters for request scope context."""

import logging

from ..scopes.context_manager import ScopeContextManager


class ScopeContextFilter(logging.Filter):
    """Logging filter that adds the active tenant/project to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add scope context to the log record.

        Values passed explicitly through ``extra`` are left untouched.

        Args:
            record: Log record to filter

        Returns:
            True to allow the record to be logged
        """
        if not getattr(record, "tenant_id", None):
            tenant_id = ScopeContextManager.get_tenant_id()
            if tenant_id:
                record.tenant_id = tenant_id
        if not getattr(record, "project_id", None):
            project_id = ScopeContextManager.get_project_id()
            if project_id:
                record.project_id = project_id
        return True
