"""Structured, audit and scope-aware logging."""

from .audit_logger import AuditAction, AuditEvent, AuditLogger, get_audit_logger
from .config import ScopeContextFormatter, setup_logging
from .context_logger import ContextLogger, get_context_logger
from .filters import ScopeContextFilter

__all__ = [
    "AuditAction",
    "AuditEvent",
    "AuditLogger",
    "ContextLogger",
    "ScopeContextFilter",
    "ScopeContextFormatter",
    "get_audit_logger",
    "get_context_logger",
    "setup_logging",
]
