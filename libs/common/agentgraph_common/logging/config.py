"""Logging configuration with scope context support."""

import json
import logging
import logging.config
from typing import Any

from .filters import ScopeContextFilter

_RESERVED_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
        "exc_info",
        "exc_text",
        "stack_info",
        "tenant_id",
        "project_id",
        "audit_event",
    }
)


class ScopeContextFormatter(logging.Formatter):
    """Formatter emitting one JSON object per record, scope fields first."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with scope context."""
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "tenant_id", None):
            log_entry["tenant_id"] = record.tenant_id
        if getattr(record, "project_id", None):
            log_entry["project_id"] = record.project_id
        if hasattr(record, "audit_event"):
            log_entry["audit_event"] = record.audit_event

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    enable_structured_logging: bool = True,
    enable_audit_logging: bool = True,
    audit_log_file: str | None = None,
) -> None:
    """Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_structured_logging: Whether to use structured JSON logging
        enable_audit_logging: Whether audit events at INFO are emitted
        audit_log_file: Optional file that additionally receives audit events
    """
    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "structured": {"()": ScopeContextFormatter},
        },
        "filters": {"scope_context": {"()": ScopeContextFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured" if enable_structured_logging else "standard",
                "filters": ["scope_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "agentgraph": {"level": level, "handlers": ["console"], "propagate": False},
            "agentgraph.audit": {
                "level": "INFO" if enable_audit_logging else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {"level": level, "handlers": ["console"]},
    }

    if enable_audit_logging and audit_log_file:
        config["handlers"]["audit_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "INFO",
            "formatter": "structured",
            "filename": audit_log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "filters": ["scope_context"],
        }
        config["loggers"]["agentgraph.audit"]["handlers"].append("audit_file")

    logging.config.dictConfig(config)
