"""Exception classes for the agent graph platform.

This module provides the error hierarchy shared by every library and the
FastAPI handlers that turn it into JSON error responses.
"""

from .errors import (
    AgentGraphError,
    CredentialStoreError,
    GraphValidationError,
    RelationTargetError,
    ResourceConflict,
    ResourceNotFound,
)
from .handlers import ERROR_HANDLERS
from .registration import register_error_handlers

__all__ = [
    "ERROR_HANDLERS",
    "AgentGraphError",
    "CredentialStoreError",
    "GraphValidationError",
    "RelationTargetError",
    "ResourceConflict",
    "ResourceNotFound",
    "register_error_handlers",
]
