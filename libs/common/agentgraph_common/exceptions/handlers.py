"""Error handlers mapping platform exceptions to JSON responses."""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..scopes.context_manager import ScopeContextManager
from .errors import (
    AgentGraphError,
    CredentialStoreError,
    GraphValidationError,
    RelationTargetError,
    ResourceConflict,
    ResourceNotFound,
)

logger = logging.getLogger(__name__)


def _get_scope_context_for_logging() -> dict[str, Any]:
    context = {}
    tenant_id = ScopeContextManager.get_tenant_id()
    if tenant_id:
        context["tenant_id"] = tenant_id
    project_id = ScopeContextManager.get_project_id()
    if project_id:
        context["project_id"] = project_id
    return context


def _log_error(exc: AgentGraphError, request: Request, level: int) -> None:
    """Log a platform error with request and scope context.

    Args:
        exc: The platform exception
        request: FastAPI request object
        level: Logging level to emit at
    """
    log_context = {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        "request_method": request.method,
        "request_path": request.url.path,
        **_get_scope_context_for_logging(),
    }
    if getattr(exc, "resource_type", None):
        log_context["resource_type"] = exc.resource_type
    if exc.resource_id:
        log_context["resource_id"] = exc.resource_id

    logger.log(level, "Request failed: %s", type(exc).__name__, extra=log_context)


def _error_response(status_code: int, error: str, detail: Any, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, "error_code": error_code},
    )


async def resource_not_found_handler(request: Request, exc: ResourceNotFound) -> JSONResponse:
    """Handle missing resources with a 404 that never reveals other scopes."""
    _log_error(exc, request, logging.INFO)
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        "Resource not found",
        f"The requested {exc.resource_type} does not exist",
        "RESOURCE_NOT_FOUND",
    )


async def resource_conflict_handler(request: Request, exc: ResourceConflict) -> JSONResponse:
    _log_error(exc, request, logging.WARNING)
    return _error_response(
        status.HTTP_409_CONFLICT, "Resource conflict", exc.message, "RESOURCE_CONFLICT"
    )


async def graph_validation_handler(request: Request, exc: GraphValidationError) -> JSONResponse:
    """Handle structural graph errors, returning every collected problem."""
    _log_error(exc, request, logging.WARNING)
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Graph validation failed",
        exc.errors,
        "GRAPH_VALIDATION_FAILED",
    )


async def relation_target_handler(request: Request, exc: RelationTargetError) -> JSONResponse:
    _log_error(exc, request, logging.WARNING)
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Invalid relation target",
        exc.message,
        "INVALID_RELATION_TARGET",
    )


async def credential_store_error_handler(
    request: Request, exc: CredentialStoreError
) -> JSONResponse:
    _log_error(exc, request, logging.ERROR)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Credential store error",
        exc.message,
        "CREDENTIAL_STORE_ERROR",
    )


async def agent_graph_error_handler(request: Request, exc: AgentGraphError) -> JSONResponse:
    """Catch-all for platform errors without a more specific handler."""
    _log_error(exc, request, logging.ERROR)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "An unexpected error occurred",
        "INTERNAL_ERROR",
    )


# Registry of error handlers for easy registration
ERROR_HANDLERS = {
    ResourceNotFound: resource_not_found_handler,
    ResourceConflict: resource_conflict_handler,
    GraphValidationError: graph_validation_handler,
    RelationTargetError: relation_target_handler,
    CredentialStoreError: credential_store_error_handler,
    AgentGraphError: agent_graph_error_handler,  # Catch-all handler
}
