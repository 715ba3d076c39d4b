"""Utility functions for registering error handlers."""

from fastapi import FastAPI

from .handlers import ERROR_HANDLERS


def register_error_handlers(app: FastAPI) -> None:
    """Register every platform error handler with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    for exception_class, handler in ERROR_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
