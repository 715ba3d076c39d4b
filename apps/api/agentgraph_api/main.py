"""FastAPI application for managing agent graphs."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from agentgraph_common.config.database import get_database
from agentgraph_common.config.settings import Settings, get_settings
from agentgraph_common.exceptions.registration import register_error_handlers
from agentgraph_common.logging.config import setup_logging
from agentgraph_credentials.application.factory import CredentialStoreFactory
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentgraph_api import models  # noqa: F401
from agentgraph_api.api.v1.router import tenant_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(
        level=settings.app.LOG_LEVEL,
        enable_structured_logging=settings.app.STRUCTURED_LOGGING,
        enable_audit_logging=settings.app.AUDIT_LOGGING,
        audit_log_file=settings.app.AUDIT_LOG_FILE,
    )
    database = get_database()
    await database.create_all()
    logger.info("Application started successfully")
    try:
        yield
    finally:
        logger.info("Application shutting down")
        await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app.APP_NAME,
        description="Multi-tenant management API for agent graphs and their resources.",
        version="0.1.0",
        lifespan=app_lifespan,
        debug=settings.app.DEBUG,
        openapi_tags=[
            {"name": "projects", "description": "Tenant projects"},
            {"name": "graphs", "description": "Agent graphs and full graph documents"},
            {"name": "sub-agents", "description": "Sub-agents of a graph"},
            {"name": "sub-agent-relations", "description": "Transfer and delegate edges"},
            {"name": "tools", "description": "MCP tools of a project"},
            {"name": "context-configs", "description": "Context configurations"},
            {"name": "credentials", "description": "Credential references and stores"},
            {"name": "api-keys", "description": "Graph API keys"},
        ],
    )
    app.state.settings = settings
    app.state.credential_store_factory = CredentialStoreFactory(settings.credentials)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(tenant_router)
    register_error_handlers(app)

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    return app
