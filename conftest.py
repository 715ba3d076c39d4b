"""Shared fixtures: an in-memory database with every table and one seeded project."""

import pytest
import pytest_asyncio
from agentgraph_api import models  # noqa: F401
from agentgraph_common.config.database import Database, DatabaseSettings, set_database
from agentgraph_common.scopes.context import ProjectScope, TenantScope
from agentgraph_projects.infrastructure.repository import ProjectRepository

TENANT_ID = "tenant-1"
PROJECT_ID = "project-1"


@pytest_asyncio.fixture
async def database():
    """Create an in-memory SQLite database and make it the global one."""
    db = Database(DatabaseSettings(DATABASE_URL="sqlite+aiosqlite:///:memory:"))
    await db.create_all()
    set_database(db)

    yield db

    set_database(None)
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    """Session whose changes are rolled back after the test."""
    async with database.session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def tenant_scope() -> TenantScope:
    return TenantScope(tenant_id=TENANT_ID)


@pytest.fixture
def project_scope() -> ProjectScope:
    return ProjectScope(tenant_id=TENANT_ID, project_id=PROJECT_ID)


@pytest_asyncio.fixture
async def project(db_session, tenant_scope):
    """The project every scoped test writes into."""
    return await ProjectRepository(db_session, tenant_scope).create(
        id=PROJECT_ID, name="Test Project", description="Project used by tests"
    )


@pytest_asyncio.fixture
async def other_project(db_session):
    """A project of another tenant, used to check isolation."""
    return await ProjectRepository(db_session, TenantScope(tenant_id="tenant-2")).create(
        id=PROJECT_ID, name="Other Tenant Project"
    )
