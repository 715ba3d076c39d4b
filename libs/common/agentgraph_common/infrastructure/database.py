"""FastAPI session dependency bound to the global database."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config.database import get_database


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session that commits when the request succeeds."""
    async for session in get_database().get_db():
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db_session)]
