from datetime import datetime
from typing import Any
from uuid import uuid4

from agentgraph_common.base.repository import ScopedRepository, dialect_insert
from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_context.domain.models import ContextCache, ContextConfig

CACHE_KEY_COLUMNS = (
    "tenant_id",
    "project_id",
    "conversation_id",
    "context_config_id",
    "context_variable_key",
)


class ContextConfigRepository(ScopedRepository[ContextConfig]):
    resource_type = "context_config"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, ContextConfig, scopes)

    async def get_by_name(self, name: str) -> ContextConfig | None:
        return await self.find_one_by(name=name)


class ContextCacheRepository(ScopedRepository[ContextCache]):
    resource_type = "context_cache"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, ContextCache, scopes)

    async def get_entry(
        self, conversation_id: str, context_config_id: str, context_variable_key: str
    ) -> ContextCache | None:
        result = await self.session.execute(
            self._scoped_select()
            .where(
                ContextCache.conversation_id == conversation_id,
                ContextCache.context_config_id == context_config_id,
                ContextCache.context_variable_key == context_variable_key,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def upsert_entry(self, **values: Any) -> ContextCache | None:
        """Insert or replace the entry for (conversation, config, variable key)."""
        now = datetime.now()
        row = {
            "id": str(uuid4()),
            **values,
            **self._scope_values(),
            "created_at": now,
            "updated_at": now,
        }
        stmt = dialect_insert(self.session, ContextCache.__table__).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(CACHE_KEY_COLUMNS),
            set_={
                key: stmt.excluded[key]
                for key in row
                if key not in CACHE_KEY_COLUMNS and key not in ("id", "created_at")
            },
        )
        await self.session.execute(stmt)
        self.audit_logger.log_upsert(
            self.resource_type,
            self.scopes,
            resource_id=None,
            conversation_id=values.get("conversation_id"),
            context_variable_key=values.get("context_variable_key"),
        )
        return await self.get_entry(
            values["conversation_id"], values["context_config_id"], values["context_variable_key"]
        )
