"""Best-effort cache of resolved context variables.

Caching must never break context resolution: every database error is
logged and turned into a miss, a dropped write or a zero count. Each
operation runs in its own SAVEPOINT so a failure leaves the caller's
transaction usable.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_context.domain.models import ContextCache
from agentgraph_context.domain.schemas import REQUEST_CONTEXT_KEY, ContextCacheEntryCreate
from agentgraph_context.infrastructure.repository import ContextCacheRepository

logger = logging.getLogger(__name__)


class ContextCacheService:
    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        self.session = session
        self.scopes = scopes
        self.repository = ContextCacheRepository(session, scopes)

    def _log_failure(self, operation: str, error: Exception, **context) -> None:
        logger.warning(
            "Context cache %s failed: %s",
            operation,
            error,
            extra={
                "tenant_id": self.scopes.tenant_id,
                "project_id": self.scopes.project_id,
                **context,
            },
        )

    async def get_cache_entry(
        self,
        conversation_id: str,
        context_config_id: str,
        context_variable_key: str,
        request_hash: str | None = None,
    ) -> ContextCache | None:
        """Return the cached entry, or None on a miss.

        An entry stored for a different request hash is a miss.
        """
        try:
            async with self.session.begin_nested():
                entry = await self.repository.get_entry(
                    conversation_id, context_config_id, context_variable_key
                )
        except SQLAlchemyError as e:
            self._log_failure(
                "read",
                e,
                conversation_id=conversation_id,
                context_variable_key=context_variable_key,
            )
            return None

        if entry is None:
            return None
        if request_hash and entry.request_hash and entry.request_hash != request_hash:
            logger.debug(
                "Context cache hash mismatch, treating as miss",
                extra={
                    "conversation_id": conversation_id,
                    "context_variable_key": context_variable_key,
                },
            )
            return None
        return entry

    async def set_cache_entry(self, entry: ContextCacheEntryCreate) -> ContextCache | None:
        """Store a resolved value, replacing any previous one for the same key."""
        try:
            async with self.session.begin_nested():
                return await self.repository.upsert_entry(
                    conversation_id=entry.conversation_id,
                    context_config_id=entry.context_config_id,
                    context_variable_key=entry.context_variable_key,
                    value=entry.value,
                    request_hash=entry.request_hash,
                    fetched_at=datetime.now(),
                    fetch_source=entry.fetch_source
                    or f"{entry.context_config_id}:{entry.context_variable_key}",
                    fetch_duration_ms=entry.fetch_duration_ms or 0,
                )
        except SQLAlchemyError as e:
            self._log_failure(
                "write",
                e,
                conversation_id=entry.conversation_id,
                context_variable_key=entry.context_variable_key,
            )
            return None

    async def _delete(self, operation: str, **filters) -> int:
        try:
            async with self.session.begin_nested():
                return await self.repository.delete_where(**filters)
        except SQLAlchemyError as e:
            self._log_failure(operation, e, **filters)
            return 0

    async def clear_conversation_cache(self, conversation_id: str) -> int:
        return await self._delete("clear_conversation", conversation_id=conversation_id)

    async def clear_context_config_cache(
        self, context_config_id: str, context_variable_key: str | None = None
    ) -> int:
        filters = {"context_config_id": context_config_id}
        if context_variable_key is not None:
            filters["context_variable_key"] = context_variable_key
        return await self._delete("clear_context_config", **filters)

    async def cleanup_tenant_cache(self) -> int:
        """Remove every cache entry of the scoped tenant project."""
        return await self._delete("cleanup")

    async def invalidate_request_context_cache(
        self, conversation_id: str, context_config_id: str
    ) -> int:
        return await self._delete(
            "invalidate_request_context",
            conversation_id=conversation_id,
            context_config_id=context_config_id,
            context_variable_key=REQUEST_CONTEXT_KEY,
        )

    async def invalidate_invocation_definitions_cache(
        self, conversation_id: str, context_config_id: str, definition_ids: Iterable[str]
    ) -> int:
        definition_ids = list(definition_ids)
        if not definition_ids:
            return 0
        return await self._delete(
            "invalidate_invocation_definitions",
            conversation_id=conversation_id,
            context_config_id=context_config_id,
            context_variable_key=definition_ids,
        )

    async def get_conversation_cache_entries(self, conversation_id: str) -> list[ContextCache]:
        try:
            async with self.session.begin_nested():
                return await self.repository.list_all(conversation_id=conversation_id)
        except SQLAlchemyError as e:
            self._log_failure("list", e, conversation_id=conversation_id)
            return []

    async def get_context_config_cache_entries(self, context_config_id: str) -> list[ContextCache]:
        try:
            async with self.session.begin_nested():
                return await self.repository.list_all(context_config_id=context_config_id)
        except SQLAlchemyError as e:
            self._log_failure("list", e, context_config_id=context_config_id)
            return []
