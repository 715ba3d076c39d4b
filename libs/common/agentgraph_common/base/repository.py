"""Scope-filtered repository base class."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ..exceptions.errors import ResourceNotFound
from ..logging.audit_logger import get_audit_logger
from ..scopes.context import ProjectScope, TenantScope
from .models import BaseModel
from .pagination import Pagination, PaginatedResult, PaginationInfo

Scopes = TenantScope | ProjectScope

T = TypeVar("T", bound=BaseModel)


def dialect_insert(session: AsyncSession, table):
    """Return a dialect-specific INSERT supporting ``on_conflict_do_update``."""
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "sqlite":
        return sqlite.insert(table)
    if dialect_name == "postgresql":
        return postgresql.insert(table)
    raise NotImplementedError(f"Native upsert is not supported for dialect '{dialect_name}'")


class ScopedRepository(Generic[T]):
    """Base repository class providing scope-isolated CRUD operations.

    Every statement is filtered by the complete scope tuple (tenant, project
    and, for graph-owned rows, graph and sub-agent). Writes only flush; the
    unit of work that owns the session decides when to commit.
    """

    resource_type: str | None = None
    immutable_fields: tuple[str, ...] = ("id", "created_at")

    def __init__(self, session: AsyncSession, model_class: type[T], scopes: Scopes):
        """Initialize repository with session, model class, and scopes.

        Args:
            session: SQLAlchemy async session
            model_class: The model class this repository manages
            scopes: Scope every query is restricted to
        """
        self.session = session
        self.model_class = model_class
        self.scopes = scopes
        self.audit_logger = get_audit_logger()
        if self.resource_type is None:
            self.resource_type = model_class.__tablename__

    # -- filters -----------------------------------------------------------

    def _scope_values(self) -> dict[str, str]:
        return {
            column: value
            for column, value in self.scopes.filters().items()
            if hasattr(self.model_class, column)
        }

    def _get_scope_filter(self):
        """Get the compound scope filter for queries."""
        return and_(
            *(
                getattr(self.model_class, column) == value
                for column, value in self._scope_values().items()
            )
        )

    def _apply_filters(self, query: Select, filters: dict[str, Any]) -> Select:
        for field, value in filters.items():
            if not hasattr(self.model_class, field):
                continue
            column = getattr(self.model_class, field)
            if value is None:
                query = query.where(column.is_(None))
            elif isinstance(value, list | tuple | set | frozenset):
                query = query.where(column.in_(list(value)))
            else:
                query = query.where(column == value)
        return query

    def _scoped_select(self) -> Select:
        return select(self.model_class).where(self._get_scope_filter())

    # -- reads -------------------------------------------------------------

    async def get_by_id(self, id: str) -> T | None:
        """Get a record by ID within the current scope.

        Args:
            id: The record ID

        Returns:
            The record if found, None otherwise
        """
        try:
            query = self._scoped_select().where(self.model_class.id == id)
            result = await self.session.execute(query)
            record = result.scalar_one_or_none()

            self.audit_logger.log_read(
                self.resource_type, self.scopes, resource_id=id, found=record is not None
            )
            return record
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type, self.scopes, str(e), resource_id=id, operation="get_by_id"
            )
            raise

    async def get_by_id_or_raise(self, id: str) -> T:
        """Get a record by ID or raise ResourceNotFound."""
        record = await self.get_by_id(id)
        if record is None:
            raise ResourceNotFound(self.resource_type, id, self.scopes)
        return record

    async def get_by_ids(self, ids: Iterable[str]) -> list[T]:
        ids = list(ids)
        if not ids:
            return []
        result = await self.session.execute(
            self._scoped_select().where(self.model_class.id.in_(ids))
        )
        return list(result.scalars().all())

    async def exists(self, id: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(self.model_class).where(
                self._get_scope_filter(), self.model_class.id == id
            )
        )
        return (result.scalar() or 0) > 0

    async def list_all(
        self,
        limit: int | None = None,
        offset: int | None = None,
        **filters: Any,
    ) -> list[T]:
        """List all records in the current scope.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            **filters: Additional field filters

        Returns:
            List of records, newest first
        """
        try:
            query = self._apply_filters(self._scoped_select(), filters)
            query = query.order_by(self.model_class.created_at.desc(), self.model_class.id)

            if offset is not None:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)

            result = await self.session.execute(query)
            records = list(result.scalars().all())

            self.audit_logger.log_list(
                self.resource_type,
                self.scopes,
                count=len(records),
                filters=filters,
                limit=limit,
                offset=offset,
            )
            return records
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type, self.scopes, str(e), operation="list_all", filters=filters
            )
            raise

    async def list_paginated(
        self, pagination: Pagination | None = None, **filters: Any
    ) -> PaginatedResult[T]:
        """List one page of records plus the page metadata."""
        pagination = pagination or Pagination()
        data = await self.list_all(limit=pagination.limit, offset=pagination.offset, **filters)
        total = await self.count(**filters)
        return PaginatedResult(data=data, pagination=PaginationInfo.build(pagination, total))

    async def count(self, **filters: Any) -> int:
        """Count records in the current scope."""
        query = select(func.count()).select_from(self.model_class).where(self._get_scope_filter())
        query = self._apply_filters(query, filters)
        result = await self.session.execute(query)
        return result.scalar() or 0

    # -- writes ------------------------------------------------------------

    async def create(self, **kwargs: Any) -> T:
        """Create a new record in the current scope.

        Scope columns are always taken from the repository scope.
        """
        try:
            kwargs.update(self._scope_values())
            record = self.model_class(**kwargs)

            self.session.add(record)
            await self.session.flush()

            self.audit_logger.log_create(
                self.resource_type, self.scopes, resource_id=kwargs.get("id"), resource_data=kwargs
            )
            return record
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type,
                self.scopes,
                str(e),
                resource_id=kwargs.get("id"),
                operation="create",
            )
            raise

    async def update(self, id: str, **kwargs: Any) -> T | None:
        """Update a record by ID within the current scope.

        Returns:
            The updated record if found, None otherwise
        """
        try:
            result = await self.session.execute(
                self._scoped_select().where(self.model_class.id == id)
            )
            record = result.scalar_one_or_none()
            if record is None:
                return None

            # Scope columns and identifiers never change through an update
            for field in (*self._scope_values().keys(), *self.immutable_fields):
                kwargs.pop(field, None)

            for field, value in kwargs.items():
                if hasattr(record, field):
                    setattr(record, field, value)
            record.updated_at = datetime.now()

            await self.session.flush()

            self.audit_logger.log_update(
                self.resource_type, self.scopes, resource_id=id, resource_data=kwargs
            )
            return record
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type, self.scopes, str(e), resource_id=id, operation="update"
            )
            raise

    async def update_or_raise(self, id: str, **kwargs: Any) -> T:
        record = await self.update(id, **kwargs)
        if record is None:
            raise ResourceNotFound(self.resource_type, id, self.scopes)
        return record

    async def upsert(self, id: str, **values: Any) -> T:
        """Insert or update a record atomically with ``INSERT ... ON CONFLICT``.

        The second write for the same key wins: every supplied column is
        overwritten, ``created_at`` is preserved.
        """
        try:
            now = datetime.now()
            row = {**values, **self._scope_values(), "id": id, "created_at": now, "updated_at": now}
            column_values = self._to_column_values(row)

            table = self.model_class.__table__
            primary_keys = [column.key for column in table.primary_key.columns]
            stmt = dialect_insert(self.session, table).values(**column_values)
            stmt = stmt.on_conflict_do_update(
                index_elements=primary_keys,
                set_={
                    key: stmt.excluded[key]
                    for key in column_values
                    if key not in primary_keys and key != "created_at"
                },
            )
            await self.session.execute(stmt)

            self.audit_logger.log_upsert(
                self.resource_type, self.scopes, resource_id=id, resource_data=values
            )
            return await self.reload(id)
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type, self.scopes, str(e), resource_id=id, operation="upsert"
            )
            raise

    async def reload(self, id: str) -> T | None:
        """Read a record bypassing stale identity-map state."""
        result = await self.session.execute(
            self._scoped_select()
            .where(self.model_class.id == id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete(self, id: str) -> bool:
        """Delete a record by ID within the current scope.

        Returns:
            True if a row was deleted, False if not found
        """
        try:
            result = await self.session.execute(
                delete(self.model_class).where(self._get_scope_filter(), self.model_class.id == id)
            )
            deleted = (result.rowcount or 0) > 0

            if deleted:
                self.audit_logger.log_delete(self.resource_type, self.scopes, resource_id=id)
            return deleted
        except Exception as e:
            self.audit_logger.log_error(
                self.resource_type, self.scopes, str(e), resource_id=id, operation="delete"
            )
            raise

    async def delete_or_raise(self, id: str) -> None:
        if not await self.delete(id):
            raise ResourceNotFound(self.resource_type, id, self.scopes)

    async def delete_where(self, **filters: Any) -> int:
        """Delete every record in scope matching ``filters``; returns the row count."""
        query = delete(self.model_class).where(self._get_scope_filter())
        for field, value in filters.items():
            column = getattr(self.model_class, field)
            if isinstance(value, list | tuple | set | frozenset):
                query = query.where(column.in_(list(value)))
            else:
                query = query.where(column == value)
        result = await self.session.execute(query)
        removed = result.rowcount or 0
        if removed:
            self.audit_logger.log_delete(
                self.resource_type, self.scopes, resource_id=None, filters=filters, count=removed
            )
        return removed

    async def find_one_by(self, **filters: Any) -> T | None:
        records = await self.list_all(limit=1, **filters)
        return records[0] if records else None

    def _to_column_values(self, values: dict[str, Any]) -> dict[str, Any]:
        """Translate ORM attribute names to table column keys."""
        attrs = self.model_class.__mapper__.column_attrs
        return {attrs[key].columns[0].key: value for key, value in values.items() if key in attrs}
