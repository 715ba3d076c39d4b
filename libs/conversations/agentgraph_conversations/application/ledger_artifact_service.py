"""Recording of tool-produced artifacts for a task and context.

Writes must survive concurrent writers on SQLite: a bulk insert is tried
first, transient lock errors are retried, and when the batch still cannot be
written each artifact is inserted on its own, down to a minimal row.
"""

from collections.abc import Sequence
from datetime import datetime
from functools import partial
from typing import Any
from uuid import uuid4

from agentgraph_common.infrastructure.retry import retry_on_lock
from agentgraph_common.logging.context_logger import get_context_logger
from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_conversations.domain.models import LedgerArtifact
from agentgraph_conversations.domain.schemas import Artifact
from agentgraph_conversations.infrastructure.repository import LedgerArtifactRepository

SUMMARY_LENGTH = 200
DEFAULT_ARTIFACT_TYPE = "source"
DEFAULT_VISIBILITY = "context"
MINIMAL_COLUMNS = (
    "id",
    "tenant_id",
    "project_id",
    "task_id",
    "context_id",
    "type",
    "name",
    "created_at",
    "updated_at",
)
RECONCILED_COLUMNS = (
    "type",
    "description",
    "parts",
    "metadata_",
    "summary",
    "mime",
    "visibility",
    "allowed_agents",
    "derived_from",
)


def resolve_task_id(artifact: Artifact, task_id: str | None = None) -> str | None:
    """Explicit task id, then the artifact's own, then the one in its metadata."""
    if task_id:
        return task_id
    if artifact.task_id:
        return artifact.task_id
    metadata = artifact.metadata or {}
    return metadata.get("taskId") or metadata.get("task_id")


def to_artifact(row: LedgerArtifact) -> Artifact:
    return Artifact(
        artifact_id=row.id,
        task_id=row.task_id,
        type=row.type or DEFAULT_ARTIFACT_TYPE,
        name=row.name,
        description=row.description,
        parts=row.parts or [],
        metadata=row.metadata_ or {},
    )


class LedgerArtifactService:
    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        self.session = session
        self.scopes = scopes
        self.repository = LedgerArtifactRepository(session, scopes)
        self.logger = get_context_logger(__name__, scopes)

    def build_row(
        self, context_id: str, artifact: Artifact, task_id: str | None = None
    ) -> dict[str, Any]:
        metadata = artifact.metadata or {}
        now = datetime.now()
        return {
            "id": artifact.artifact_id or str(uuid4()),
            "tenant_id": self.scopes.tenant_id,
            "project_id": self.scopes.project_id,
            "task_id": resolve_task_id(artifact, task_id),
            "context_id": context_id,
            "type": artifact.type or DEFAULT_ARTIFACT_TYPE,
            "name": artifact.name,
            "description": artifact.description,
            "parts": [part.to_json_dict() for part in artifact.parts],
            "metadata_": artifact.metadata,
            "summary": artifact.description[:SUMMARY_LENGTH] if artifact.description else None,
            "mime": [part.kind for part in artifact.parts],
            "visibility": metadata.get("visibility") or DEFAULT_VISIBILITY,
            "allowed_agents": metadata.get("allowedAgents") or [],
            "derived_from": metadata.get("derivedFrom"),
            "created_at": now,
            "updated_at": now,
        }

    async def _insert_rows(self, rows: list[dict[str, Any]]) -> None:
        async with self.session.begin_nested():
            await self.session.execute(insert(LedgerArtifact), rows)

    async def add_ledger_artifacts(
        self,
        context_id: str,
        artifacts: Sequence[Artifact],
        task_id: str | None = None,
    ) -> list[LedgerArtifact]:
        """Store ``artifacts`` and return the resulting rows in input order.

        An artifact that already exists for the same task, context and name
        is updated in place and keeps its id.
        """
        if not artifacts:
            return []
        rows = [self.build_row(context_id, artifact, task_id) for artifact in artifacts]

        try:
            await retry_on_lock(
                partial(self._insert_rows, rows), operation_name="ledger artifact bulk insert"
            )
            ids = [row["id"] for row in rows]
        except IntegrityError as e:
            self.logger.warning(
                "Ledger artifact bulk insert hit existing rows, reconciling",
                extra={"context_id": context_id, "error": str(e.orig)},
            )
            ids = [await self._insert_one(row) for row in rows]
        except OperationalError as e:
            self.logger.error(
                "Ledger artifact bulk insert failed, inserting one by one",
                extra={"context_id": context_id, "error": str(e.orig)},
            )
            ids = [await self._insert_one(row) for row in rows]

        records = {record.id: record for record in await self.repository.get_by_ids(ids)}
        return [records[id] for id in ids if id in records]

    async def _insert_one(self, row: dict[str, Any]) -> str:
        try:
            await retry_on_lock(
                partial(self._insert_rows, [row]), operation_name="ledger artifact insert"
            )
            return row["id"]
        except IntegrityError:
            reconciled_id = await self._reconcile(row)
            if reconciled_id is None:
                raise
            return reconciled_id
        except OperationalError as e:
            self.logger.error(
                "Ledger artifact insert failed, storing minimal row",
                extra={"artifact_id": row["id"], "error": str(e.orig)},
            )
            minimal = {column: row[column] for column in MINIMAL_COLUMNS}
            await retry_on_lock(
                partial(self._insert_rows, [minimal]),
                operation_name="ledger artifact minimal insert",
            )
            return row["id"]

    async def _reconcile(self, row: dict[str, Any]) -> str | None:
        existing = await self.repository.get_by_natural_key(
            row["task_id"], row["context_id"], row["name"]
        )
        if existing is None:
            existing = await self.repository.reload(row["id"])
        if existing is None:
            return None
        await self.repository.update(
            existing.id, **{column: row[column] for column in RECONCILED_COLUMNS}
        )
        return existing.id

    async def get_artifacts(
        self, task_id: str | None = None, artifact_id: str | None = None
    ) -> list[Artifact]:
        rows = await self.repository.get_artifacts(task_id, artifact_id)
        return [to_artifact(row) for row in rows]

    async def list_by_context(self, context_id: str) -> list[Artifact]:
        return [to_artifact(row) for row in await self.repository.list_by_context(context_id)]

    async def delete_by_task(self, task_id: str) -> bool:
        return await self.repository.delete_by_task(task_id)

    async def delete_by_context(self, context_id: str) -> bool:
        return await self.repository.delete_by_context(context_id)

    async def count_by_task(self, task_id: str) -> int:
        return await self.repository.count_by_task(task_id)
