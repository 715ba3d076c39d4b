import math
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import uuid4

from agentgraph_common.base.pagination import Pagination, PaginatedResult, PaginationInfo
from agentgraph_common.base.repository import ScopedRepository
from agentgraph_common.scopes.context import ProjectScope
from sqlalchemy.ext.asyncio import AsyncSession

from agentgraph_conversations.domain.models import (
    Conversation,
    LedgerArtifact,
    Message,
    Task,
    TaskRelation,
)
from agentgraph_conversations.domain.schemas import (
    CHARS_PER_TOKEN,
    DEFAULT_HISTORY_LIMIT,
    USER_FACING,
    ConversationCreate,
    MessageCreate,
    TaskCreate,
)


def message_text(content: dict[str, Any] | None) -> str:
    """Plain text of a message body: ``text`` or the concatenated text parts."""
    if not content:
        return ""
    if content.get("text"):
        return content["text"]
    parts = content.get("parts") or []
    return "".join(part.get("text") or "" for part in parts if part.get("kind") == "text")


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def fit_to_token_budget(history: Sequence[Message], max_tokens: int) -> list[Message]:
    """Keep the newest messages that fit into ``max_tokens``.

    When older messages are dropped, a transient system message announcing
    how many were cut is put in front of the kept ones.
    """
    kept: list[Message] = []
    total = 0
    for index in range(len(history) - 1, -1, -1):
        message = history[index]
        tokens = estimate_tokens(message_text(message.content))
        if total + tokens > max_tokens:
            if index > 0:
                kept.insert(
                    0,
                    Message(
                        id=f"summary-{uuid4()}",
                        role="system",
                        content={
                            "text": "[Previous conversation history truncated - "
                            f"{index + 1} earlier messages]"
                        },
                        visibility="system",
                        message_type="chat",
                        created_at=history[0].created_at,
                    ),
                )
            break
        kept.insert(0, message)
        total += tokens
    return kept


class ConversationRepository(ScopedRepository[Conversation]):
    resource_type = "conversation"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, Conversation, scopes)

    async def create_or_get(self, data: ConversationCreate) -> Conversation:
        """Return the conversation, switching its active sub-agent if it differs."""
        existing = await self.get_by_id(data.id)
        if existing is None:
            return await self.create(
                id=data.id,
                user_id=data.user_id,
                active_sub_agent_id=data.active_sub_agent_id,
                title=data.title,
                metadata_=data.metadata,
            )
        if existing.active_sub_agent_id != data.active_sub_agent_id:
            return await self.update(existing.id, active_sub_agent_id=data.active_sub_agent_id)
        return existing

    async def get_active_sub_agent(self, conversation_id: str) -> str | None:
        conversation = await self.get_by_id(conversation_id)
        return conversation.active_sub_agent_id if conversation else None

    async def set_active_sub_agent(self, conversation_id: str, sub_agent_id: str) -> Conversation:
        return await self.upsert(conversation_id, active_sub_agent_id=sub_agent_id)


class MessageRepository(ScopedRepository[Message]):
    resource_type = "message"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, Message, scopes)

    async def create_message(self, data: MessageCreate) -> Message:
        values = data.model_dump(exclude={"id", "content", "metadata"})
        return await self.create(
            id=data.id or str(uuid4()),
            content=data.content.to_json_dict(),
            metadata_=data.metadata,
            **values,
        )

    async def _list_chronological(
        self, pagination: Pagination | None = None, **filters: Any
    ) -> list[Message]:
        query = self._apply_filters(self._scoped_select(), filters).order_by(
            Message.created_at.asc(), Message.id
        )
        if pagination is not None:
            query = query.limit(pagination.limit).offset(pagination.offset)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_by_conversation(
        self, conversation_id: str, pagination: Pagination | None = None
    ) -> list[Message]:
        """Messages of a conversation, oldest first."""
        return await self._list_chronological(pagination, conversation_id=conversation_id)

    async def list_by_task(self, task_id: str) -> list[Message]:
        return await self._list_chronological(task_id=task_id)

    async def get_visible_messages(
        self,
        conversation_id: str,
        visibility: Iterable[str] = (USER_FACING,),
        pagination: Pagination | None = None,
    ) -> PaginatedResult[Message]:
        pagination = pagination or Pagination()
        filters = {"conversation_id": conversation_id, "visibility": list(visibility)}
        data = await self._list_chronological(pagination, **filters)
        total = await self.count(**filters)
        return PaginatedResult(data=data, pagination=PaginationInfo.build(pagination, total))

    async def count_by_conversation(self, conversation_id: str) -> int:
        return await self.count(conversation_id=conversation_id)

    async def get_history(
        self,
        conversation_id: str,
        limit: int | None = None,
        include_internal: bool = False,
        max_output_tokens: int | None = None,
        message_types: Sequence[str] | None = None,
    ) -> list[Message]:
        """The latest ``limit`` messages of a conversation in chronological order.

        Internal messages are left out unless ``include_internal`` is set.
        With ``max_output_tokens`` the oldest messages are dropped until the
        estimated size fits.
        """
        query = self._scoped_select().where(Message.conversation_id == conversation_id)
        if not include_internal:
            query = query.where(Message.visibility == USER_FACING)
        if message_types:
            query = query.where(Message.message_type.in_(list(message_types)))
        query = query.order_by(Message.created_at.desc(), Message.id.desc()).limit(
            limit or DEFAULT_HISTORY_LIMIT
        )
        result = await self.session.execute(query)
        history = list(reversed(result.scalars().all()))
        if max_output_tokens:
            return fit_to_token_budget(history, max_output_tokens)
        return history


class TaskRepository(ScopedRepository[Task]):
    resource_type = "task"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, Task, scopes)

    async def create_task(self, data: TaskCreate) -> Task:
        return await self.create(
            id=data.id,
            context_id=data.context_id,
            sub_agent_id=data.sub_agent_id,
            status=data.status,
            metadata_=data.metadata,
        )

    async def update_status(
        self, task_id: str, status: str, metadata: dict[str, Any] | None = None
    ) -> Task | None:
        values: dict[str, Any] = {"status": status}
        if metadata is not None:
            values["metadata_"] = metadata
        return await self.update(task_id, **values)

    async def list_by_context(self, context_id: str) -> list[Task]:
        return await self.list_all(context_id=context_id)


class TaskRelationRepository(ScopedRepository[TaskRelation]):
    resource_type = "task_relation"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, TaskRelation, scopes)

    async def create_relation(
        self, parent_task_id: str, child_task_id: str, relation_type: str = "parent_child"
    ) -> TaskRelation:
        return await self.create(
            id=str(uuid4()),
            parent_task_id=parent_task_id,
            child_task_id=child_task_id,
            relation_type=relation_type,
        )

    async def list_children(self, parent_task_id: str) -> list[TaskRelation]:
        return await self.list_all(parent_task_id=parent_task_id)

    async def list_parents(self, child_task_id: str) -> list[TaskRelation]:
        return await self.list_all(child_task_id=child_task_id)


class LedgerArtifactRepository(ScopedRepository[LedgerArtifact]):
    resource_type = "ledger_artifact"

    def __init__(self, session: AsyncSession, scopes: ProjectScope):
        super().__init__(session, LedgerArtifact, scopes)

    async def get_artifacts(
        self, task_id: str | None = None, artifact_id: str | None = None
    ) -> list[LedgerArtifact]:
        if not task_id and not artifact_id:
            raise ValueError("Either task_id or artifact_id must be provided")
        query = self._scoped_select()
        if task_id:
            query = query.where(LedgerArtifact.task_id == task_id)
        if artifact_id:
            query = query.where(LedgerArtifact.id == artifact_id)
        result = await self.session.execute(
            query.order_by(LedgerArtifact.created_at, LedgerArtifact.id).execution_options(
                populate_existing=True
            )
        )
        return list(result.scalars().all())

    async def get_by_natural_key(
        self, task_id: str | None, context_id: str, name: str | None
    ) -> LedgerArtifact | None:
        query = self._apply_filters(
            self._scoped_select(), {"task_id": task_id, "context_id": context_id, "name": name}
        )
        result = await self.session.execute(query.execution_options(populate_existing=True))
        return result.scalars().first()

    async def list_by_context(self, context_id: str) -> list[LedgerArtifact]:
        return await self.list_all(context_id=context_id)

    async def delete_by_task(self, task_id: str) -> bool:
        return await self.delete_where(task_id=task_id) > 0

    async def delete_by_context(self, context_id: str) -> bool:
        return await self.delete_where(context_id=context_id) > 0

    async def count_by_task(self, task_id: str) -> int:
        return await self.count(task_id=task_id)
