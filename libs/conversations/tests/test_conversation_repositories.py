import pytest
from agentgraph_common.base.pagination import Pagination
from agentgraph_conversations.domain.models import Message
from agentgraph_conversations.domain.schemas import (
    ConversationCreate,
    MessageContent,
    MessageCreate,
    TaskCreate,
)
from agentgraph_conversations.infrastructure.repository import (
    ConversationRepository,
    MessageRepository,
    TaskRelationRepository,
    TaskRepository,
    fit_to_token_budget,
    message_text,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def conversations(db_session, project_scope, project):
    return ConversationRepository(db_session, project_scope)


@pytest.fixture
def messages(db_session, project_scope, project):
    return MessageRepository(db_session, project_scope)


async def add_messages(messages, count: int, text: str = "x" * 40):
    for index in range(count):
        await messages.create_message(
            MessageCreate(
                id=f"m{index:02d}",
                conversation_id="conv-1",
                role="user" if index % 2 == 0 else "agent",
                content=MessageContent(text=text),
            )
        )


async def add_internal_message(messages):
    await messages.create_message(
        MessageCreate(
            id="internal-1",
            conversation_id="conv-1",
            role="agent",
            content=MessageContent(text="delegating"),
            visibility="internal",
            fromSubAgentId="router",
            toSubAgentId="writer",
        )
    )


class TestMessageText:
    def test_text_wins(self):
        assert message_text({"text": "hi", "parts": [{"kind": "text", "text": "ignored"}]}) == "hi"

    def test_text_parts_are_joined(self):
        content = {
            "parts": [
                {"kind": "text", "text": "a"},
                {"kind": "data"},
                {"kind": "text", "text": "b"},
            ]
        }
        assert message_text(content) == "ab"

    def test_empty(self):
        assert message_text(None) == ""


class TestConversationRepository:
    async def test_create_or_get(self, conversations):
        created = await conversations.create_or_get(
            ConversationCreate(id="conv-1", activeSubAgentId="router", title="Hello")
        )
        again = await conversations.create_or_get(
            ConversationCreate(id="conv-1", activeSubAgentId="router")
        )

        assert again.id == created.id
        assert again.title == "Hello"
        assert await conversations.count() == 1

    async def test_create_or_get_switches_active_sub_agent(self, conversations):
        for sub_agent_id in ("router", "writer"):
            await conversations.create_or_get(
                ConversationCreate(id="conv-1", activeSubAgentId=sub_agent_id)
            )

        assert await conversations.get_active_sub_agent("conv-1") == "writer"

    async def test_set_active_sub_agent_creates_conversation(self, conversations):
        await conversations.set_active_sub_agent("conv-2", "router")
        assert await conversations.get_active_sub_agent("conv-2") == "router"
        assert await conversations.get_active_sub_agent("missing") is None


class TestMessageRepository:
    async def test_messages_are_chronological(self, messages):
        await add_messages(messages, 3)

        listed = await messages.list_by_conversation("conv-1")

        assert [m.id for m in listed] == ["m00", "m01", "m02"]
        assert listed[0].content == {"text": "x" * 40}
        assert await messages.count_by_conversation("conv-1") == 3

    async def test_visible_messages_are_paginated(self, messages):
        await add_messages(messages, 3)
        await add_internal_message(messages)

        result = await messages.get_visible_messages(
            "conv-1", pagination=Pagination(page=1, limit=2)
        )

        assert [m.id for m in result.data] == ["m00", "m01"]
        assert result.pagination.total == 3
        assert result.pagination.pages == 2

    async def test_history_keeps_latest_messages(self, messages):
        await add_messages(messages, 5)

        history = await messages.get_history("conv-1", limit=3)

        assert [m.id for m in history] == ["m02", "m03", "m04"]

    async def test_history_hides_internal_messages(self, messages):
        await add_messages(messages, 2)
        await add_internal_message(messages)

        assert [m.id for m in await messages.get_history("conv-1")] == ["m00", "m01"]
        included = await messages.get_history("conv-1", include_internal=True)
        assert "internal-1" in [m.id for m in included]

    async def test_history_filters_message_types(self, messages):
        await add_messages(messages, 2)
        await messages.create_message(
            MessageCreate(
                id="tool-1",
                conversation_id="conv-1",
                role="agent",
                content=MessageContent(text="tool output"),
                messageType="tool-result",
            )
        )

        history = await messages.get_history("conv-1", message_types=["tool-result"])

        assert [m.id for m in history] == ["tool-1"]

    async def test_history_truncated_to_token_budget(self, messages):
        await add_messages(messages, 4)

        history = await messages.get_history("conv-1", max_output_tokens=25)

        assert [m.id for m in history[1:]] == ["m02", "m03"]
        summary = history[0]
        assert summary.id.startswith("summary-")
        assert summary.role == "system"
        assert summary.content["text"] == (
            "[Previous conversation history truncated - 2 earlier messages]"
        )
        assert await messages.count_by_conversation("conv-1") == 4


class TestFitToTokenBudget:
    def test_everything_fits(self):
        history = [Message(id="a", content={"text": "x" * 8}), Message(id="b", content={})]
        assert fit_to_token_budget(history, 10) == history

    def test_dropping_only_the_oldest_adds_no_summary(self):
        history = [
            Message(id="a", content={"text": "x" * 40}),
            Message(id="b", content={"text": "x" * 8}),
        ]
        assert [m.id for m in fit_to_token_budget(history, 5)] == ["b"]


class TestTaskRepositories:
    async def test_task_lifecycle(self, db_session, project_scope, project):
        tasks = TaskRepository(db_session, project_scope)
        await tasks.create_task(TaskCreate(id="task-1", contextId="conv-1", subAgentId="router"))

        updated = await tasks.update_status("task-1", "completed", metadata={"steps": 3})

        assert updated.status == "completed"
        assert updated.metadata_ == {"steps": 3}
        assert [t.id for t in await tasks.list_by_context("conv-1")] == ["task-1"]

    async def test_task_relations(self, db_session, project_scope, project):
        relations = TaskRelationRepository(db_session, project_scope)
        await relations.create_relation("task-1", "task-2")
        await relations.create_relation("task-1", "task-3")

        children = await relations.list_children("task-1")

        assert sorted(r.child_task_id for r in children) == ["task-2", "task-3"]
        assert [r.parent_task_id for r in await relations.list_parents("task-2")] == ["task-1"]
