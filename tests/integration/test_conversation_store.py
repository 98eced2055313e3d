"""
Integration tests for ConversationStore on SQLite.

System role: Verification of turn persistence against a real database
"""

import uuid

import pytest
from sqlalchemy.exc import OperationalError
from unittest.mock import MagicMock

from agentchat.boundary.db.CRUD.conversation_store import ConversationStore
from agentchat.core.exceptions import PersistenceError
from agentchat.models.conversation import TurnRole


class TestConversationStore:
    """Integration test suite for ConversationStore."""

    @pytest.mark.asyncio
    async def test_create_session_should_use_default_title(self, session_factory) -> None:
        store = ConversationStore(session_factory)

        session_id = await store.create_session(user_id="u-1", agent_id="tutor")

        assert await store.session_exists(session_id) is True
        assert await store.get_title(session_id) == "New chat"
        assert await store.session_exists(uuid.uuid4()) is False

    @pytest.mark.asyncio
    async def test_save_turn_should_return_turn_ids_in_history_order(self, session_factory) -> None:
        # Arrange
        store = ConversationStore(session_factory)
        session_id = await store.create_session()

        # Act
        first = await store.save_turn(session_id, TurnRole.USER, "When is the exam?")
        second = await store.save_turn(session_id, TurnRole.ASSISTANT, "May 1.")
        turns = await store.get_recent_turns(session_id)

        # Assert
        assert first != second
        assert [(t.role, t.content) for t in turns] == [
            (TurnRole.USER, "When is the exam?"),
            (TurnRole.ASSISTANT, "May 1."),
        ]

    @pytest.mark.asyncio
    async def test_get_recent_turns_should_keep_most_recent_oldest_first(self, session_factory) -> None:
        store = ConversationStore(session_factory)
        session_id = await store.create_session()
        for n in range(5):
            await store.save_turn(session_id, TurnRole.USER, f"m{n}")

        turns = await store.get_recent_turns(session_id, limit=2)

        assert [t.content for t in turns] == ["m3", "m4"]
        assert await store.get_recent_turns(session_id, limit=0) == []

    @pytest.mark.asyncio
    async def test_get_recent_turns_should_not_mix_sessions(self, session_factory) -> None:
        store = ConversationStore(session_factory)
        session_a = await store.create_session()
        session_b = await store.create_session()
        await store.save_turn(session_a, TurnRole.USER, "for a")
        await store.save_turn(session_b, TurnRole.USER, "for b")

        turns = await store.get_recent_turns(session_a)

        assert [t.content for t in turns] == ["for a"]

    @pytest.mark.asyncio
    async def test_set_title_and_touch_should_update_session(self, session_factory) -> None:
        store = ConversationStore(session_factory)
        session_id = await store.create_session()

        await store.set_title(session_id, "Exam dates")
        await store.touch_session(session_id)

        assert await store.get_title(session_id) == "Exam dates"

    @pytest.mark.asyncio
    async def test_save_turn_should_wrap_database_errors(self) -> None:
        # Arrange
        factory = MagicMock(side_effect=OperationalError("INSERT", {}, ConnectionError("down")))
        store = ConversationStore(factory)

        # Act / Assert
        with pytest.raises(PersistenceError):
            await store.save_turn(uuid.uuid4(), TurnRole.ASSISTANT, "text")
