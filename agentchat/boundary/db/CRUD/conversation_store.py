"""
Conversation persistence used by the chat service and streaming coordinator.

Each call opens its own session from the injected factory, so the
coordinator can persist an assistant turn after the HTTP request that
started the turn has finished. SQLAlchemy errors are wrapped in
PersistenceError.

Dependencies: sqlalchemy, agentchat.boundary.db
System role: Conversation turn store
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from agentchat.boundary.db.base import utc_now
from agentchat.boundary.db.CRUD.session_crud import chat_message_crud, chat_session_crud
from agentchat.core.exceptions import PersistenceError
from agentchat.models.conversation import ConversationTurn, TurnRole

logger = logging.getLogger(__name__)


class ConversationStore:
    """Session-scoped turn storage."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def create_session(
        self,
        user_id: str | None = None,
        agent_id: str | None = None,
        title: str | None = None,
    ) -> UUID:
        """Create a session row and return its ID."""
        fields = {"user_id": user_id, "agent_id": agent_id}
        if title:
            fields["title"] = title
        try:
            async with self._session_factory() as session:
                row = await chat_session_crud.create(session, **fields)
                await session.commit()
                return row.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create session: {e}") from e

    async def session_exists(self, session_id: UUID) -> bool:
        try:
            async with self._session_factory() as session:
                return await chat_session_crud.get_by_id(session, session_id) is not None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load session {session_id}: {e}") from e

    async def get_title(self, session_id: UUID) -> str | None:
        try:
            async with self._session_factory() as session:
                row = await chat_session_crud.get_by_id(session, session_id)
                return row.title if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load session {session_id}: {e}") from e

    async def save_turn(
        self,
        session_id: UUID,
        role: TurnRole | str,
        content: str,
        attachments: list[dict] | None = None,
    ) -> UUID:
        """
        Append one turn to a session.

        Returns:
            UUID: ID of the stored turn

        Raises:
            PersistenceError: On any database failure
        """
        role_value = role.value if isinstance(role, TurnRole) else str(role)
        try:
            async with self._session_factory() as session:
                row = await chat_message_crud.create(
                    session,
                    session_id=session_id,
                    role=role_value,
                    content=content,
                    attachments=attachments,
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to save {role_value} turn: {e}",
                details={"session_id": str(session_id)},
            ) from e
        logger.debug(f"{__name__}:save_turn - session_id={session_id} role={role_value} len={len(content)}")
        return row.id

    async def touch_session(self, session_id: UUID) -> None:
        """Bump the session's updated_at."""
        try:
            async with self._session_factory() as session:
                await chat_session_crud.update_by_id(session, session_id, updated_at=utc_now())
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to touch session {session_id}: {e}") from e

    async def set_title(self, session_id: UUID, title: str) -> None:
        try:
            async with self._session_factory() as session:
                await chat_session_crud.update_by_id(session, session_id, title=title)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to set title for session {session_id}: {e}") from e

    async def get_recent_turns(self, session_id: UUID, limit: int = 20) -> list[ConversationTurn]:
        """
        Load prior turns, oldest to newest.

        Args:
            session_id: Session UUID
            limit: Maximum number of turns (most recent kept)
        """
        if limit <= 0:
            return []
        try:
            async with self._session_factory() as session:
                rows = await chat_message_crud.get_recent(session, session_id, limit)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to load history for session {session_id}: {e}") from e
        return [
            ConversationTurn(
                session_id=row.session_id,
                role=TurnRole(row.role),
                content=row.content,
                attachments=row.attachments,
                created_at=row.created_at,
            )
            for row in rows
        ]
