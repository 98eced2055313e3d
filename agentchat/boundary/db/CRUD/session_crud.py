"""
Chat session and message CRUD.

Dependencies: sqlalchemy, agentchat.boundary.db
System role: Row-level access for sessions and turns
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentchat.boundary.db.CRUD.base_crud import BaseCRUD
from agentchat.boundary.db.models import ChatMessageModel, ChatSessionModel


class ChatSessionCRUD(BaseCRUD[ChatSessionModel]):
    """CRUD for chat sessions."""

    def __init__(self) -> None:
        super().__init__(ChatSessionModel)


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD for chat messages."""

    def __init__(self) -> None:
        super().__init__(ChatMessageModel)

    async def get_recent(
        self,
        session: AsyncSession,
        session_id: UUID,
        limit: int,
    ) -> Sequence[ChatMessageModel]:
        """
        Return the last `limit` messages of a session, oldest first.
        """
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        rows = list(result.scalars().all())
        rows.reverse()
        return rows


chat_session_crud = ChatSessionCRUD()
chat_message_crud = ChatMessageCRUD()
