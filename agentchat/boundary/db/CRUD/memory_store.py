"""
Long-term memory reader.

Renders a user's active memory items as a bulleted summary for the
context assembler.

Dependencies: sqlalchemy, agentchat.boundary.db
System role: Memory context source
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from agentchat.boundary.db.models import MemoryModel
from agentchat.core.exceptions import ContextSourceUnavailableError
from agentchat.models.conversation import MemoryItem

logger = logging.getLogger(__name__)


class MemoryStore:
    """Read-only access to memory items."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def get_active_items(self, user_id: str, limit: int = 10) -> list[MemoryItem]:
        """Active items for `user_id`, most recent first."""
        stmt = (
            select(MemoryModel)
            .where(MemoryModel.user_id == user_id, MemoryModel.active.is_(True))
            .order_by(MemoryModel.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise ContextSourceUnavailableError(
                f"Failed to load memories: {e}", source="memory"
            ) from e
        return [
            MemoryItem(user_id=row.user_id, content=row.content, category=row.category, active=row.active)
            for row in rows
        ]

    async def get_memory_summary(self, user_id: str, limit: int = 10) -> str:
        """
        Returns:
            str: One `- [category] content` line per item, or "" when none
        """
        items = await self.get_active_items(user_id, limit)
        return "\n".join(f"- [{item.category}] {item.content}" for item in items)
