"""
Base CRUD operations for SQLAlchemy models.

Generic create / read / update helpers shared by the session and message
CRUD classes. Callers own the session and the transaction.

Dependencies: sqlalchemy
System role: Foundation for database CRUD operations
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agentchat.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic CRUD for one model class.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert a row and return it with generated ID and defaults.

        Args:
            session: Async database session
            **kwargs: Model field values
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_by_id(self, session: AsyncSession, id: UUID, **kwargs) -> int:
        """
        Update a row by primary key.

        Returns:
            int: Number of rows updated (0 when the ID is unknown)
        """
        stmt = update(self.model).where(self.model.id == id).values(**kwargs)
        result = await session.execute(stmt)
        return result.rowcount or 0
