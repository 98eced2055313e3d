"""
Long-term memory ORM model.

Rows are written by the memory extraction process; this package only
reads them.

Dependencies: sqlalchemy, agentchat.boundary.db.base
System role: User memory facts injected into prompts
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentchat.boundary.db.base import Base, TimestampMixin, UUIDMixin


class MemoryModel(Base, UUIDMixin, TimestampMixin):
    """A remembered fact about a user."""

    __tablename__ = "memories"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
