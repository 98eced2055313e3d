"""
Chat message ORM model.

Dependencies: sqlalchemy, agentchat.boundary.db.base
System role: Persisted conversation turns
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agentchat.boundary.db.base import Base, UUIDMixin, utc_now


class ChatMessageModel(Base, UUIDMixin):
    """
    One turn of a session. Rows are append-only.

    Attributes:
        session_id: Owning session
        role: user | assistant | system
        content: Message text
        attachments: Optional attachment descriptors
        created_at: Insert time (UTC)
    """

    __tablename__ = "chat_messages"

    session_id: Mapped[UUID] = mapped_column(
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list | None] = mapped_column(JSON, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )

    session = relationship("ChatSessionModel", back_populates="messages")
