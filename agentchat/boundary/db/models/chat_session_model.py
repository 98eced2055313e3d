"""
Chat session ORM model.

Dependencies: sqlalchemy, agentchat.boundary.db.base
System role: Session record owning the conversation turns
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agentchat.boundary.db.base import Base, TimestampMixin, UUIDMixin

DEFAULT_SESSION_TITLE = "New chat"


class ChatSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    One conversation between a user and an agent persona.

    Attributes:
        user_id: Owner of the session (opaque, from the auth layer)
        agent_id: Persona the session talks to
        title: Display title; generated after the first turn
        messages: Turns in this session (cascade delete)
    """

    __tablename__ = "chat_sessions"

    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    agent_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_SESSION_TITLE)

    messages = relationship(
        "ChatMessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
    )
