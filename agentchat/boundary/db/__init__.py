"""
Database boundary layer: ORM models, CRUD operations and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - create_engine_from_settings(), create_session_factory(), create_tables()
  - ChatSessionModel, ChatMessageModel, MemoryModel
  - ConversationStore, MemoryStore: collaborators used by the chat flow

Dependencies: sqlalchemy, agentchat.configs
"""

from agentchat.boundary.db.base import Base, TimestampMixin, UUIDMixin
from agentchat.boundary.db.connection import (
    create_engine_from_settings,
    create_session_factory,
    create_tables,
)
from agentchat.boundary.db.models import ChatMessageModel, ChatSessionModel, MemoryModel
from agentchat.boundary.db.CRUD import ConversationStore, MemoryStore

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "create_engine_from_settings",
    "create_session_factory",
    "create_tables",
    "ChatSessionModel",
    "ChatMessageModel",
    "MemoryModel",
    "ConversationStore",
    "MemoryStore",
]
