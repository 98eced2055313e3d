from agentchat.boundary.db.CRUD.base_crud import BaseCRUD
from agentchat.boundary.db.CRUD.conversation_store import ConversationStore
from agentchat.boundary.db.CRUD.memory_store import MemoryStore
from agentchat.boundary.db.CRUD.session_crud import (
    ChatMessageCRUD,
    ChatSessionCRUD,
    chat_message_crud,
    chat_session_crud,
)

__all__ = [
    "BaseCRUD",
    "ChatSessionCRUD",
    "ChatMessageCRUD",
    "chat_session_crud",
    "chat_message_crud",
    "ConversationStore",
    "MemoryStore",
]
