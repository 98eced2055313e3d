from agentchat.boundary.db.models.chat_message_model import ChatMessageModel
from agentchat.boundary.db.models.chat_session_model import ChatSessionModel
from agentchat.boundary.db.models.memory_model import MemoryModel

__all__ = ["ChatSessionModel", "ChatMessageModel", "MemoryModel"]
