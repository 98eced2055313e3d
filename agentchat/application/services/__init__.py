from agentchat.application.services.chat_service import ChatService

__all__ = ["ChatService"]
