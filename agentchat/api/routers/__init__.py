from agentchat.api.routers.chat_stream import router as chat_stream_router
from agentchat.api.routers.health import router as health_router

__all__ = ["chat_stream_router", "health_router"]
