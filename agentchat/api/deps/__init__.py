from agentchat.api.deps.dependencies import (
    ServiceCache,
    get_chat_service,
    get_coordinator,
    get_service_cache,
)

__all__ = ["ServiceCache", "get_service_cache", "get_chat_service", "get_coordinator"]
