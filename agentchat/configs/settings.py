"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from agentchat.configs.base import BaseSettings
from agentchat.configs.database import DatabaseSettings
from agentchat.configs.index import IndexSettings
from agentchat.configs.llm import LLMSettings
from agentchat.configs.observability import ObservabilitySettings
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.configs.streaming import StreamingSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    index: IndexSettings = Field(default_factory=IndexSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    streaming: StreamingSettings = Field(default_factory=StreamingSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables are read once; call `get_settings.cache_clear()`
    to reload.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
