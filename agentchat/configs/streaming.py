"""
Streaming coordinator configuration.

Dependencies: pydantic, pydantic_settings
System role: Retention of finished generation state
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class StreamingSettings(BaseSettings):
    """How long finished turns stay readable through `/state` and re-attach."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STREAMING_",
        case_sensitive=False,
        extra="ignore",
    )

    state_ttl_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Seconds a completed or failed turn is kept in memory",
    )
    max_retained_states: int = Field(
        default=1000,
        ge=0,
        description="Upper bound on finished turns kept in memory; oldest are dropped first",
    )
