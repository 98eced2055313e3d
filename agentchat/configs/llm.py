"""
Chat model configuration.

Dependencies: pydantic, pydantic_settings
System role: LLM configuration for streaming answers and title generation
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Chat model settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    model_id: str = Field(default="gemini-2.5-flash", description="Google chat model ID")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=2000, gt=0, description="Maximum output tokens")
    title_max_chars: int = Field(default=20, gt=0, description="Maximum generated title length")
    default_persona: str = Field(
        default="You are a helpful AI assistant.",
        description="System persona used when the agent has none configured",
    )
