"""
Observability configuration settings.

Settings for Langfuse prompt registry access.

Dependencies: pydantic_settings
System role: Observability configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class ObservabilitySettings(BaseSettings):
    """Langfuse configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LANGFUSE_",
        case_sensitive=False,
        extra="ignore",
    )

    public_key: str | None = Field(default=None, description="Langfuse public key")
    secret_key: str | None = Field(default=None, description="Langfuse secret key")
    host: str = Field(default="http://localhost:3000", description="Langfuse server host URL")
    enabled: bool = Field(default=True, description="Use Langfuse when keys are configured")
    prompt_label: str | None = Field(default=None, description="Prompt label to fetch (e.g. production)")
