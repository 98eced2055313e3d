"""
Database configuration settings.

PostgreSQL connection parameters shared by the conversation store, the
memory store and the pgvector index store.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL user")
    password: str = Field(default="postgres", description="PostgreSQL password")
    db: str = Field(default="agentchat", description="PostgreSQL database name")

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
    ssl: bool = Field(default=False, description="Require SSL (hosted databases)")
    auto_create_tables: bool = Field(default=False, description="Create ORM tables at startup (dev)")

    url_override: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL; wins over the individual fields",
    )

    @property
    def async_database_url(self) -> str:
        """
        Construct async PostgreSQL connection URL.

        Returns:
            str: SQLAlchemy async URL (asyncpg driver)
        """
        if self.url_override:
            return self.url_override
        ssl_param = "?ssl=require" if self.ssl else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}{ssl_param}"
        )
