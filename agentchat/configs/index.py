"""
Index configuration settings.

Chunking, embedding and index-store selection for the document index.

Dependencies: pydantic, pydantic_settings
System role: Document index configuration for ingestion and retrieval
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class IndexSettings(BaseSettings):
    """Index store (in-memory for dev, pgvector for prod) and chunking settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INDEX_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="memory",
        description="Index store type: 'memory' for local dev, 'postgres' for pgvector",
    )
    table_name: str = Field(default="documents", description="Chunk table name")
    hybrid_function: str = Field(
        default="hybrid_search_documents",
        description="SQL function scoring vector + keyword relevance",
    )
    vector_function: str = Field(
        default="match_documents",
        description="SQL function for vector-only fallback search",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(default=1024, description="Embedding vector dimension")

    chunk_size: int = Field(default=1000, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(default=200, description="Overlap between consecutive chunks")

    keyword_weight: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Share of the keyword score in the blended hybrid score",
    )
    default_department: str = Field(default="general", description="Fallback department tag")
    department_rules: list[tuple[str, str]] = Field(
        default_factory=lambda: [
            ("信息与控制", "信息与控制工程学院"),
            ("信控", "信息与控制工程学院"),
            ("教务处", "教务处"),
            ("academic affairs", "academic affairs"),
            ("admissions", "admissions"),
            ("graduate", "graduate school"),
        ],
        description="Ordered (substring, department) rules used to tag chunks",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "IndexSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
