"""
Chunk domain models.

Document chunks as written by the indexer and rows as returned by the
index store.

Dependencies: pydantic, hashlib
System role: Data structures for the document index
"""

import hashlib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChunkMetadata(BaseModel):
    """Metadata attached to every indexed chunk."""

    source_id: str = Field(description="Owning source document; ingestion is keyed by it")
    sequence_no: int = Field(ge=0, description="Position of the chunk within its source")
    total_chunks: int | None = Field(default=None, ge=1, description="Chunk count of the source")
    year: int | None = Field(default=None, description="4-digit year found in the source name or text")
    department: str | None = Field(default=None, description="Coarse department / category guess")
    keyword_tags: str = Field(default="", description="Synthesized keywords for keyword search")
    extra: dict[str, Any] = Field(default_factory=dict, description="Caller-supplied source metadata")

    @property
    def source_label(self) -> str:
        """Human-readable label used when citing the chunk in a prompt."""
        return str(self.extra.get("title") or self.source_id)


class DocumentChunk(BaseModel):
    """Immutable unit of indexed text."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Content-addressed chunk identifier")
    content: str = Field(description="Chunk text content")
    embedding: list[float] = Field(description="Embedding vector")
    metadata: ChunkMetadata

    @staticmethod
    def make_id(source_id: str, sequence_no: int, content: str) -> str:
        """
        Generate deterministic chunk ID.

        Returns:
            str: SHA-256 prefix (16 hex chars) of source, position and content
        """
        hash_input = f"{source_id}:{sequence_no}:{content}"
        return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()[:16]


class IndexRow(BaseModel):
    """Single row returned by an index store search."""

    id: str = Field(description="Chunk identifier")
    content: str = Field(description="Chunk text content")
    metadata: ChunkMetadata
    similarity: float = Field(description="Vector similarity against the query embedding")
    keyword_score: float | None = Field(default=None, description="Keyword relevance (hybrid path only)")
    combined_score: float | None = Field(default=None, description="Blended score (hybrid path only)")
