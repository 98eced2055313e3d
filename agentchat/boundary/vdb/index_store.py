"""
Index store protocol.

Read-many / append-only contract shared by the in-memory and pgvector
stores. Rows come back ordered: blended score for `hybrid_search`, vector
similarity for `vector_search`.

Dependencies: typing
System role: Index store interface consumed by the retriever and indexer
"""

from typing import Protocol, runtime_checkable

from agentchat.models.chunk import DocumentChunk, IndexRow


@runtime_checkable
class IndexStore(Protocol):
    """Async interface to the document index."""

    async def hybrid_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
        query_text: str,
    ) -> list[IndexRow]:
        """Vector + keyword search filtered on the vector component."""
        ...

    async def vector_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
    ) -> list[IndexRow]:
        """Vector-only similarity search used as the degraded path."""
        ...

    async def add_chunks(self, chunks: list[DocumentChunk]) -> int:
        """Append chunks; already-present IDs are ignored. Returns rows written."""
        ...

    async def existing_sequence_nos(self, source_id: str) -> set[int]:
        """Sequence numbers already indexed for a source."""
        ...

    async def has_source(self, source_id: str) -> bool:
        """True when at least one chunk exists for the source."""
        ...

    async def delete_source(self, source_id: str) -> int:
        """Remove every chunk of a source. Returns rows deleted."""
        ...
