"""
Retrieval and ranking models.

Ephemeral per-query values; never persisted.

Dependencies: pydantic
System role: Retriever / reranker data contracts
"""

from pydantic import BaseModel, Field

from agentchat.models.chunk import IndexRow


class RetrievalCandidate(BaseModel):
    """Chunk returned by the hybrid retriever, before reranking."""

    chunk: IndexRow
    vector_score: float
    keyword_score: float | None = None
    combined_score: float

    @classmethod
    def from_row(cls, row: IndexRow) -> "RetrievalCandidate":
        combined = row.combined_score if row.combined_score is not None else row.similarity
        return cls(
            chunk=row,
            vector_score=row.similarity,
            keyword_score=row.keyword_score,
            combined_score=combined,
        )


class RankedResult(BaseModel):
    """Reranker output referencing its input by position."""

    index: int = Field(ge=0, description="Position in the reranker's input list")
    relevance_score: float = Field(description="Cross-encoder relevance score")
    rank: int = Field(ge=0, description="0-based position after reranking")

    @property
    def score(self) -> float:
        return self.relevance_score


class RankedChunk(BaseModel):
    """Reranked result re-attached to its candidate chunk."""

    candidate: RetrievalCandidate
    relevance_score: float
    rank: int

    @property
    def content(self) -> str:
        return self.candidate.chunk.content

    @property
    def source_label(self) -> str:
        return self.candidate.chunk.metadata.source_label
