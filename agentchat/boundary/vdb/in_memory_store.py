"""
In-memory index store for local development and tests.

Implements the same contract as the pgvector store: cosine similarity for
the vector component, token overlap against content + keyword tags for the
keyword component, and a weighted blend for ordering.

Dependencies: asyncio, numpy, re
System role: Local index store for development RAG
"""

import asyncio
import logging
import re

import numpy as np

from agentchat.models.chunk import DocumentChunk, IndexRow

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+", re.UNICODE)
_CJK_RE = re.compile(r"[㐀-鿿]")


def tokenize(text: str) -> set[str]:
    """Lower-cased word tokens; CJK runs are split into single characters."""
    tokens: set[str] = set()
    for word in _WORD_RE.findall(text.lower()):
        if _CJK_RE.search(word):
            tokens.update(ch for ch in word if not ch.isspace())
        else:
            tokens.add(word)
    return tokens


def cosine_similarities(query: list[float], matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of `query` against every row of `matrix`.

    Rows (or a query) with zero norm score 0.0.
    """
    query_vec = np.asarray(query, dtype=np.float64)
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denominators > 0, (matrix @ query_vec) / denominators, 0.0)
    return scores


def cosine_similarity(a: list[float], b: list[float]) -> float:
    return float(cosine_similarities(a, np.asarray([b], dtype=np.float64))[0])


def keyword_score(query_text: str, chunk: DocumentChunk) -> float:
    """Fraction of query tokens present in the chunk text or its keyword tags."""
    query_tokens = tokenize(query_text)
    if not query_tokens:
        return 0.0
    haystack = tokenize(chunk.content) | tokenize(chunk.metadata.keyword_tags)
    return len(query_tokens & haystack) / len(query_tokens)


class InMemoryIndexStore:
    """
    Process-local index store.

    Chunks are keyed by ID; writes are serialised with a lock, reads work on
    a snapshot so concurrent searches never see a half-applied batch.
    """

    def __init__(self, keyword_weight: float = 0.3) -> None:
        self._chunks: dict[str, DocumentChunk] = {}
        self._lock = asyncio.Lock()
        self._keyword_weight = keyword_weight

    def __len__(self) -> int:
        return len(self._chunks)

    def chunks_for(self, source_id: str) -> list[DocumentChunk]:
        """Chunks of a source ordered by sequence number."""
        return sorted(
            (c for c in self._chunks.values() if c.metadata.source_id == source_id),
            key=lambda c: c.metadata.sequence_no,
        )

    def _row(self, chunk: DocumentChunk, similarity: float, **scores: float | None) -> IndexRow:
        return IndexRow(
            id=chunk.id,
            content=chunk.content,
            metadata=chunk.metadata,
            similarity=similarity,
            **scores,
        )

    def _score(self, query_embedding: list[float]) -> list[tuple[DocumentChunk, float]]:
        """Snapshot of stored chunks paired with their cosine similarity."""
        chunks = list(self._chunks.values())
        if not chunks:
            return []
        matrix = np.asarray([c.embedding for c in chunks], dtype=np.float64)
        similarities = cosine_similarities(query_embedding, matrix)
        return [(chunk, float(sim)) for chunk, sim in zip(chunks, similarities)]

    async def hybrid_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
        query_text: str,
    ) -> list[IndexRow]:
        rows: list[IndexRow] = []
        for chunk, similarity in self._score(query_embedding):
            if similarity < similarity_threshold:
                continue
            kw = keyword_score(query_text, chunk)
            combined = (1 - self._keyword_weight) * similarity + self._keyword_weight * kw
            rows.append(self._row(chunk, similarity, keyword_score=kw, combined_score=combined))

        rows.sort(key=lambda r: r.combined_score or 0.0, reverse=True)
        return rows[:limit]

    async def vector_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
    ) -> list[IndexRow]:
        rows = [
            self._row(chunk, similarity)
            for chunk, similarity in self._score(query_embedding)
            if similarity >= similarity_threshold
        ]
        rows.sort(key=lambda r: r.similarity, reverse=True)
        return rows[:limit]

    async def add_chunks(self, chunks: list[DocumentChunk]) -> int:
        written = 0
        async with self._lock:
            for chunk in chunks:
                if chunk.id in self._chunks:
                    continue
                self._chunks[chunk.id] = chunk
                written += 1
        logger.debug(f"{__name__}:add_chunks - wrote {written}/{len(chunks)} chunks")
        return written

    async def existing_sequence_nos(self, source_id: str) -> set[int]:
        return {c.metadata.sequence_no for c in self.chunks_for(source_id)}

    async def has_source(self, source_id: str) -> bool:
        return any(c.metadata.source_id == source_id for c in self._chunks.values())

    async def delete_source(self, source_id: str) -> int:
        async with self._lock:
            doomed = [cid for cid, c in self._chunks.items() if c.metadata.source_id == source_id]
            for cid in doomed:
                del self._chunks[cid]
        return len(doomed)
