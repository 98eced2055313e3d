"""
Hybrid retriever.

Primary path: one combined vector + keyword query against the index store,
over-fetching `overfetch_factor * k` rows for the reranker. Degraded path:
vector-only search limited to `k`. Nothing raises out of `retrieve`; the
outcome is tagged on the returned StageResult.

Dependencies: asyncio, agentchat.boundary.vdb
System role: First stage of the RAG pipeline
"""

import asyncio
import logging

from agentchat.boundary.vdb.embedding_client import EmbeddingClient
from agentchat.boundary.vdb.index_store import IndexStore
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.core.results import StageResult
from agentchat.models.chunk import IndexRow
from agentchat.models.retrieval import RetrievalCandidate

logger = logging.getLogger(__name__)


class HybridRetriever:
    """Vector + keyword retrieval with a vector-only fallback."""

    def __init__(
        self,
        store: IndexStore,
        embedder: EmbeddingClient,
        settings: RetrievalSettings,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._settings = settings

    async def _primary(
        self,
        query: str,
        embedding: list[float],
        k: int,
        threshold: float,
    ) -> list[RetrievalCandidate]:
        limit = k * self._settings.overfetch_factor
        rows: list[IndexRow] = await asyncio.wait_for(
            self._store.hybrid_search(
                query_embedding=embedding,
                similarity_threshold=threshold,
                limit=limit,
                query_text=query,
            ),
            timeout=self._settings.retrieval_timeout,
        )
        candidates = [RetrievalCandidate.from_row(r) for r in rows if r.similarity >= threshold]
        candidates.sort(key=lambda c: c.combined_score, reverse=True)
        return candidates[:limit]

    async def _fallback(self, embedding: list[float], k: int, threshold: float) -> list[RetrievalCandidate]:
        rows: list[IndexRow] = await asyncio.wait_for(
            self._store.vector_search(
                query_embedding=embedding,
                similarity_threshold=threshold,
                limit=k,
            ),
            timeout=self._settings.retrieval_timeout,
        )
        candidates = [RetrievalCandidate.from_row(r) for r in rows if r.similarity >= threshold]
        return candidates[:k]

    async def retrieve(
        self,
        query: str,
        k: int | None = None,
        similarity_threshold: float | None = None,
    ) -> StageResult[list[RetrievalCandidate]]:
        """
        Retrieve reranker input for `query`.

        Args:
            query: Raw user query
            k: Final result count wanted downstream (defaults to settings.top_k)
            similarity_threshold: Minimum vector similarity (defaults to settings)

        Returns:
            StageResult: ok with up to `overfetch_factor * k` candidates, empty when
                nothing clears the threshold, degraded when the fallback was used
        """
        k = k or self._settings.top_k
        threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else self._settings.similarity_threshold
        )

        try:
            embedding = await self._embedder.embed(query)
        except Exception as e:
            logger.warning(f"{__name__}:retrieve - query embedding failed: {type(e).__name__}: {e}")
            return StageResult.degraded([], reason=f"embedding failed: {type(e).__name__}")

        try:
            candidates = await self._primary(query, embedding, k, threshold)
        except Exception as e:
            primary_error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"{__name__}:retrieve - hybrid search failed ({primary_error}), using vector-only")
        else:
            if not candidates:
                return StageResult.empty([], reason="no chunk cleared the similarity threshold")
            logger.info(f"{__name__}:retrieve - hybrid search returned {len(candidates)} candidates")
            return StageResult.ok(candidates)

        try:
            candidates = await self._fallback(embedding, k, threshold)
        except Exception as e:
            logger.error(f"{__name__}:retrieve - vector-only fallback failed: {type(e).__name__}: {e}")
            return StageResult.degraded([], reason=f"hybrid and vector search failed: {primary_error}")

        logger.info(f"{__name__}:retrieve - vector-only fallback returned {len(candidates)} candidates")
        return StageResult.degraded(candidates, reason=f"hybrid search failed: {primary_error}")
