"""
RAG pipeline: retrieve, rerank, re-attach.

Dependencies: agentchat.core.retrieval
System role: Document context source for the context assembler
"""

import logging

from agentchat.configs.retrieval import RetrievalSettings
from agentchat.core.results import StageResult, StageStatus
from agentchat.core.retrieval.hybrid_retriever import HybridRetriever
from agentchat.core.retrieval.reranker import Reranker
from agentchat.models.retrieval import RankedChunk

logger = logging.getLogger(__name__)


class RAGPipeline:
    """Top-k reranked chunks for a query."""

    def __init__(
        self,
        retriever: HybridRetriever,
        reranker: Reranker,
        settings: RetrievalSettings,
    ) -> None:
        self._retriever = retriever
        self._reranker = reranker
        self._settings = settings

    async def search(self, query: str, k: int | None = None) -> StageResult[list[RankedChunk]]:
        """
        Returns:
            StageResult: At most `k` chunks ordered by rerank score. Degraded
                when either stage fell back; empty when nothing was found.
        """
        k = k or self._settings.top_k
        retrieval = await self._retriever.retrieve(query, k, self._settings.similarity_threshold)
        candidates = retrieval.value
        if not candidates:
            if retrieval.is_degraded:
                return StageResult.degraded([], reason=retrieval.reason or "retrieval degraded")
            return StageResult.empty([], reason=retrieval.reason)

        ranking = await self._reranker.rerank(query, [c.chunk.content for c in candidates], top_n=k)
        chunks = [
            RankedChunk(candidate=candidates[r.index], relevance_score=r.relevance_score, rank=r.rank)
            for r in ranking.value
            if r.index < len(candidates)
        ][:k]

        reasons = [r.reason for r in (retrieval, ranking) if r.status is StageStatus.DEGRADED and r.reason]
        if reasons:
            return StageResult.degraded(chunks, reason="; ".join(reasons))
        return StageResult.ok(chunks)
