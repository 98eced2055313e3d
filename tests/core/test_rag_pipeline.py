"""
Test suite for RAGPipeline.

System role: Verification of retrieve -> rerank -> re-attach
"""

import pytest

from agentchat.core.exceptions import RerankError
from agentchat.core.results import StageStatus
from agentchat.core.retrieval.hybrid_retriever import HybridRetriever
from agentchat.core.retrieval.rag_pipeline import RAGPipeline
from agentchat.core.retrieval.reranker import Reranker
from agentchat.models.retrieval import RankedResult


class LengthRerankClient:
    """Scores documents by length so the longest wins."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def rerank(self, query: str, documents: list[str], top_n: int) -> list[RankedResult]:
        if self.error is not None:
            raise self.error
        return [
            RankedResult(index=i, relevance_score=float(len(doc)), rank=i)
            for i, doc in enumerate(documents)
        ]


@pytest.fixture
def seeded_store(in_memory_store, make_chunk):
    async def _seed():
        await in_memory_store.add_chunks([
            make_chunk("exam deadline", source_id="a.md"),
            make_chunk("exam deadline for the spring term", source_id="b.md"),
            make_chunk("exam deadline for the spring and autumn terms", source_id="c.md"),
            make_chunk("housing fee", source_id="d.md"),
        ])
        return in_memory_store

    return _seed


class TestRAGPipelineSearch:
    """Test suite for RAGPipeline.search()."""

    @pytest.mark.asyncio
    async def test_search_should_return_top_k_by_rerank_score(
        self, seeded_store, embedding_client, retrieval_settings
    ) -> None:
        # Arrange
        store = await seeded_store()
        pipeline = RAGPipeline(
            HybridRetriever(store, embedding_client, retrieval_settings),
            Reranker(LengthRerankClient(), max_attempts=1),
            retrieval_settings,
        )

        # Act
        result = await pipeline.search("exam deadline", k=2)

        # Assert
        assert result.status is StageStatus.OK
        assert [c.source_label for c in result.value] == ["c.md", "b.md"]
        assert [c.rank for c in result.value] == [0, 1]
        assert result.value[0].relevance_score >= result.value[1].relevance_score

    @pytest.mark.asyncio
    async def test_search_should_degrade_when_rerank_fails(
        self, seeded_store, embedding_client, retrieval_settings
    ) -> None:
        store = await seeded_store()
        pipeline = RAGPipeline(
            HybridRetriever(store, embedding_client, retrieval_settings),
            Reranker(LengthRerankClient(error=RerankError("quota", status_code=403)), max_attempts=1),
            retrieval_settings,
        )

        result = await pipeline.search("exam deadline", k=2)

        assert result.status is StageStatus.DEGRADED
        assert len(result.value) == 2
        assert all(c.relevance_score == 0.0 for c in result.value)

    @pytest.mark.asyncio
    async def test_search_should_return_empty_when_nothing_matches(
        self, in_memory_store, embedding_client, retrieval_settings
    ) -> None:
        pipeline = RAGPipeline(
            HybridRetriever(in_memory_store, embedding_client, retrieval_settings),
            Reranker(LengthRerankClient(), max_attempts=1),
            retrieval_settings,
        )

        result = await pipeline.search("scholarship")

        assert result.status is StageStatus.EMPTY
        assert result.value == []
