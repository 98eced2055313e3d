"""
Reranker.

Re-scores retrieval candidates with the remote cross-encoder and trims to
`top_n`. Any failure (transport, quota, timeout, malformed indices) yields
the identity ordering with score 0, tagged degraded.

Dependencies: asyncio, tenacity, agentchat.boundary.rerank
System role: Second stage of the RAG pipeline
"""

import asyncio
import logging
from typing import Protocol

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from agentchat.core.exceptions import RerankError
from agentchat.core.results import StageResult
from agentchat.models.retrieval import RankedResult

logger = logging.getLogger(__name__)


class RerankService(Protocol):
    async def rerank(self, query: str, documents: list[str], top_n: int) -> list[RankedResult]: ...


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, asyncio.TimeoutError):
        return True
    if isinstance(exc, RerankError):
        status = exc.details.get("status_code")
        return status is None or status >= 500 or status == 429
    return False


def identity_ranking(count: int) -> list[RankedResult]:
    """First `count` inputs in original order with score 0."""
    return [RankedResult(index=i, relevance_score=0.0, rank=i) for i in range(count)]


class Reranker:
    """Cross-encoder rerank with identity fallback."""

    def __init__(
        self,
        client: RerankService,
        batch_limit: int = 100,
        timeout: float = 10.0,
        max_attempts: int = 2,
    ) -> None:
        self._client = client
        self._batch_limit = batch_limit
        self._timeout = timeout
        self._max_attempts = max_attempts

    async def _call(self, query: str, documents: list[str], top_n: int) -> list[RankedResult]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential_jitter(initial=0.2, max=2, jitter=0.2),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        ):
            with attempt:
                return await asyncio.wait_for(
                    self._client.rerank(query, documents, top_n),
                    timeout=self._timeout,
                )
        raise RerankError("Rerank retry loop exited without a result")

    @staticmethod
    def _normalise(results: list[RankedResult], size: int, top_n: int) -> list[RankedResult]:
        seen: set[int] = set()
        valid = []
        for result in results:
            if 0 <= result.index < size and result.index not in seen:
                seen.add(result.index)
                valid.append(result)
        valid.sort(key=lambda r: r.relevance_score, reverse=True)
        return [
            RankedResult(index=r.index, relevance_score=r.relevance_score, rank=rank)
            for rank, r in enumerate(valid[:top_n])
        ]

    async def rerank(
        self,
        query: str,
        candidates: list[str],
        top_n: int,
    ) -> StageResult[list[RankedResult]]:
        """
        Rerank candidate texts.

        Args:
            query: User query
            candidates: Candidate texts, in retrieval order
            top_n: Maximum number of results

        Returns:
            StageResult: ok with results sorted by score desc (len <= top_n);
                degraded with the identity ordering on failure; empty for no input
        """
        if not candidates or top_n <= 0:
            return StageResult.empty([])

        documents = candidates[: self._batch_limit]
        top_n = min(top_n, len(documents))

        try:
            raw = await self._call(query, documents, top_n)
        except Exception as e:
            logger.warning(f"{__name__}:rerank - FAILED, keeping retrieval order: {type(e).__name__}: {e}")
            return StageResult.degraded(identity_ranking(top_n), reason=f"rerank failed: {type(e).__name__}")

        ranked = self._normalise(raw, len(documents), top_n)
        if not ranked:
            logger.warning(f"{__name__}:rerank - no usable results in response, keeping retrieval order")
            return StageResult.degraded(identity_ranking(top_n), reason="rerank returned no valid indices")

        logger.info(f"{__name__}:rerank - {len(documents)} candidates -> {len(ranked)} results")
        return StageResult.ok(ranked)
