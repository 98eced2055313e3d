"""
Cross-encoder rerank HTTP client.

Posts a query and candidate texts to a DashScope-style text-rerank endpoint
and returns `(index, relevance_score)` pairs. Raises on every failure; the
fallback to identity ordering lives in `core.retrieval.reranker`.

Dependencies: httpx
System role: Rerank service adapter
"""

import logging

import httpx

from agentchat.core.exceptions import RerankError
from agentchat.models.retrieval import RankedResult

logger = logging.getLogger(__name__)


class RerankClient:
    """Async client for the text-rerank service."""

    def __init__(
        self,
        url: str,
        model: str,
        api_key: str | None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            url: Rerank endpoint
            model: Rerank model name (e.g. gte-rerank)
            api_key: Bearer token for the provider
            timeout: Request timeout in seconds
            http_client: Optional shared client (tests pass one built on MockTransport)
        """
        self._url = url
        self._model = model
        self._api_key = api_key
        self._timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    def _build_payload(self, query: str, documents: list[str], top_n: int) -> dict:
        return {
            "model": self._model,
            "input": {"query": query, "documents": documents},
            "parameters": {"top_n": top_n, "return_documents": False},
        }

    async def rerank(self, query: str, documents: list[str], top_n: int) -> list[RankedResult]:
        """
        Score `documents` against `query`.

        Returns:
            list[RankedResult]: Results in provider order with `rank` assigned

        Raises:
            RerankError: Missing key, HTTP error, quota error or malformed body
        """
        if not self._api_key:
            raise RerankError("Rerank API key not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.post(
                self._url,
                json=self._build_payload(query, documents, top_n),
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise RerankError(f"Rerank request failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise RerankError(
                f"Rerank service returned {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:200]},
            )

        try:
            body = response.json()
            results = body["output"]["results"]
            return [
                RankedResult(index=int(item["index"]), relevance_score=float(item["relevance_score"]), rank=rank)
                for rank, item in enumerate(results)
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise RerankError(f"Invalid rerank response: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
