"""
Test suite for RerankClient.

Uses httpx.MockTransport in place of the rerank provider.

System role: Verification of the rerank HTTP adapter
"""

import json

import httpx
import pytest

from agentchat.boundary.rerank.rerank_client import RerankClient
from agentchat.core.exceptions import RerankError

URL = "https://rerank.test/api/v1/services/rerank"


def _client(handler, api_key: str | None = "sk-test") -> RerankClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RerankClient(url=URL, model="gte-rerank", api_key=api_key, timeout=1.0, http_client=http_client)


class TestRerankClient:
    """Test suite for RerankClient.rerank()."""

    @pytest.mark.asyncio
    async def test_rerank_should_post_payload_and_parse_results(self) -> None:
        # Arrange
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"output": {"results": [
                    {"index": 1, "relevance_score": 0.9},
                    {"index": 0, "relevance_score": 0.2},
                ]}},
            )

        client = _client(handler)

        # Act
        results = await client.rerank("exam deadline", ["a", "b"], top_n=2)

        # Assert
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["input"] == {"query": "exam deadline", "documents": ["a", "b"]}
        assert seen["body"]["parameters"]["top_n"] == 2
        assert [(r.index, r.rank) for r in results] == [(1, 0), (0, 1)]
        assert results[0].score == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_rerank_should_raise_without_api_key(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={}), api_key=None)

        with pytest.raises(RerankError):
            await client.rerank("q", ["a"], top_n=1)

    @pytest.mark.asyncio
    async def test_rerank_should_raise_with_status_on_http_error(self) -> None:
        client = _client(lambda request: httpx.Response(429, text="quota exceeded"))

        with pytest.raises(RerankError) as exc_info:
            await client.rerank("q", ["a"], top_n=1)
        assert exc_info.value.details["status_code"] == 429

    @pytest.mark.asyncio
    async def test_rerank_should_raise_on_malformed_body(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"output": {}}))

        with pytest.raises(RerankError):
            await client.rerank("q", ["a"], top_n=1)

    @pytest.mark.asyncio
    async def test_rerank_should_wrap_transport_errors(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)

        with pytest.raises(RerankError) as exc_info:
            await client.rerank("q", ["a"], top_n=1)
        assert "status_code" not in exc_info.value.details
