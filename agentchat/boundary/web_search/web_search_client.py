"""
Web search HTTP client.

Tavily-style JSON search API: POST `{api_key, query, max_results}` and read
`results[{title, url, content}]`. Transient transport errors are retried
with tenacity before the search is reported unavailable.

Dependencies: httpx, tenacity
System role: Live web context source
"""

import logging

import httpx
from pydantic import BaseModel
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from agentchat.core.exceptions import ContextSourceUnavailableError

logger = logging.getLogger(__name__)


class WebSnippet(BaseModel):
    """One search hit."""

    title: str = ""
    url: str = ""
    content: str = ""


class WebSearchClient:
    """Async client for the web search service."""

    def __init__(
        self,
        url: str,
        api_key: str | None,
        timeout: float = 10.0,
        max_attempts: int = 2,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def _post(self, query: str, max_results: int) -> httpx.Response:
        response = await self._client.post(
            self._url,
            json={"api_key": self._api_key, "query": query, "max_results": max_results},
            timeout=self._timeout,
        )
        # 5xx is worth a retry, 4xx is not
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def search(self, query: str, max_results: int = 5) -> list[WebSnippet]:
        """
        Search the web for `query`.

        Returns:
            list[WebSnippet]: At most `max_results` snippets (may be empty)

        Raises:
            ContextSourceUnavailableError: Missing key or service failure
        """
        if not self._api_key:
            raise ContextSourceUnavailableError("Web search API key not configured", source="web")

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential_jitter(initial=0.5, max=4, jitter=0.5),
                retry=retry_if_exception_type(httpx.HTTPError),
                reraise=False,
            ):
                with attempt:
                    response = await self._post(query, max_results)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise ContextSourceUnavailableError(
                f"Web search failed after {self._max_attempts} attempts: {cause}",
                source="web",
            ) from cause

        if response.status_code != 200:
            raise ContextSourceUnavailableError(
                f"Web search returned {response.status_code}",
                source="web",
                details={"status_code": response.status_code},
            )

        try:
            results = response.json().get("results", [])
            snippets = [WebSnippet.model_validate(item) for item in results]
        except (ValueError, AttributeError, TypeError) as e:
            raise ContextSourceUnavailableError(f"Invalid web search response: {e}", source="web") from e

        logger.info(f"{__name__}:search - {len(snippets)} results for query_len={len(query)}")
        return snippets[:max_results]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
