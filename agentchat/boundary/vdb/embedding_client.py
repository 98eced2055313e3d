"""
Embedding service adapter.

Wraps a LangChain `Embeddings` implementation behind one async call with
retry and dimension validation. Google Gemini embeddings are used by
default with a fixed output dimensionality so every vector matches the
index column width.

Dependencies: langchain_core, langchain_google_genai, tenacity
System role: Embedding service boundary
"""

import logging

from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from agentchat.configs.index import IndexSettings
from agentchat.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)

# GOOGLE_API_KEY is read from the process environment by the Google client
load_dotenv()


def build_google_embeddings(settings: IndexSettings) -> Embeddings:
    """
    Create the default Gemini embedding model.

    Imported lazily so tests and the in-memory store never need the
    Google client installed or configured.
    """
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    logger.info(
        f"{__name__}:build_google_embeddings - model={settings.embedding_model}, "
        f"dimension={settings.embedding_dimension}"
    )
    return GoogleGenerativeAIEmbeddings(model=settings.embedding_model)


class EmbeddingClient:
    """
    Async `embed(text) -> list[float]` over a LangChain embeddings model.

    Constructed once at process start and shared by the indexer and retriever.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        dimension: int,
        max_attempts: int = 3,
        pass_dimension: bool = True,
    ) -> None:
        """
        Args:
            embeddings: LangChain embeddings implementation
            dimension: Expected vector length
            max_attempts: Attempts per call before giving up
            pass_dimension: Forward `output_dimensionality` to the model
                (Gemini embeddings ignore the constructor value)
        """
        self._embeddings = embeddings
        self._dimension = dimension
        self._max_attempts = max_attempts
        self._pass_dimension = pass_dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    async def _call(self, text: str) -> list[float]:
        if self._pass_dimension:
            return await self._embeddings.aembed_query(
                text, output_dimensionality=self._dimension
            )
        return await self._embeddings.aembed_query(text)

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Text to embed

        Returns:
            list[float]: Vector of length `dimension`

        Raises:
            EmbeddingError: After retries are exhausted or on a wrong-sized vector
        """
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential_jitter(initial=0.5, max=8, jitter=1),
                retry=retry_if_not_exception_type(EmbeddingError),
                reraise=False,
            ):
                with attempt:
                    vector = await self._call(text)
        except RetryError as e:
            cause = e.last_attempt.exception()
            logger.warning(
                f"{__name__}:embed - FAILED after {self._max_attempts} attempts: "
                f"{type(cause).__name__}: {cause}"
            )
            raise EmbeddingError(
                f"Embedding failed: {cause}",
                details={"attempts": self._max_attempts, "text_len": len(text)},
            ) from cause

        if len(vector) != self._dimension:
            raise EmbeddingError(
                "Embedding has unexpected dimension",
                details={"expected": self._dimension, "actual": len(vector)},
            )
        return [float(v) for v in vector]
