"""
Retrieval and context configuration.

Top-k, thresholds, rerank and web search endpoints, per-source caps and
per-stage timeouts for a live chat turn.

Dependencies: pydantic, pydantic_settings
System role: Retrieval / rerank / context-assembly configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from agentchat.configs.base import BaseSettings


class RetrievalSettings(BaseSettings):
    """Retrieval, rerank, web search and prompt budget settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    top_k: int = Field(default=5, ge=1, description="Final number of chunks placed in the prompt")
    similarity_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum vector similarity for a chunk to be considered",
    )
    overfetch_factor: int = Field(default=4, ge=1, description="Candidates fetched per final result")
    retrieval_timeout: float = Field(default=10.0, description="Seconds before hybrid search falls back")

    rerank_url: str = Field(
        default="https://dashscope.aliyuncs.com/api/v1/services/rerank/text-rerank/text-rerank",
        description="Cross-encoder rerank endpoint",
    )
    rerank_model: str = Field(default="gte-rerank", description="Rerank model name")
    rerank_api_key: str | None = Field(default=None, description="Rerank API key")
    rerank_batch_limit: int = Field(default=100, ge=1, description="Provider-side document limit per call")
    rerank_timeout: float = Field(default=10.0, description="Seconds before rerank falls back")

    web_search_url: str = Field(default="https://api.tavily.com/search", description="Web search endpoint")
    web_search_api_key: str | None = Field(default=None, description="Web search API key")
    web_search_max_results: int = Field(default=5, ge=1, description="Snippets kept from web search")
    web_search_timeout: float = Field(default=10.0, description="Seconds before web search is skipped")

    memory_item_limit: int = Field(default=10, ge=1, description="Long-term memory items injected")
    history_limit: int = Field(default=20, ge=0, description="Prior turns passed to the model")

    web_block_max_chars: int = Field(default=3000, description="Character cap for the web block")
    rag_block_max_chars: int = Field(default=6000, description="Character cap for the document block")
    memory_block_max_chars: int = Field(default=1500, description="Character cap for the memory block")
    max_prompt_chars: int = Field(
        default=24000,
        description="Ceiling on system + history + user content characters",
    )

    @property
    def candidate_limit(self) -> int:
        """Number of rows the primary hybrid query may return."""
        return self.top_k * self.overfetch_factor
