"""
Dependency injection container.

`ServiceCache` constructs every long-lived component once (during the app
lifespan) and hands them to routes through `Depends`. Components are built
lazily so tests can preset any of them before first use.

Dependencies: fastapi, agentchat.configs, agentchat.core, agentchat.boundary
System role: DI container for service injection
"""

import logging

from fastapi import Request

from agentchat.application.services.chat_service import ChatService
from agentchat.configs import Settings, get_settings
from agentchat.core.streaming.coordinator import StreamingCoordinator

logger = logging.getLogger(__name__)


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine = None
        self._session_factory = None
        self._conversation_store = None
        self._memory_store = None
        self._embedding_client = None
        self._index_store = None
        self._rerank_client = None
        self._web_search_client = None
        self._prompt_registry = None
        self._rag_pipeline = None
        self._assembler = None
        self._chat_model = None
        self._coordinator = None
        self._chat_service = None

    @property
    def engine(self):
        if self._engine is None:
            from agentchat.boundary.db.connection import create_engine_from_settings

            self._engine = create_engine_from_settings(self.settings.database)
        return self._engine

    @property
    def session_factory(self):
        if self._session_factory is None:
            from agentchat.boundary.db.connection import create_session_factory

            self._session_factory = create_session_factory(self.engine)
        return self._session_factory

    @property
    def conversation_store(self):
        if self._conversation_store is None:
            from agentchat.boundary.db.CRUD.conversation_store import ConversationStore

            self._conversation_store = ConversationStore(self.session_factory)
        return self._conversation_store

    @property
    def memory_store(self):
        if self._memory_store is None:
            from agentchat.boundary.db.CRUD.memory_store import MemoryStore

            self._memory_store = MemoryStore(self.session_factory)
        return self._memory_store

    @property
    def embedding_client(self):
        if self._embedding_client is None:
            from agentchat.boundary.vdb.embedding_client import EmbeddingClient, build_google_embeddings

            self._embedding_client = EmbeddingClient(
                embeddings=build_google_embeddings(self.settings.index),
                dimension=self.settings.index.embedding_dimension,
            )
        return self._embedding_client

    @property
    def index_store(self):
        if self._index_store is None:
            from agentchat.boundary.vdb.index_store_factory import get_index_store

            self._index_store = get_index_store(self.settings)
        return self._index_store

    @property
    def rerank_client(self):
        if self._rerank_client is None:
            from agentchat.boundary.rerank.rerank_client import RerankClient

            retrieval = self.settings.retrieval
            self._rerank_client = RerankClient(
                url=retrieval.rerank_url,
                model=retrieval.rerank_model,
                api_key=retrieval.rerank_api_key,
                timeout=retrieval.rerank_timeout,
            )
        return self._rerank_client

    @property
    def web_search_client(self):
        if self._web_search_client is None:
            from agentchat.boundary.web_search.web_search_client import WebSearchClient

            retrieval = self.settings.retrieval
            self._web_search_client = WebSearchClient(
                url=retrieval.web_search_url,
                api_key=retrieval.web_search_api_key,
                timeout=retrieval.web_search_timeout,
            )
        return self._web_search_client

    @property
    def prompt_registry(self):
        if self._prompt_registry is None:
            from agentchat.observability.prompt_registry import PromptRegistry

            self._prompt_registry = PromptRegistry(self.settings.observability)
        return self._prompt_registry

    @property
    def rag_pipeline(self):
        if self._rag_pipeline is None:
            from agentchat.core.retrieval import HybridRetriever, RAGPipeline, Reranker

            retrieval = self.settings.retrieval
            self._rag_pipeline = RAGPipeline(
                retriever=HybridRetriever(self.index_store, self.embedding_client, retrieval),
                reranker=Reranker(
                    self.rerank_client,
                    batch_limit=retrieval.rerank_batch_limit,
                    timeout=retrieval.rerank_timeout,
                ),
                settings=retrieval,
            )
        return self._rag_pipeline

    @property
    def assembler(self):
        if self._assembler is None:
            from agentchat.core.context import ContextAssembler

            self._assembler = ContextAssembler(
                settings=self.settings.retrieval,
                rag_pipeline=self.rag_pipeline,
                web_search=self.web_search_client,
                memory=self.memory_store,
                prompt_registry=self.prompt_registry,
                default_persona=self.settings.llm.default_persona,
            )
        return self._assembler

    @property
    def chat_model(self):
        if self._chat_model is None:
            from agentchat.core.agentic_system import build_gemini_chat_model

            self._chat_model = build_gemini_chat_model(self.settings.llm)
        return self._chat_model

    @property
    def coordinator(self) -> StreamingCoordinator:
        if self._coordinator is None:
            from agentchat.core.agentic_system import GeminiModelStreamer, TitleGenerator

            self._coordinator = StreamingCoordinator(
                streamer=GeminiModelStreamer(self.chat_model),
                store=self.conversation_store,
                title_generator=TitleGenerator(
                    self.chat_model,
                    max_chars=self.settings.llm.title_max_chars,
                    prompt_registry=self.prompt_registry,
                ),
                state_ttl=self.settings.streaming.state_ttl_seconds,
                max_retained=self.settings.streaming.max_retained_states,
            )
        return self._coordinator

    @property
    def chat_service(self) -> ChatService:
        if self._chat_service is None:
            self._chat_service = ChatService(
                store=self.conversation_store,
                assembler=self.assembler,
                coordinator=self.coordinator,
                settings=self.settings.retrieval,
            )
        return self._chat_service

    def warm(self) -> None:
        """Build the object graph up front so the first request is not slow."""
        _ = self.chat_service

    async def aclose(self) -> None:
        """Drain generations, close HTTP clients and dispose the engine."""
        if self._coordinator is not None:
            await self._coordinator.shutdown()
        for client in (self._rerank_client, self._web_search_client):
            if client is not None:
                await client.aclose()
        if self._engine is not None:
            await self._engine.dispose()


def get_service_cache(request: Request) -> ServiceCache:
    """The cache built by the app lifespan."""
    return request.app.state.services


def get_chat_service(request: Request) -> ChatService:
    return get_service_cache(request).chat_service


def get_coordinator(request: Request) -> StreamingCoordinator:
    return get_service_cache(request).coordinator
