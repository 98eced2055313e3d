"""
Shared test fixtures and configuration for entire test suite.

Provides: deterministic embeddings, index stores, SQLite-backed conversation
store, fake model streamers and in-memory collaborators.
Dependencies: pytest, pytest_asyncio, sqlalchemy, aiosqlite, langchain_core
System role: Test infrastructure and fixture management
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from langchain_core.embeddings import Embeddings

from agentchat.boundary.vdb.embedding_client import EmbeddingClient
from agentchat.boundary.vdb.in_memory_store import InMemoryIndexStore
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.models.chunk import ChunkMetadata, DocumentChunk
from agentchat.models.conversation import ConversationTurn, TurnRole

VOCABULARY = ["deadline", "exam", "library", "hours", "tuition", "fee", "scholarship", "housing"]
EMBEDDING_DIM = len(VOCABULARY)


class VocabularyEmbeddings(Embeddings):
    """
    Bag-of-words embeddings over a fixed vocabulary.

    Texts sharing vocabulary words get high cosine similarity; a small
    constant keeps every vector non-zero.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        lowered = text.lower()
        return [lowered.count(word) + 0.01 for word in VOCABULARY]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        return self._vector(text)


class FakeStreamer:
    """
    Model streamer yielding scripted tokens.

    Args:
        tokens: Tokens to emit
        fail_after: Raise after emitting this many tokens
        gate: When set, wait on this event before the first token
    """

    def __init__(
        self,
        tokens: list[str],
        fail_after: int | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.tokens = tokens
        self.fail_after = fail_after
        self.gate = gate
        self.calls: list[list] = []

    async def astream(self, messages) -> AsyncIterator[str]:
        self.calls.append(list(messages))
        if self.gate is not None:
            await self.gate.wait()
        for n, token in enumerate(self.tokens):
            if self.fail_after is not None and n == self.fail_after:
                raise RuntimeError("model connection reset")
            await asyncio.sleep(0)
            yield token
        if self.fail_after is not None and self.fail_after >= len(self.tokens):
            raise RuntimeError("model connection reset")


class FakeConversationStore:
    """Dict-backed stand-in for ConversationStore."""

    def __init__(self) -> None:
        self.sessions: dict[uuid.UUID, dict] = {}
        self.turns: list[ConversationTurn] = []
        self.saved_ids: list[uuid.UUID] = []
        self.touched: list[uuid.UUID] = []
        self.titles: dict[uuid.UUID, list[str]] = {}
        self.fail_saves = False

    def add_session(self) -> uuid.UUID:
        session_id = uuid.uuid4()
        self.sessions[session_id] = {"title": "New chat"}
        return session_id

    async def session_exists(self, session_id: uuid.UUID) -> bool:
        return session_id in self.sessions

    async def get_recent_turns(self, session_id: uuid.UUID, limit: int = 20) -> list[ConversationTurn]:
        turns = [t for t in self.turns if t.session_id == session_id]
        return turns[-limit:] if limit else []

    async def save_turn(self, session_id: uuid.UUID, role: TurnRole, content: str, attachments=None) -> uuid.UUID:
        if self.fail_saves:
            from agentchat.core.exceptions import PersistenceError

            raise PersistenceError("database is down")
        self.turns.append(
            ConversationTurn(
                session_id=session_id,
                role=role,
                content=content,
                created_at=datetime.now(timezone.utc),
            )
        )
        turn_id = uuid.uuid4()
        self.saved_ids.append(turn_id)
        return turn_id

    async def touch_session(self, session_id: uuid.UUID) -> None:
        self.touched.append(session_id)

    async def set_title(self, session_id: uuid.UUID, title: str) -> None:
        self.titles.setdefault(session_id, []).append(title)

    def assistant_turns(self, session_id: uuid.UUID) -> list[ConversationTurn]:
        return [t for t in self.turns if t.session_id == session_id and t.role == TurnRole.ASSISTANT]


@pytest.fixture
def vocabulary_embeddings() -> VocabularyEmbeddings:
    return VocabularyEmbeddings()


@pytest.fixture
def embedding_client(vocabulary_embeddings: VocabularyEmbeddings) -> EmbeddingClient:
    """EmbeddingClient over the vocabulary embeddings, no retries."""
    return EmbeddingClient(
        embeddings=vocabulary_embeddings,
        dimension=EMBEDDING_DIM,
        max_attempts=1,
        pass_dimension=False,
    )


@pytest.fixture
def in_memory_store() -> InMemoryIndexStore:
    return InMemoryIndexStore(keyword_weight=0.3)


@pytest.fixture
def retrieval_settings() -> RetrievalSettings:
    return RetrievalSettings(
        top_k=2,
        similarity_threshold=0.5,
        overfetch_factor=4,
        retrieval_timeout=1.0,
        rerank_timeout=1.0,
        web_search_timeout=1.0,
        history_limit=20,
        max_prompt_chars=24000,
    )


@pytest.fixture
def make_chunk(vocabulary_embeddings: VocabularyEmbeddings):
    """Factory building an embedded DocumentChunk."""

    def _make(
        content: str,
        source_id: str = "handbook.md",
        sequence_no: int = 0,
        keyword_tags: str = "",
        title: str | None = None,
    ) -> DocumentChunk:
        extra = {"title": title} if title else {}
        return DocumentChunk(
            id=DocumentChunk.make_id(source_id, sequence_no, content),
            content=content,
            embedding=vocabulary_embeddings.embed_documents([content])[0],
            metadata=ChunkMetadata(
                source_id=source_id,
                sequence_no=sequence_no,
                total_chunks=1,
                keyword_tags=keyword_tags,
                extra=extra,
            ),
        )

    return _make


@pytest.fixture
def fake_streamer_factory():
    return FakeStreamer


@pytest.fixture
def fake_store() -> FakeConversationStore:
    return FakeConversationStore()


@pytest_asyncio.fixture
async def session_factory():
    """
    In-memory SQLite database with all tables created.

    Yields:
        async_sessionmaker: Factory bound to a StaticPool engine
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import StaticPool

    from agentchat.boundary.db.base import Base
    from agentchat.boundary.db.connection import create_session_factory
    from agentchat.boundary.db import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_factory(engine)

    await engine.dispose()
