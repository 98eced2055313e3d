"""
Test suite for ContextAssembler.

System role: Verification of context blocks, best-effort sources and the prompt budget
"""

import uuid
from datetime import datetime, timezone

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from agentchat.boundary.web_search.web_search_client import WebSnippet
from agentchat.core.context.assembler import AssembledPrompt, ContextAssembler, ContextFlags, cap_text
from agentchat.core.context.prompts import (
    CONTEXT_HEADER,
    MEMORY_SECTION_TITLE,
    RAG_SECTION_TITLE,
    WEB_SECTION_TITLE,
)
from agentchat.core.exceptions import ContextSourceUnavailableError
from agentchat.core.results import StageResult, StageStatus
from agentchat.models.chunk import ChunkMetadata, IndexRow
from agentchat.models.conversation import ConversationTurn, TurnRole
from agentchat.models.retrieval import RankedChunk, RetrievalCandidate

FIXED_NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
SESSION_ID = uuid.uuid4()


def ranked(content: str, source_id: str, rank: int, title: str | None = None) -> RankedChunk:
    row = IndexRow(
        id=f"{source_id}-{rank}",
        content=content,
        metadata=ChunkMetadata(
            source_id=source_id,
            sequence_no=rank,
            extra={"title": title} if title else {},
        ),
        similarity=0.9,
    )
    return RankedChunk(candidate=RetrievalCandidate.from_row(row), relevance_score=1.0 - rank / 10, rank=rank)


def turn(role: TurnRole, content: str) -> ConversationTurn:
    return ConversationTurn(session_id=SESSION_ID, role=role, content=content)


class FakeRAG:
    def __init__(self, result: StageResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[str, int | None]] = []

    async def search(self, query: str, k: int | None = None):
        self.calls.append((query, k))
        if self.error is not None:
            raise self.error
        return self.result


class FakeWeb:
    def __init__(self, snippets: list[WebSnippet] | None = None, error: Exception | None = None) -> None:
        self.snippets = snippets or []
        self.error = error

    async def search(self, query: str, max_results: int = 5) -> list[WebSnippet]:
        if self.error is not None:
            raise self.error
        return self.snippets


class FakeMemory:
    def __init__(self, summary: str = "", error: Exception | None = None) -> None:
        self.summary = summary
        self.error = error
        self.users: list[str] = []

    async def get_memory_summary(self, user_id: str, limit: int = 10) -> str:
        self.users.append(user_id)
        if self.error is not None:
            raise self.error
        return self.summary


def make_assembler(settings, **kwargs) -> ContextAssembler:
    return ContextAssembler(settings, default_persona="You are Ada.", clock=lambda: FIXED_NOW, **kwargs)


class TestCapText:
    """Test suite for cap_text()."""

    def test_cap_text_should_mark_cut(self) -> None:
        assert cap_text("abcdef", 4) == "abc…"
        assert cap_text("abc", 4) == "abc"
        assert cap_text("abc", 0) == ""


class TestContextAssemblerAssemble:
    """Test suite for ContextAssembler.assemble()."""

    @pytest.mark.asyncio
    async def test_assemble_should_send_bare_query_when_all_sources_disabled(self, retrieval_settings) -> None:
        # Arrange
        assembler = make_assembler(retrieval_settings, rag_pipeline=FakeRAG(StageResult.ok([])))

        # Act
        prompt = await assembler.assemble("When is the exam?", flags=ContextFlags(rag=False, memory=False))

        # Assert
        assert prompt.user_content == "When is the exam?"
        assert prompt.blocks == {}
        assert prompt.system_instruction == f"You are Ada.\n\nCurrent time: {FIXED_NOW.isoformat()}"

    @pytest.mark.asyncio
    async def test_assemble_should_send_bare_query_when_every_block_is_empty(self, retrieval_settings) -> None:
        assembler = make_assembler(
            retrieval_settings,
            rag_pipeline=FakeRAG(StageResult.empty([])),
            web_search=FakeWeb([]),
            memory=FakeMemory(""),
        )

        prompt = await assembler.assemble(
            "When is the exam?", flags=ContextFlags(web_search=True), user_id="u-1"
        )

        assert prompt.user_content == "When is the exam?"
        assert {name: b.status for name, b in prompt.blocks.items()} == {
            "web": StageStatus.EMPTY,
            "rag": StageStatus.EMPTY,
            "memory": StageStatus.EMPTY,
        }

    @pytest.mark.asyncio
    async def test_assemble_should_fuse_blocks_under_header_with_labels(self, retrieval_settings) -> None:
        # Arrange
        chunks = [
            ranked("The exam deadline is May 1.", "rules-2024.md", 0, title="Exam rules"),
            ranked("Late submissions need approval.", "late.md", 1),
        ]
        assembler = make_assembler(
            retrieval_settings,
            rag_pipeline=FakeRAG(StageResult.ok(chunks)),
            web_search=FakeWeb([WebSnippet(title="News", url="https://u.edu/n", content="Exams moved.")]),
            memory=FakeMemory("- [study] prefers short answers"),
        )

        # Act
        prompt = await assembler.assemble(
            "When is the exam?", flags=ContextFlags(web_search=True), user_id="u-1"
        )

        # Assert
        content = prompt.user_content
        assert content.startswith(CONTEXT_HEADER)
        assert content.endswith("Question: When is the exam?")
        assert content.index(WEB_SECTION_TITLE) < content.index(RAG_SECTION_TITLE) < content.index(MEMORY_SECTION_TITLE)
        assert "[1] (source: Exam rules) The exam deadline is May 1." in content
        assert "[2] (source: late.md) Late submissions need approval." in content
        assert "[1] News (https://u.edu/n)\nExams moved." in content
        assert prompt.sources == ["Exam rules", "late.md"]
        assert prompt.truncated is False

    @pytest.mark.asyncio
    async def test_assemble_should_continue_when_web_and_memory_fail(self, retrieval_settings) -> None:
        # Arrange
        assembler = make_assembler(
            retrieval_settings,
            rag_pipeline=FakeRAG(StageResult.ok([ranked("Exam deadline is May 1.", "a.md", 0)])),
            web_search=FakeWeb(error=ContextSourceUnavailableError("down", source="web")),
            memory=FakeMemory(error=ContextSourceUnavailableError("down", source="memory")),
        )

        # Act
        prompt = await assembler.assemble("exam?", flags=ContextFlags(web_search=True), user_id="u-1")

        # Assert
        assert prompt.blocks["web"].status is StageStatus.DEGRADED
        assert prompt.blocks["memory"].status is StageStatus.DEGRADED
        assert prompt.blocks["rag"].status is StageStatus.OK
        assert WEB_SECTION_TITLE not in prompt.user_content
        assert "Exam deadline is May 1." in prompt.user_content

    @pytest.mark.asyncio
    async def test_assemble_should_degrade_when_rag_raises(self, retrieval_settings) -> None:
        assembler = make_assembler(retrieval_settings, rag_pipeline=FakeRAG(error=RuntimeError("boom")))

        prompt = await assembler.assemble("exam?")

        assert prompt.blocks["rag"].status is StageStatus.DEGRADED
        assert prompt.user_content == "exam?"

    @pytest.mark.asyncio
    async def test_assemble_should_skip_memory_without_user(self, retrieval_settings) -> None:
        memory = FakeMemory("- [x] y")
        assembler = make_assembler(retrieval_settings, rag_pipeline=FakeRAG(StageResult.empty([])), memory=memory)

        prompt = await assembler.assemble("exam?")

        assert "memory" not in prompt.blocks
        assert memory.users == []

    @pytest.mark.asyncio
    async def test_assemble_should_cap_history_and_keep_order(self, retrieval_settings) -> None:
        settings = retrieval_settings.model_copy(update={"history_limit": 2})
        assembler = make_assembler(settings, rag_pipeline=FakeRAG(StageResult.empty([])))
        history = [turn(TurnRole.USER, "one"), turn(TurnRole.ASSISTANT, "two"), turn(TurnRole.USER, "three")]

        prompt = await assembler.assemble("four", history=history)

        assert [t.content for t in prompt.history] == ["two", "three"]

    @pytest.mark.asyncio
    async def test_assemble_should_use_persona_override(self, retrieval_settings) -> None:
        assembler = make_assembler(retrieval_settings, rag_pipeline=FakeRAG(StageResult.empty([])))

        prompt = await assembler.assemble("hi", persona="You are a pirate.")

        assert prompt.system_instruction.startswith("You are a pirate.")


class TestContextAssemblerBudget:
    """Test suite for the prompt character ceiling."""

    @staticmethod
    def _chunks() -> list[RankedChunk]:
        return [
            ranked("exam deadline " * 5, "first.md", 0),
            ranked("exam rooms " * 5, "second.md", 1),
        ]

    async def _baseline(self, settings) -> int:
        assembler = make_assembler(settings, rag_pipeline=FakeRAG(StageResult.ok(self._chunks())))
        return (await assembler.assemble("exam?")).total_chars

    @pytest.mark.asyncio
    async def test_budget_should_drop_oldest_history_first(self, retrieval_settings) -> None:
        # Arrange
        baseline = await self._baseline(retrieval_settings)
        settings = retrieval_settings.model_copy(update={"max_prompt_chars": baseline + 150})
        assembler = make_assembler(settings, rag_pipeline=FakeRAG(StageResult.ok(self._chunks())))
        history = [turn(TurnRole.USER if n % 2 == 0 else TurnRole.ASSISTANT, f"{n}" * 100) for n in range(4)]

        # Act
        prompt = await assembler.assemble("exam?", history=history)

        # Assert
        assert prompt.total_chars <= settings.max_prompt_chars
        assert [t.content for t in prompt.history] == ["3" * 100]
        assert prompt.sources == ["first.md", "second.md"]
        assert prompt.truncated is True

    @pytest.mark.asyncio
    async def test_budget_should_drop_lowest_ranked_chunks_after_history(self, retrieval_settings) -> None:
        baseline = await self._baseline(retrieval_settings)
        settings = retrieval_settings.model_copy(update={"max_prompt_chars": baseline - 10})
        assembler = make_assembler(settings, rag_pipeline=FakeRAG(StageResult.ok(self._chunks())))
        history = [turn(TurnRole.USER, "x" * 50)]

        prompt = await assembler.assemble("exam?", history=history)

        assert prompt.total_chars <= settings.max_prompt_chars
        assert prompt.history == []
        assert prompt.sources == ["first.md"]
        assert "exam rooms" not in prompt.user_content

    @pytest.mark.asyncio
    async def test_budget_should_hard_truncate_context_last(self, retrieval_settings) -> None:
        # Arrange
        system = f"You are Ada.\n\nCurrent time: {FIXED_NOW.isoformat()}"
        overhead = len(system) + len(CONTEXT_HEADER) + len("\n\n") + len("\n\nQuestion: ") + len("exam?")
        settings = retrieval_settings.model_copy(update={"max_prompt_chars": overhead + 40})
        assembler = make_assembler(
            settings,
            rag_pipeline=FakeRAG(StageResult.empty([])),
            web_search=FakeWeb([WebSnippet(title="News", content="exam " * 200)]),
        )

        # Act
        prompt = await assembler.assemble("exam?", flags=ContextFlags(web_search=True))

        # Assert
        assert prompt.total_chars <= settings.max_prompt_chars
        assert prompt.truncated is True
        assert prompt.user_content.endswith("Question: exam?")
        assert "…" in prompt.user_content


class TestAssembledPromptToMessages:
    """Test suite for AssembledPrompt.to_messages()."""

    def test_to_messages_should_order_system_history_then_user(self) -> None:
        prompt = AssembledPrompt(
            system_instruction="sys",
            user_content="now",
            history=[turn(TurnRole.USER, "hi"), turn(TurnRole.ASSISTANT, "hello")],
        )

        messages = prompt.to_messages()

        assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
        assert [m.content for m in messages] == ["sys", "hi", "hello", "now"]
