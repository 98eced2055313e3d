"""
Context assembler.

Gathers up to three optional context blocks for a turn (web search, RAG
chunks, long-term memory), each best-effort and individually capped, and
fuses them with the user question under a fixed instructional header.
Conversation history stays structured and is passed to the model as
separate turns.

Prompt budget: after the per-block caps, the total of system instruction,
history and user content must stay under `max_prompt_chars`. Overflow drops
the oldest history turns first, then the lowest-ranked RAG chunks, then
hard-truncates the remaining context text.

Dependencies: asyncio, langchain_core, agentchat.core.retrieval,
    agentchat.boundary.web_search
System role: Prompt construction for the streaming coordinator
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from agentchat.boundary.web_search.web_search_client import WebSearchClient, WebSnippet
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.core.context.prompts import (
    CONTEXT_HEADER,
    CONTEXT_HEADER_PROMPT_NAME,
    MEMORY_SECTION_TITLE,
    RAG_SECTION_TITLE,
    WEB_SECTION_TITLE,
)
from agentchat.core.results import StageResult
from agentchat.core.retrieval.rag_pipeline import RAGPipeline
from agentchat.models.conversation import ConversationTurn, TurnRole
from agentchat.models.retrieval import RankedChunk
from agentchat.observability.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "…"


class MemoryProvider(Protocol):
    async def get_memory_summary(self, user_id: str, limit: int = 10) -> str: ...


@dataclass
class ContextFlags:
    """Which optional context sources a turn asks for."""

    web_search: bool = False
    rag: bool = True
    memory: bool = True


@dataclass
class AssembledPrompt:
    """
    Prompt handed to the streaming coordinator.

    Attributes:
        system_instruction: Persona plus current time
        user_content: Bare query, or header + context blocks + question
        history: Prior turns, oldest to newest
        blocks: Outcome of each requested context source
        sources: Source labels of the RAG chunks that made it into the prompt
        truncated: Whether the prompt budget forced anything out
    """

    system_instruction: str
    user_content: str
    history: list[ConversationTurn] = field(default_factory=list)
    blocks: dict[str, StageResult[str]] = field(default_factory=dict)
    sources: list[str] = field(default_factory=list)
    truncated: bool = False

    @property
    def total_chars(self) -> int:
        return (
            len(self.system_instruction)
            + sum(len(turn.content) for turn in self.history)
            + len(self.user_content)
        )

    def to_messages(self) -> list[BaseMessage]:
        """LangChain messages: system, history, then the final user turn."""
        messages: list[BaseMessage] = [SystemMessage(content=self.system_instruction)]
        for turn in self.history:
            if turn.role == TurnRole.USER:
                messages.append(HumanMessage(content=turn.content))
            elif turn.role == TurnRole.ASSISTANT:
                messages.append(AIMessage(content=turn.content))
        messages.append(HumanMessage(content=self.user_content))
        return messages


def cap_text(text: str, max_chars: int) -> str:
    """Trim `text` to `max_chars`, marking the cut."""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    return text[: max_chars - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


def render_snippets(snippets: list[WebSnippet]) -> str:
    lines = []
    for n, snippet in enumerate(snippets, start=1):
        heading = snippet.title or snippet.url or "result"
        if snippet.url and snippet.title:
            heading = f"{snippet.title} ({snippet.url})"
        lines.append(f"[{n}] {heading}\n{snippet.content.strip()}")
    return "\n\n".join(lines)


def render_chunk(n: int, chunk: RankedChunk) -> str:
    return f"[{n}] (source: {chunk.source_label}) {chunk.content.strip()}"


class ContextAssembler:
    """Builds the bounded prompt for one chat turn."""

    def __init__(
        self,
        settings: RetrievalSettings,
        rag_pipeline: RAGPipeline | None = None,
        web_search: WebSearchClient | None = None,
        memory: MemoryProvider | None = None,
        prompt_registry: PromptRegistry | None = None,
        default_persona: str = "You are a helpful AI assistant.",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._rag = rag_pipeline
        self._web = web_search
        self._memory = memory
        self._registry = prompt_registry
        self._default_persona = default_persona
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _header(self) -> str:
        if self._registry is None:
            return CONTEXT_HEADER
        return self._registry.resolve(CONTEXT_HEADER_PROMPT_NAME, CONTEXT_HEADER)

    async def _web_block(self, query: str) -> StageResult[str]:
        if self._web is None:
            return StageResult.degraded("", reason="web search not configured")
        try:
            snippets = await asyncio.wait_for(
                self._web.search(query, self._settings.web_search_max_results),
                timeout=self._settings.web_search_timeout,
            )
        except Exception as e:
            logger.warning(f"{__name__}:_web_block - web search unavailable: {type(e).__name__}: {e}")
            return StageResult.degraded("", reason=f"web search failed: {type(e).__name__}")
        if not snippets:
            return StageResult.empty("", reason="no web results")
        text = render_snippets(snippets[: self._settings.web_search_max_results])
        return StageResult.ok(cap_text(text, self._settings.web_block_max_chars))

    async def _rag_chunks(self, query: str) -> StageResult[list[RankedChunk]]:
        if self._rag is None:
            return StageResult.degraded([], reason="document search not configured")
        try:
            return await self._rag.search(query, self._settings.top_k)
        except Exception as e:
            logger.warning(f"{__name__}:_rag_chunks - document search failed: {type(e).__name__}: {e}")
            return StageResult.degraded([], reason=f"document search failed: {type(e).__name__}")

    def _rag_entries(self, chunks: list[RankedChunk]) -> list[str]:
        """Rendered chunks that fit the RAG block cap, best first."""
        entries: list[str] = []
        used = 0
        cap = self._settings.rag_block_max_chars
        for n, chunk in enumerate(chunks, start=1):
            entry = render_chunk(n, chunk)
            separator = 2 if entries else 0
            if used + separator + len(entry) > cap:
                if not entries:
                    entries.append(cap_text(entry, cap))
                break
            entries.append(entry)
            used += separator + len(entry)
        return entries

    async def _memory_block(self, user_id: str) -> StageResult[str]:
        if self._memory is None:
            return StageResult.degraded("", reason="memory not configured")
        try:
            summary = await self._memory.get_memory_summary(user_id, self._settings.memory_item_limit)
        except Exception as e:
            logger.warning(f"{__name__}:_memory_block - memory unavailable: {type(e).__name__}: {e}")
            return StageResult.degraded("", reason=f"memory failed: {type(e).__name__}")
        if not summary or not summary.strip():
            return StageResult.empty("", reason="no memory items")
        return StageResult.ok(cap_text(summary.strip(), self._settings.memory_block_max_chars))

    @staticmethod
    def _sections(web: str, rag_entries: list[str], memory: str) -> str:
        sections = []
        if web:
            sections.append(f"{WEB_SECTION_TITLE}\n{web}")
        if rag_entries:
            sections.append(f"{RAG_SECTION_TITLE}\n" + "\n\n".join(rag_entries))
        if memory:
            sections.append(f"{MEMORY_SECTION_TITLE}\n{memory}")
        return "\n\n".join(sections)

    def _compose(self, header: str, context: str, query: str) -> str:
        if not context:
            return query
        return f"{header}\n\n{context}\n\nQuestion: {query}"

    async def assemble(
        self,
        query: str,
        history: list[ConversationTurn] | None = None,
        flags: ContextFlags | None = None,
        user_id: str | None = None,
        persona: str | None = None,
    ) -> AssembledPrompt:
        """
        Build the prompt for one turn.

        Args:
            query: Current user message
            history: Prior turns, oldest to newest
            flags: Requested context sources
            user_id: Owner of the session (memory is skipped without one)
            persona: Agent system prompt (default persona when None)

        Returns:
            AssembledPrompt: Never raises for a missing context source
        """
        flags = flags or ContextFlags()
        history = list(history or [])[-self._settings.history_limit :] if self._settings.history_limit else []

        names: list[str] = []
        tasks = []
        if flags.web_search:
            names.append("web")
            tasks.append(self._web_block(query))
        if flags.rag:
            names.append("rag")
            tasks.append(self._rag_chunks(query))
        if flags.memory and user_id:
            names.append("memory")
            tasks.append(self._memory_block(user_id))
        outcomes = dict(zip(names, await asyncio.gather(*tasks)))

        blocks: dict[str, StageResult[str]] = {}
        web_text = ""
        memory_text = ""
        chunks: list[RankedChunk] = []
        if "web" in outcomes:
            blocks["web"] = outcomes["web"]
            web_text = outcomes["web"].value
        if "memory" in outcomes:
            blocks["memory"] = outcomes["memory"]
            memory_text = outcomes["memory"].value
        if "rag" in outcomes:
            rag_result: StageResult[list[RankedChunk]] = outcomes["rag"]
            chunks = list(rag_result.value)
            rendered = "\n\n".join(self._rag_entries(chunks))
            blocks["rag"] = StageResult(rag_result.status, rendered, rag_result.reason)

        persona_text = (persona or self._default_persona).strip()
        system_instruction = f"{persona_text}\n\nCurrent time: {self._clock().isoformat()}"
        header = self._header()

        prompt = self._fit_budget(
            system_instruction=system_instruction,
            header=header,
            query=query,
            history=history,
            web_text=web_text,
            chunks=chunks,
            memory_text=memory_text,
        )
        prompt.blocks = blocks
        statuses = {name: block.status.value for name, block in blocks.items()}
        logger.info(
            f"{__name__}:assemble - blocks={statuses} "
            f"history={len(prompt.history)} chars={prompt.total_chars} truncated={prompt.truncated}"
        )
        return prompt

    def _fit_budget(
        self,
        system_instruction: str,
        header: str,
        query: str,
        history: list[ConversationTurn],
        web_text: str,
        chunks: list[RankedChunk],
        memory_text: str,
    ) -> AssembledPrompt:
        ceiling = self._settings.max_prompt_chars
        entries = self._rag_entries(chunks)
        kept_chunks = chunks[: len(entries)]
        truncated = False

        def build() -> AssembledPrompt:
            context = self._sections(web_text, entries, memory_text)
            return AssembledPrompt(
                system_instruction=system_instruction,
                user_content=self._compose(header, context, query),
                history=list(history),
                sources=list(dict.fromkeys(c.source_label for c in kept_chunks)),
                truncated=truncated,
            )

        prompt = build()
        while prompt.total_chars > ceiling and history:
            history = history[1:]
            truncated = True
            prompt = build()
        while prompt.total_chars > ceiling and entries:
            entries = entries[:-1]
            kept_chunks = kept_chunks[: len(entries)]
            truncated = True
            prompt = build()
        if prompt.total_chars > ceiling:
            context = self._sections(web_text, entries, memory_text)
            overhead = prompt.total_chars - len(context)
            context = cap_text(context, ceiling - overhead)
            prompt = AssembledPrompt(
                system_instruction=system_instruction,
                user_content=self._compose(header, context, query),
                history=list(history),
                sources=list(dict.fromkeys(c.source_label for c in kept_chunks)),
                truncated=True,
            )
        return prompt
