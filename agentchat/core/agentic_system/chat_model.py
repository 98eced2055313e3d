"""
Chat model streaming adapter.

`ModelStreamer` is the only thing the streaming coordinator knows about the
model: messages in, text deltas out, terminated by normal completion or an
exception.

Dependencies: langchain_core, langchain_google_genai
System role: Token source for the streaming coordinator
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

from dotenv import load_dotenv
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage

from agentchat.configs.llm import LLMSettings
from agentchat.core.exceptions import StreamGenerationError

logger = logging.getLogger(__name__)

load_dotenv()


class ModelStreamer(Protocol):
    def astream(self, messages: list[BaseMessage]) -> AsyncIterator[str]: ...


def content_text(content: Any) -> str:
    """
    Flatten LangChain message content to text.

    Gemini returns either a string or a list of parts (`str` or
    `{"type": "text", "text": ...}` dicts).
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)


def build_gemini_chat_model(settings: LLMSettings, temperature: float | None = None) -> BaseChatModel:
    """
    Create the Gemini chat model.

    Args:
        settings: LLM settings
        temperature: Override for the configured temperature
    """
    from langchain_google_genai import ChatGoogleGenerativeAI

    return ChatGoogleGenerativeAI(
        model=settings.model_id,
        temperature=settings.temperature if temperature is None else temperature,
        max_output_tokens=settings.max_tokens,
    )


class GeminiModelStreamer:
    """Streams text deltas from a LangChain chat model (Gemini by default)."""

    def __init__(self, chat_model: BaseChatModel) -> None:
        self._model = chat_model

    async def astream(self, messages: list[BaseMessage]) -> AsyncIterator[str]:
        """
        Yield non-empty text deltas.

        Raises:
            StreamGenerationError: When the model call fails mid-stream
        """
        try:
            async for chunk in self._model.astream(messages):
                text = content_text(getattr(chunk, "content", chunk))
                if text:
                    yield text
        except StreamGenerationError:
            raise
        except Exception as e:
            raise StreamGenerationError(f"Model stream failed: {type(e).__name__}: {e}") from e
