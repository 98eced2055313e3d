"""
Session title generation from the first user / assistant exchange.

Dependencies: langchain_core, agentchat.observability.prompt_registry
System role: Background task after the first turn of a session
"""

import logging

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage

from agentchat.boundary.db.models.chat_session_model import DEFAULT_SESSION_TITLE
from agentchat.core.agentic_system.chat_model import content_text
from agentchat.core.context.prompts import TITLE_PROMPT, TITLE_PROMPT_NAME
from agentchat.observability.prompt_registry import PromptRegistry

logger = logging.getLogger(__name__)

_STRIP_CHARS = " \t\r\n\"'“”‘’「」《》.。"


class TitleGenerator:
    """Asks the chat model for a short session title."""

    def __init__(
        self,
        chat_model: BaseChatModel,
        max_chars: int = 20,
        prompt_registry: PromptRegistry | None = None,
    ) -> None:
        self._model = chat_model
        self._max_chars = max_chars
        self._registry = prompt_registry

    def _template(self) -> str:
        if self._registry is None:
            return TITLE_PROMPT
        return self._registry.resolve(TITLE_PROMPT_NAME, TITLE_PROMPT)

    def clean(self, raw: str) -> str | None:
        """First line of the reply, stripped of quotes and cut to `max_chars`."""
        lines = [line for line in raw.strip().splitlines() if line.strip()]
        if not lines:
            return None
        title = lines[0].strip(_STRIP_CHARS)[: self._max_chars].strip()
        if not title or title.lower() == DEFAULT_SESSION_TITLE.lower():
            return None
        return title

    async def generate(self, user_message: str, assistant_message: str) -> str | None:
        """
        Returns:
            str | None: Title, or None when the model gave nothing usable

        Raises:
            Exception: Whatever the model call raises; callers log it
        """
        prompt = self._template().format(
            max_chars=self._max_chars,
            user_message=user_message[:500],
            assistant_message=assistant_message[:500],
        )
        reply = await self._model.ainvoke([HumanMessage(content=prompt)])
        return self.clean(content_text(reply.content))
