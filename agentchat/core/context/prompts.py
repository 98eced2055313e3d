"""
Prompt templates for context assembly and session titles.

Local templates are the source of truth; when the Langfuse prompt registry
is active the same names are resolved from it first.

Dependencies: agentchat.observability.prompt_registry
System role: Prompt text for the chat turn and title generation
"""

import logging

from agentchat.configs.llm import LLMSettings
from agentchat.observability.prompt_registry import ModelConfig, PromptRegistry

logger = logging.getLogger(__name__)

CONTEXT_HEADER_PROMPT_NAME = "chat-context-header"
TITLE_PROMPT_NAME = "chat-session-title"

CONTEXT_HEADER = (
    "Answer the question using the following context. "
    "If the context is insufficient, say that you don't know instead of guessing."
)

WEB_SECTION_TITLE = "## Web search results"
RAG_SECTION_TITLE = "## Reference documents"
MEMORY_SECTION_TITLE = "## What you remember about the user"

TITLE_PROMPT = (
    "Summarize the topic of this conversation as a short title of at most "
    "{max_chars} characters. Reply with the title only, no quotes or punctuation at the end.\n\n"
    "User: {user_message}\n"
    "Assistant: {assistant_message}"
)


def register_prompts(
    registry: PromptRegistry,
    llm_settings: LLMSettings,
    labels: list[str] | None = None,
) -> None:
    """
    Push the local templates to Langfuse as new prompt versions.

    Args:
        registry: Prompt registry (no-op when inactive)
        llm_settings: Model settings stored with the prompts
        labels: Optional labels (e.g. ["production"])
    """
    config = ModelConfig(
        model=llm_settings.model_id,
        temperature=llm_settings.temperature,
        max_tokens=llm_settings.max_tokens,
    )
    registry.register_prompt(CONTEXT_HEADER_PROMPT_NAME, CONTEXT_HEADER, config, labels)
    registry.register_prompt(TITLE_PROMPT_NAME, TITLE_PROMPT, config, labels)
    logger.info(f"{__name__}:register_prompts - registered prompts with labels={labels}")
