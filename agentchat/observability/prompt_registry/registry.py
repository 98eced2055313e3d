"""
Langfuse prompt registry for versioned prompt management.

Registers local prompt templates as Langfuse text prompts and fetches the
current version back. Every failure degrades to the local template: prompt
management must never break a chat turn.

Dependencies: langfuse, agentchat.configs
System role: Prompt version control and retrieval
"""

import logging

from langfuse import Langfuse

from agentchat.configs.observability import ObservabilitySettings
from agentchat.observability.prompt_registry.models import ModelConfig

logger = logging.getLogger(__name__)


class PromptRegistry:
    """
    Registry for Langfuse text prompts.

    Constructed once at startup and injected; inactive when Langfuse keys
    are missing or the integration is disabled.

    Example:
        >>> registry = PromptRegistry(settings.observability)
        >>> registry.resolve("context-header", LOCAL_HEADER)
    """

    def __init__(
        self,
        settings: ObservabilitySettings,
        client: Langfuse | None = None,
    ) -> None:
        self._label = settings.prompt_label
        self._client: Langfuse | None = client
        self._enabled = client is not None

        if self._client is not None:
            return

        if not settings.enabled:
            logger.info("Langfuse disabled, prompt registry inactive")
            return

        if not settings.public_key or not settings.secret_key:
            logger.info("Langfuse keys not configured, prompt registry inactive")
            return

        self._client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
        )
        self._enabled = True
        logger.info("Prompt registry initialized: host=%s", settings.host)

    @property
    def is_enabled(self) -> bool:
        """Check if registry is active."""
        return self._enabled

    def register_prompt(
        self,
        name: str,
        text: str,
        config: ModelConfig,
        labels: list[str] | None = None,
    ) -> None:
        """
        Create a new Langfuse version of a text prompt.

        Args:
            name: Unique prompt identifier
            text: Prompt text
            config: Model configuration to store with the prompt
            labels: Optional labels (e.g. ["production"])
        """
        if not self._enabled or self._client is None:
            logger.debug("Prompt registry disabled, skipping registration: name=%s", name)
            return

        try:
            self._client.create_prompt(
                name=name,
                type="text",
                prompt=text,
                config=config.to_langfuse_config(),
                labels=labels or [],
            )
            logger.info("Registered text prompt: name=%s labels=%s", name, labels)
        except Exception as e:
            logger.warning(
                "Prompt registration failed: name=%s error=%s: %s",
                name, type(e).__name__, e,
            )

    def resolve(self, name: str, fallback: str) -> str:
        """
        Return the registered prompt text for `name`, or `fallback`.

        Args:
            name: Prompt identifier
            fallback: Local template used when the registry is inactive or fails

        Returns:
            str: Prompt text
        """
        if not self._enabled or self._client is None:
            return fallback

        kwargs: dict = {"name": name, "type": "text"}
        if self._label:
            kwargs["label"] = self._label

        try:
            prompt = self._client.get_prompt(**kwargs)
        except Exception as e:
            logger.warning(
                "Prompt fetch failed, using local template: name=%s error=%s",
                name, type(e).__name__,
            )
            return fallback

        text = getattr(prompt, "prompt", None)
        if not isinstance(text, str) or not text.strip():
            return fallback
        return text
