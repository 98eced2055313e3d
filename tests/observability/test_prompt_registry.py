"""
Test suite for PromptRegistry.

System role: Verification of Langfuse prompt lookup with local fallback
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

from agentchat.configs.observability import ObservabilitySettings
from agentchat.core.context.prompts import CONTEXT_HEADER_PROMPT_NAME, TITLE_PROMPT_NAME, register_prompts
from agentchat.configs.llm import LLMSettings
from agentchat.observability.prompt_registry import ModelConfig, PromptRegistry


class TestPromptRegistry:
    """Test suite for PromptRegistry."""

    def test_registry_should_be_inactive_without_keys(self) -> None:
        registry = PromptRegistry(ObservabilitySettings(public_key=None, secret_key=None))

        assert registry.is_enabled is False
        assert registry.resolve("chat-context-header", "local") == "local"

    def test_resolve_should_return_remote_text_with_label(self) -> None:
        # Arrange
        client = MagicMock()
        client.get_prompt.return_value = SimpleNamespace(prompt="remote header")
        registry = PromptRegistry(ObservabilitySettings(prompt_label="production"), client=client)

        # Act
        text = registry.resolve("chat-context-header", "local")

        # Assert
        assert text == "remote header"
        client.get_prompt.assert_called_once_with(name="chat-context-header", type="text", label="production")

    def test_resolve_should_fall_back_on_error_or_blank_prompt(self) -> None:
        client = MagicMock()
        client.get_prompt.side_effect = RuntimeError("404")
        registry = PromptRegistry(ObservabilitySettings(), client=client)

        assert registry.resolve("missing", "local") == "local"

        client.get_prompt.side_effect = None
        client.get_prompt.return_value = SimpleNamespace(prompt="   ")
        assert registry.resolve("blank", "local") == "local"

    def test_register_prompts_should_push_both_templates(self) -> None:
        client = MagicMock()
        registry = PromptRegistry(ObservabilitySettings(), client=client)

        register_prompts(registry, LLMSettings(model_id="gemini-test", temperature=0.2), labels=["staging"])

        names = [c.kwargs["name"] for c in client.create_prompt.call_args_list]
        assert names == [CONTEXT_HEADER_PROMPT_NAME, TITLE_PROMPT_NAME]
        first = client.create_prompt.call_args_list[0].kwargs
        assert first["type"] == "text"
        assert first["labels"] == ["staging"]
        assert first["config"]["model"] == "gemini-test"

    def test_model_config_should_omit_unset_values(self) -> None:
        assert ModelConfig(model="m").to_langfuse_config() == {"model": "m"}
