"""
Langfuse prompt registry module.

Fetches versioned prompt text from Langfuse with local-template fallback.

Dependencies: langfuse, pydantic
System role: Prompt version management
"""

from agentchat.observability.prompt_registry.models import ModelConfig
from agentchat.observability.prompt_registry.registry import PromptRegistry

__all__ = ["PromptRegistry", "ModelConfig"]
