"""
Pydantic models for prompt registry configuration.

Dependencies: pydantic
System role: Configuration validation for prompt-model pairs
"""

from typing import Any

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """
    LLM configuration stored alongside a prompt in Langfuse.

    Attributes:
        model: LLM model identifier
        temperature: Sampling temperature (0.0-2.0)
        max_tokens: Maximum tokens in response
    """

    model: str = Field(description="LLM model identifier")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)

    def to_langfuse_config(self) -> dict[str, Any]:
        """Convert to a Langfuse config dictionary, omitting unset values."""
        return self.model_dump(exclude_none=True)
