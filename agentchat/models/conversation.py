"""
Conversation domain models.

Turns exchanged in a session and long-term memory items supplied to the
context assembler.

Dependencies: pydantic
System role: Conversation data contracts
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class TurnRole(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationTurn(BaseModel):
    """One message in a session."""

    session_id: UUID
    role: TurnRole
    content: str
    attachments: list[dict[str, Any]] | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MemoryItem(BaseModel):
    """Long-term memory fact about a user; read-only for this package."""

    user_id: str
    content: str
    category: str = "general"
    active: bool = True
