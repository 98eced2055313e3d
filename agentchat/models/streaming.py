"""
Streaming event schemas.

Events published by the streaming coordinator to a session's subscriber
and their JSON payloads on the Server-Sent-Events wire.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class StreamEventType(str, Enum):
    """Server-to-client event types."""

    TOKEN = "token"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    """
    Event delivered to a session subscriber.

    Attributes:
        event: Event type identifier
        data: Event-specific payload
        timestamp: Emission time (UTC)
    """

    event: StreamEventType
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def token(cls, token: str) -> "StreamEvent":
        return cls(event=StreamEventType.TOKEN, data={"token": token})

    @classmethod
    def done(cls) -> "StreamEvent":
        return cls(event=StreamEventType.DONE, data={"done": True})

    @classmethod
    def error(cls, message: str, code: str = "GENERATION_FAILED") -> "StreamEvent":
        return cls(event=StreamEventType.ERROR, data={"error": message, "code": code})

    @property
    def is_terminal(self) -> bool:
        return self.event in (StreamEventType.DONE, StreamEventType.ERROR)

    def to_wire(self) -> dict[str, Any]:
        """JSON payload placed after `data:` on the SSE wire."""
        return {**self.data, "timestamp": self.timestamp.isoformat()}
