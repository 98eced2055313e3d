"""
In-memory generation state per session.

Dependencies: dataclasses
System role: State owned exclusively by the streaming coordinator
"""

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from agentchat.core.streaming.subscriber import SubscriberChannel


class StreamStatus(str, Enum):
    """idle -> generating -> completed | failed -> (next turn) generating"""

    IDLE = "idle"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StreamSessionState:
    """
    Live state of one session's current (or last) turn.

    Attributes:
        session_id: Session the state belongs to
        status: Position in the state machine
        accumulated_text: Every token emitted so far, in order
        subscriber: Attached UI channel, if any
        started_at: When the turn entered `generating`
        finished_at: When the turn left `generating`
        error: Failure message for `failed` turns
        persisted_turn_id: ID of the stored assistant turn
    """

    session_id: UUID
    status: StreamStatus = StreamStatus.IDLE
    accumulated_text: str = ""
    subscriber: SubscriberChannel | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    persisted_turn_id: UUID | None = None

    @property
    def is_generating(self) -> bool:
        return self.status is StreamStatus.GENERATING

    @property
    def is_terminal(self) -> bool:
        return self.status in (StreamStatus.COMPLETED, StreamStatus.FAILED)

    def begin(self) -> None:
        self.status = StreamStatus.GENERATING
        self.accumulated_text = ""
        self.started_at = datetime.now(timezone.utc)
        self.finished_at = None
        self.error = None
        self.persisted_turn_id = None

    def finish(self, status: StreamStatus, error: str | None = None) -> None:
        self.status = status
        self.error = error
        self.finished_at = datetime.now(timezone.utc)

    def snapshot(self) -> "StreamSessionState":
        """Detached copy without the subscriber, safe to hand to readers."""
        return dataclasses.replace(self, subscriber=None)
