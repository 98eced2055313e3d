"""
Session-scoped streaming: state machine, subscriber channels, SSE framing.
"""

from agentchat.core.streaming.coordinator import StartTurnResult, StreamingCoordinator
from agentchat.core.streaming.session_state import StreamSessionState, StreamStatus
from agentchat.core.streaming.subscriber import SubscriberChannel

__all__ = [
    "StartTurnResult",
    "StreamingCoordinator",
    "StreamSessionState",
    "StreamStatus",
    "SubscriberChannel",
]
