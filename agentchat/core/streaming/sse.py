"""
Server-Sent-Events framing.

Each event is one `data: <json>` frame. A successful stream ends with
`data: {"done": true, ...}` then `data: [DONE]`; a failed one with
`data: {"error": ..., "code": ...}` then `data: [ERROR]`.

Dependencies: json
System role: Wire format toward the browser
"""

import json
from collections.abc import AsyncIterator

from agentchat.core.streaming.session_state import StreamSessionState, StreamStatus
from agentchat.core.streaming.subscriber import SubscriberChannel
from agentchat.models.streaming import StreamEvent, StreamEventType

DONE_SENTINEL = "data: [DONE]\n\n"
ERROR_SENTINEL = "data: [ERROR]\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: StreamEvent) -> str:
    return f"data: {json.dumps(event.to_wire(), ensure_ascii=False)}\n\n"


def format_token_event(token: str) -> str:
    return format_event(StreamEvent.token(token))


def format_done_event() -> str:
    return format_event(StreamEvent.done())


def format_error_event(message: str, code: str = "GENERATION_FAILED") -> str:
    return format_event(StreamEvent.error(message, code))


def terminal_frames(state: StreamSessionState) -> list[str]:
    """Closing frames for a session that has already finished."""
    if state.status is StreamStatus.FAILED:
        return [format_error_event(state.error or "Generation failed"), ERROR_SENTINEL]
    return [format_done_event(), DONE_SENTINEL]


async def iter_sse(channel: SubscriberChannel) -> AsyncIterator[str]:
    """
    Turn a subscriber channel into SSE frames.

    Stops after the terminal event's sentinel, or silently when the channel
    is closed without one (the subscriber was detached or replaced).
    """
    async for event in channel:
        yield format_event(event)
        if event.event is StreamEventType.DONE:
            yield DONE_SENTINEL
            return
        if event.event is StreamEventType.ERROR:
            yield ERROR_SENTINEL
            return
