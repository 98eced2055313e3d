"""
Per-session subscriber channel.

An unbounded asyncio.Queue the coordinator publishes StreamEvents into and a
UI consumer drains with `async for`. Closing enqueues a sentinel, so events
published before the close are still delivered, in order.

Dependencies: asyncio
System role: Publish/subscribe sink between coordinator and SSE response
"""

import asyncio
from uuid import UUID

from agentchat.models.streaming import StreamEvent

_CLOSED = object()


class SubscriberChannel:
    """Single-consumer event channel for one attached UI."""

    def __init__(self, session_id: UUID) -> None:
        self.session_id = session_id
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: StreamEvent) -> bool:
        """Enqueue an event; returns False once the channel is closed."""
        if self._closed:
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "SubscriberChannel":
        return self

    async def __anext__(self) -> StreamEvent:
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item
