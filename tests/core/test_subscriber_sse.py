"""
Test suite for SubscriberChannel and SSE framing.

System role: Verification of the publish/subscribe sink and wire format
"""

import json
import uuid

import pytest

from agentchat.core.streaming.session_state import StreamSessionState, StreamStatus
from agentchat.core.streaming.sse import (
    DONE_SENTINEL,
    ERROR_SENTINEL,
    format_event,
    iter_sse,
    terminal_frames,
)
from agentchat.core.streaming.subscriber import SubscriberChannel
from agentchat.models.streaming import StreamEvent


def payload(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


class TestSubscriberChannel:
    """Test suite for SubscriberChannel."""

    @pytest.mark.asyncio
    async def test_channel_should_deliver_events_published_before_close(self) -> None:
        # Arrange
        channel = SubscriberChannel(uuid.uuid4())
        channel.publish(StreamEvent.token("a"))
        channel.publish(StreamEvent.token("b"))
        channel.close()

        # Act
        events = [e async for e in channel]

        # Assert
        assert [e.data["token"] for e in events] == ["a", "b"]

    def test_publish_should_refuse_after_close(self) -> None:
        channel = SubscriberChannel(uuid.uuid4())
        channel.close()
        channel.close()

        assert channel.closed is True
        assert channel.publish(StreamEvent.token("late")) is False


class TestSseFraming:
    """Test suite for SSE frame rendering."""

    def test_format_event_should_keep_non_ascii_text(self) -> None:
        frame = format_event(StreamEvent.token("考试"))

        assert "考试" in frame
        body = payload(frame)
        assert body["token"] == "考试"
        assert "timestamp" in body

    def test_error_event_should_carry_code(self) -> None:
        body = payload(format_event(StreamEvent.error("model down", code="GENERATION_FAILED")))

        assert body["error"] == "model down"
        assert body["code"] == "GENERATION_FAILED"

    def test_terminal_frames_should_match_final_status(self) -> None:
        done = StreamSessionState(session_id=uuid.uuid4(), status=StreamStatus.COMPLETED)
        failed = StreamSessionState(session_id=uuid.uuid4(), status=StreamStatus.FAILED, error="boom")

        assert terminal_frames(done)[1] == DONE_SENTINEL
        assert payload(terminal_frames(done)[0])["done"] is True
        assert terminal_frames(failed)[1] == ERROR_SENTINEL
        assert payload(terminal_frames(failed)[0])["error"] == "boom"

    @pytest.mark.asyncio
    async def test_iter_sse_should_stop_after_done_sentinel(self) -> None:
        # Arrange
        channel = SubscriberChannel(uuid.uuid4())
        channel.publish(StreamEvent.token("hi"))
        channel.publish(StreamEvent.done())
        channel.publish(StreamEvent.token("ignored"))

        # Act
        frames = [f async for f in iter_sse(channel)]

        # Assert
        assert len(frames) == 3
        assert payload(frames[0])["token"] == "hi"
        assert frames[-1] == DONE_SENTINEL

    @pytest.mark.asyncio
    async def test_iter_sse_should_end_silently_when_channel_closes(self) -> None:
        channel = SubscriberChannel(uuid.uuid4())
        channel.publish(StreamEvent.token("hi"))
        channel.close()

        frames = [f async for f in iter_sse(channel)]

        assert len(frames) == 1
