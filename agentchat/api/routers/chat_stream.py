"""
Server-Sent-Events chat endpoints.

Routes:
    POST /chat/stream                        start a turn and stream its tokens
    GET  /chat/sessions/{session_id}/stream  re-attach to a live generation
    GET  /chat/sessions/{session_id}/state   catch-up snapshot

Closing the HTTP stream only detaches the subscriber; the generation keeps
running and its answer is still persisted.

Dependencies: fastapi, agentchat.application.services, agentchat.core.streaming
System role: Streaming chat HTTP API
"""

import logging
from collections.abc import AsyncIterator
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from agentchat.api.deps.dependencies import get_chat_service, get_coordinator
from agentchat.application.services.chat_service import ChatService
from agentchat.core.context.assembler import ContextFlags
from agentchat.core.exceptions import PersistenceError, SessionNotFoundError, ValidationError
from agentchat.core.streaming.coordinator import StreamingCoordinator
from agentchat.core.streaming.session_state import StreamStatus
from agentchat.core.streaming.sse import SSE_HEADERS, iter_sse
from agentchat.core.streaming.subscriber import SubscriberChannel
from agentchat.models.chat import ChatStreamRequest, StreamStateResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])


def _sse_response(
    coordinator: StreamingCoordinator,
    session_id: UUID,
    channel: SubscriberChannel,
) -> StreamingResponse:
    async def event_stream() -> AsyncIterator[str]:
        try:
            async for frame in iter_sse(channel):
                yield frame
        finally:
            coordinator.detach_subscriber(session_id, channel)

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/stream")
async def stream_chat(
    request: ChatStreamRequest,
    chat_service: ChatService = Depends(get_chat_service),
    coordinator: StreamingCoordinator = Depends(get_coordinator),
) -> StreamingResponse:
    """
    Start a chat turn and stream the reply.

    Frames:
        data: {"token": "...", "timestamp": "..."}
        data: {"done": true, "timestamp": "..."}
        data: [DONE]
    or on failure:
        data: {"error": "...", "code": "GENERATION_FAILED", "timestamp": "..."}
        data: [ERROR]

    Raises:
        HTTPException: 422 for a blank message, 404 for an unknown session, 409 while the session is
            already generating, 503 when the user message cannot be stored
    """
    flags = ContextFlags(
        web_search=request.web_search,
        rag=request.enable_rag,
        memory=request.enable_memory,
    )
    try:
        result = await chat_service.start_chat_turn(
            session_id=request.session_id,
            message=request.message,
            user_id=request.user_id,
            flags=flags,
            persona=request.persona,
            attach=True,
        )
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message) from e
    except PersistenceError as e:
        logger.error(f"{__name__}:stream_chat - persistence failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Conversation store unavailable",
        ) from e

    if not result.accepted or result.channel is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session is already generating a response",
        )

    return _sse_response(coordinator, request.session_id, result.channel)


@router.get("/sessions/{session_id}/stream")
async def reattach_stream(
    session_id: UUID,
    coordinator: StreamingCoordinator = Depends(get_coordinator),
) -> StreamingResponse:
    """
    Re-attach to a session's generation.

    Only tokens emitted after attaching are streamed; fetch `/state` for the
    text produced so far. A finished session gets its terminal frames at once.
    """
    channel = coordinator.attach_subscriber(session_id)
    if channel is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No generation for this session",
        )
    return _sse_response(coordinator, session_id, channel)


@router.get("/sessions/{session_id}/state", response_model=StreamStateResponse)
async def get_stream_state(
    session_id: UUID,
    coordinator: StreamingCoordinator = Depends(get_coordinator),
) -> StreamStateResponse:
    """Snapshot for a one-shot catch-up render."""
    state = coordinator.get_state(session_id)
    if state is None:
        return StreamStateResponse(session_id=session_id, status=StreamStatus.IDLE.value)
    return StreamStateResponse(
        session_id=session_id,
        status=state.status.value,
        accumulated_text=state.accumulated_text,
        error=state.error,
    )
