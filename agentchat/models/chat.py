"""
Chat API request/response schemas.

Dependencies: pydantic
System role: Chat API contracts
"""

from uuid import UUID

from pydantic import BaseModel, Field


class ChatStreamRequest(BaseModel):
    """Request body for starting a streamed chat turn."""

    session_id: UUID
    message: str = Field(min_length=1, description="User question or message")
    user_id: str | None = Field(default=None, description="Owner of the session; enables memory")
    persona: str | None = Field(default=None, description="Agent system prompt")
    web_search: bool = Field(default=False, description="Inject live web search snippets")
    enable_rag: bool = Field(default=True, description="Inject reranked document chunks")
    enable_memory: bool = Field(default=True, description="Inject the user's long-term memory")


class StreamStateResponse(BaseModel):
    """Snapshot of a session's in-memory generation state."""

    session_id: UUID
    status: str
    accumulated_text: str = ""
    error: str | None = None
