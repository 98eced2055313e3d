"""
Exception hierarchy for the agentchat application.

Retrieval, rerank and context stages catch these and degrade; only
generation failures reach the user as an explicit error event.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class AgentChatException(Exception):
    """Base exception for all agentchat errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(AgentChatException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class SessionNotFoundError(AgentChatException):
    """Raised when a chat session cannot be found."""

    def __init__(self, session_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["session_id"] = session_id
        super().__init__(f"Session not found: {session_id}", details)


class IndexUnavailableError(AgentChatException):
    """Raised when the index store cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Args:
            message: Error message
            operation: Store operation that failed (hybrid_search, add_chunks, ...)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class EmbeddingError(AgentChatException):
    """Raised when the embedding service fails or returns a malformed vector."""

    pass


class RerankError(AgentChatException):
    """Raised by the rerank client on transport, quota or response-shape failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)


class ContextSourceUnavailableError(AgentChatException):
    """Raised by a context source (web search, memory) that could not be fetched."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class StreamGenerationError(AgentChatException):
    """Raised when the model stream fails; surfaced to the subscriber as an error event."""

    def __init__(
        self,
        message: str,
        session_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, details)


class PersistenceError(AgentChatException):
    """Raised when a conversation turn or session update cannot be saved."""

    pass
