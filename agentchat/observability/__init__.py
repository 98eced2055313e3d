"""
Observability module.

Provides logging configuration, correlation ID tracking, HTTP middleware
and Langfuse prompt version management.
"""

from agentchat.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from agentchat.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
