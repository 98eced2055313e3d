"""
Tagged stage results.

Each retrieval / rerank / context stage returns a `StageResult` so callers
can tell "succeeded normally", "succeeded via fallback" and "nothing found"
apart without exception control flow.

Dependencies: dataclasses, enum
System role: Result type shared by the degrade-and-continue stages
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class StageStatus(str, Enum):
    """Outcome of a pipeline stage."""

    OK = "ok"
    DEGRADED = "degraded"
    EMPTY = "empty"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Outcome of one pipeline stage.

    Attributes:
        status: ok, degraded (fallback path used) or empty (nothing found)
        value: Stage output; always usable, even when degraded
        reason: Why the stage degraded or came back empty
    """

    status: StageStatus
    value: T
    reason: str | None = None

    @classmethod
    def ok(cls, value: T) -> "StageResult[T]":
        return cls(StageStatus.OK, value)

    @classmethod
    def degraded(cls, value: T, reason: str) -> "StageResult[T]":
        return cls(StageStatus.DEGRADED, value, reason)

    @classmethod
    def empty(cls, value: T, reason: str | None = None) -> "StageResult[T]":
        return cls(StageStatus.EMPTY, value, reason)

    @property
    def is_ok(self) -> bool:
        return self.status is StageStatus.OK

    @property
    def is_degraded(self) -> bool:
        return self.status is StageStatus.DEGRADED

    @property
    def is_empty(self) -> bool:
        return self.status is StageStatus.EMPTY

    @property
    def has_value(self) -> bool:
        """True when the value is non-empty (degraded results may still carry data)."""
        return bool(self.value)
