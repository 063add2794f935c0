"""
Base Contracts and Error States

Foundational error types shared by every module of the package.

BOUNDARY ENFORCEMENT:
=====================
- Every failure is an exception carrying an explicit ErrorCode
- No silent fallbacks: nothing here returns a default on failure
- All failures indicate a composition mistake by the caller,
  never a transient condition, so nothing is ever retried
"""

from __future__ import annotations
from enum import Enum, auto
from typing import Optional


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every raised error maps to exactly one code.
    """
    # Timeline errors
    OWNERSHIP_VIOLATION = auto()
    ANCHOR_NOT_POSITIONED = auto()
    INVALID_POSITION = auto()
    TIMELINE_CORRUPTION = auto()

    # Ordering errors
    COMPARABILITY_VIOLATION = auto()
    STALE_SPAN = auto()

    # Span errors
    SPAN_CONSTRUCTION = auto()

    # Identity errors
    NOT_CLONEABLE = auto()


class TimeSpanError(Exception):
    """Base class for every error raised by relative_time."""

    code: Optional[ErrorCode] = None

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"[{self.code.name}] {self.message}"


class OwnershipError(TimeSpanError):
    """A point was inserted into a timeline it does not belong to."""
    code = ErrorCode.OWNERSHIP_VIOLATION


class AnchorNotPositionedError(TimeSpanError, LookupError):
    """A relative insertion referenced an anchor missing from the timeline."""
    code = ErrorCode.ANCHOR_NOT_POSITIONED


class InvalidPositionError(TimeSpanError, ValueError):
    """A slot position outside the timeline was requested."""
    code = ErrorCode.INVALID_POSITION


class TimelineCorruptionError(TimeSpanError):
    """The slot sequence and the position index disagree."""
    code = ErrorCode.TIMELINE_CORRUPTION


class ComparabilityError(TimeSpanError, TypeError):
    """Two values without a shared frame of reference were compared."""
    code = ErrorCode.COMPARABILITY_VIOLATION


class StaleSpanError(ComparabilityError):
    """A span was used after one of its endpoints left the timeline."""
    code = ErrorCode.STALE_SPAN


class SpanConstructionError(TimeSpanError, ValueError):
    """TimeSpan endpoints are not colinear or are out of order."""
    code = ErrorCode.SPAN_CONSTRUCTION


class NotCloneableError(TimeSpanError, TypeError):
    """Timelines and points carry identity and cannot be duplicated."""
    code = ErrorCode.NOT_CLONEABLE
