"""
Contracts shared by every relative_time module.

Modules:
- base: ErrorCode and the exception hierarchy
- events: immutable audit records
"""

from .base import (
    ErrorCode,
    TimeSpanError,
    OwnershipError,
    AnchorNotPositionedError,
    InvalidPositionError,
    TimelineCorruptionError,
    ComparabilityError,
    StaleSpanError,
    SpanConstructionError,
    NotCloneableError,
)
from .events import AuditAction, AuditLogEntry

__all__ = [
    'ErrorCode',
    'TimeSpanError',
    'OwnershipError',
    'AnchorNotPositionedError',
    'InvalidPositionError',
    'TimelineCorruptionError',
    'ComparabilityError',
    'StaleSpanError',
    'SpanConstructionError',
    'NotCloneableError',
    'AuditAction',
    'AuditLogEntry',
]
