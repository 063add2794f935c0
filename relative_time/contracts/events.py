"""
Audit Event Contracts

Immutable records describing every mutation applied to a timeline.

INVARIANTS:
- Entries are frozen once created
- Sequence numbers are monotonic per timeline
- No wall-clock reads: ordering is carried by the sequence alone
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class AuditAction(Enum):
    """Mutations a timeline can record."""
    INSERT = "insert"
    SHIFT = "shift"
    REMOVE = "remove"
    COMPRESS = "compress"


@dataclass(frozen=True)
class AuditLogEntry:
    """
    Immutable audit record for a single timeline mutation.

    `payload` is the display string of the point involved, if any.
    `detail` holds extra key/value context as a tuple of pairs.
    """
    sequence: int
    action: AuditAction
    timeline_name: str
    payload: Optional[str] = None
    position: Optional[int] = None
    detail: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_detail(self, key: str, value: str) -> AuditLogEntry:
        """Return new entry with additional detail (immutable)."""
        return AuditLogEntry(
            sequence=self.sequence,
            action=self.action,
            timeline_name=self.timeline_name,
            payload=self.payload,
            position=self.position,
            detail=self.detail + ((key, value),)
        )
