"""
Timeline
========

Ordered sequence of slots establishing relative order among points,
without absolute dates.

INVARIANTS:
- Every point held in slot i maps to i in the index, and vice versa
- Positions are >= 0 and < len(slots)
- A point is only ever indexed on its own timeline (enforced in insert_at)
- Removal never renumbers; only compress() does, as one staged swap

The index is keyed by each point's integer handle, never by the point's
payload or equality, so ordering always resolves through this object.
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Deque, Dict, Iterator, List, Optional, Tuple
import logging

from .contracts.base import (
    AnchorNotPositionedError,
    InvalidPositionError,
    NotCloneableError,
    OwnershipError,
    TimelineCorruptionError,
)
from .contracts.events import AuditAction, AuditLogEntry

if TYPE_CHECKING:
    from .point import RelativePoint
    from .span import TimeSpan


logger = logging.getLogger(__name__)

Slot = Dict[int, "RelativePoint"]


@dataclass
class TimelineConfig:
    """Configuration for a timeline."""
    record_audit: bool = True
    max_audit_entries: Optional[int] = None  # None keeps every entry
    auto_compress: bool = False
    verify_on_compress: bool = True


class Timeline:
    """
    Container of simultaneous-point slots with an authoritative index.

    Mutations:
        append, append_to_next, insert_before_next, insert_at,
        increase_after, remove, compress

    Each mutation is recorded in an append-only audit trail unless
    disabled through TimelineConfig.
    """

    def __init__(self, name: str = "", config: Optional[TimelineConfig] = None):
        self.name = name
        self._config = config or TimelineConfig()

        self._slots: List[Slot] = []
        self._index: Dict[int, int] = {}  # point handle -> slot position
        self._spans: List[TimeSpan] = []

        self._audit_log: Deque[AuditLogEntry] = deque(
            maxlen=self._config.max_audit_entries
        )
        self._audit_sequence = 0

    # =========================================================================
    # INDEX
    # =========================================================================

    def position_of(self, point: RelativePoint) -> Optional[int]:
        """Slot position of `point`, or None if it is not indexed here."""
        handle = getattr(point, 'handle', None)
        if handle is None:
            return None
        return self._index.get(handle)

    def increase_after(self, position: int, by: int = 1) -> None:
        """
        Add `by` to every index entry at or beyond `position`.

        Only the index moves. Callers must shift the slot sequence to
        match (see insert_before_next).
        """
        if by < 0:
            raise InvalidPositionError(
                f"cannot shift positions backwards by {by}"
            )

        shifted = 0
        for handle, current in self._index.items():
            if current >= position:
                self._index[handle] = current + by
                shifted += 1

        self._log_audit(
            AuditAction.SHIFT, position=position, by=by, shifted=shifted
        )

    # =========================================================================
    # INSERTION
    # =========================================================================

    def append(self, point: RelativePoint) -> int:
        """Place `point` alone in a new final slot."""
        return self.insert_at(len(self._slots), point)

    def append_to_next(
        self,
        anchor: RelativePoint,
        point: RelativePoint,
        offset: int = 1
    ) -> int:
        """
        Place `point` in the slot `offset` after `anchor`.

        The point becomes simultaneous with whatever already occupies
        that slot; the slot is created if absent.
        """
        target = self._anchor_position(anchor) + offset
        return self.insert_at(target, point)

    def insert_before_next(
        self,
        anchor: RelativePoint,
        point: RelativePoint,
        offset: int = 1
    ) -> int:
        """
        Open a brand-new slot `offset` after `anchor` and place `point` in it.

        Everything at or beyond the new slot moves forward by `offset`,
        so `point` is never simultaneous with what was there before.
        For offset > 1 the extra slots are left empty until compress().
        """
        if offset < 1:
            raise ValueError(f"offset must be >= 1, got {offset}")

        self._check_ownership(point)
        target = self._anchor_position(anchor) + offset

        self.increase_after(target, offset)
        if target < len(self._slots):
            self._slots[target:target] = [{} for _ in range(offset)]

        return self.insert_at(target, point)

    def insert_at(self, position: int, point: RelativePoint) -> int:
        """
        Place `point` in the slot at `position`.

        Joins the existing slot if occupied (no duplicates), otherwise
        creates it, padding with empty slots past the current end.
        A point already positioned here is moved.

        This is the single place that admits points to the index.
        """
        self._check_ownership(point)
        if position < 0:
            raise InvalidPositionError(
                f"cannot place {point} at negative position {position}"
            )

        current = self._index.get(point.handle)
        if current is not None and current != position:
            del self._slots[current][point.handle]

        while len(self._slots) <= position:
            self._slots.append({})

        self._slots[position][point.handle] = point
        self._index[point.handle] = position

        logger.debug(f"Timeline '{self.name}': placed {point} at {position}")
        self._log_audit(AuditAction.INSERT, point=point, position=position)
        return position

    # =========================================================================
    # REMOVAL & COMPACTION
    # =========================================================================

    def remove(self, point: RelativePoint) -> bool:
        """
        Remove `point` from its slot and from the index.

        The slot is left in place, possibly empty, so no other point
        is renumbered. Returns False if the point was not indexed.
        """
        position = self.position_of(point)
        if position is None:
            return False

        del self._slots[position][point.handle]
        del self._index[point.handle]

        logger.debug(f"Timeline '{self.name}': removed {point} from {position}")
        self._log_audit(AuditAction.REMOVE, point=point, position=position)

        if self._config.auto_compress:
            self.compress()
        return True

    def compress(self) -> int:
        """
        Drop every empty slot and renumber the index to match.

        Offsets come from one pass over the current slots; the new index
        and slot list are built aside and swapped in together, so a
        failure leaves the timeline untouched.

        Returns the number of slots removed.
        """
        if self._config.verify_on_compress:
            self.verify_integrity()

        deficit = 0
        offsets: List[int] = []
        for slot in self._slots:
            if not slot:
                deficit -= 1
            offsets.append(deficit)

        staged_index = {
            handle: position + offsets[position]
            for handle, position in self._index.items()
        }
        staged_slots = [slot for slot in self._slots if slot]
        removed = len(self._slots) - len(staged_slots)

        self._slots = staged_slots
        self._index = staged_index

        if removed:
            logger.debug(f"Timeline '{self.name}': compressed {removed} empty slots")
        self._log_audit(AuditAction.COMPRESS, removed=removed)
        return removed

    def verify_integrity(self) -> None:
        """Raise TimelineCorruptionError unless slots and index agree."""
        slotted = 0
        for position, slot in enumerate(self._slots):
            for handle, point in slot.items():
                indexed = self._index.get(handle)
                if indexed != position:
                    logger.warning(
                        f"Timeline '{self.name}' corrupt: {point} in slot "
                        f"{position} but indexed at {indexed}"
                    )
                    raise TimelineCorruptionError(
                        f"{point} is in slot {position} but indexed at {indexed}"
                    )
                slotted += 1

        if slotted != len(self._index):
            logger.warning(
                f"Timeline '{self.name}' corrupt: {len(self._index)} indexed, "
                f"{slotted} slotted"
            )
            raise TimelineCorruptionError(
                f"index holds {len(self._index)} points but slots hold {slotted}"
            )

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def line(self) -> Tuple[Tuple[RelativePoint, ...], ...]:
        """Snapshot of the slot sequence, one tuple of points per slot."""
        return tuple(tuple(slot.values()) for slot in self._slots)

    @property
    def index(self) -> Dict[RelativePoint, int]:
        """Snapshot of the index as point -> position."""
        return {
            point: position
            for position, slot in enumerate(self._slots)
            for point in slot.values()
        }

    @property
    def point_count(self) -> int:
        return len(self._index)

    def points(self) -> Iterator[RelativePoint]:
        """Positioned points in slot order (intra-slot order unspecified)."""
        for slot in self._slots:
            yield from list(slot.values())

    def points_at(self, position: int) -> Tuple[RelativePoint, ...]:
        """Points simultaneous at `position`; empty past the end."""
        if position < 0:
            raise InvalidPositionError(f"negative position {position}")
        if position >= len(self._slots):
            return ()
        return tuple(self._slots[position].values())

    def is_empty(self) -> bool:
        """True when no point is positioned (empty slots may remain)."""
        return not self._index

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Tuple[RelativePoint, ...]]:
        return iter(self.line)

    def __contains__(self, point: object) -> bool:
        return self.position_of(point) is not None

    # =========================================================================
    # SPANS
    # =========================================================================

    @property
    def spans(self) -> Tuple[TimeSpan, ...]:
        return tuple(self._spans)

    def register_span(self, span: TimeSpan) -> None:
        """Record `span` for introspection. Called by TimeSpan itself."""
        if span.timeline is not self:
            raise OwnershipError(f"span {span} belongs to another timeline")
        self._spans.append(span)

    def endpoint_statuses(self) -> Dict[TimeSpan, Tuple[object, object]]:
        """Endpoint payload pair for every registered span."""
        statuses: Dict[TimeSpan, Tuple[object, object]] = {}
        for span in self._spans:
            statuses.update(span.endpoint_statuses())
        return statuses

    def stale_spans(self) -> List[TimeSpan]:
        """Registered spans with an endpoint no longer on this timeline."""
        return [span for span in self._spans if span.is_stale()]

    # =========================================================================
    # AUDIT
    # =========================================================================

    def get_audit_log(self) -> List[AuditLogEntry]:
        """Return copy of audit log entries."""
        return list(self._audit_log)

    def _log_audit(
        self,
        action: AuditAction,
        point: Optional[RelativePoint] = None,
        position: Optional[int] = None,
        **detail: object
    ) -> None:
        if not self._config.record_audit:
            return

        self._audit_sequence += 1
        entry = AuditLogEntry(
            sequence=self._audit_sequence,
            action=action,
            timeline_name=self.name,
            payload=str(point) if point is not None else None,
            position=position
        )
        for key, value in detail.items():
            entry = entry.with_detail(key, str(value))
        self._audit_log.append(entry)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _check_ownership(self, point: RelativePoint) -> None:
        if getattr(point, 'timeline', None) is not self:
            raise OwnershipError(
                f"can only add a time to its own timeline: {point!r} "
                f"does not belong to {self!r}"
            )

    def _anchor_position(self, anchor: RelativePoint) -> int:
        position = self.position_of(anchor)
        if position is None:
            raise AnchorNotPositionedError(
                f"anchor {anchor!r} is not positioned on {self!r}"
            )
        return position

    # =========================================================================
    # IDENTITY
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        # Two unused timelines of the same name, nothing stronger.
        if not isinstance(other, Timeline):
            return NotImplemented
        return self.name == other.name and self.is_empty() and other.is_empty()

    # Equality changes as points are added; hash stays by identity.
    __hash__ = object.__hash__

    def __copy__(self):
        raise NotCloneableError(f"timeline {self!r} cannot be copied")

    def __deepcopy__(self, memo):
        raise NotCloneableError(f"timeline {self!r} cannot be copied")

    def __str__(self) -> str:
        return str(self.name)

    def __repr__(self) -> str:
        return (
            f"Timeline({self.name!r}, slots={len(self._slots)}, "
            f"points={len(self._index)})"
        )
