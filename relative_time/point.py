"""
Relative Point
==============

A time-point bound to exactly one timeline.

A point knows nothing about its own position: every comparison is
answered by its timeline's index. Points on different timelines, or
points not yet placed, have no order at all.
"""

from __future__ import annotations
from itertools import count
from typing import TYPE_CHECKING, Optional, Tuple
import operator

from .contracts.base import ComparabilityError, NotCloneableError

if TYPE_CHECKING:
    from .timeline import Timeline


_handles = count(1)


class RelativePoint:
    """
    Position-holder on one timeline.

    `payload` is opaque and only used for display; str(point) is
    str(payload). `handle` is a process-unique integer the timeline
    uses as its index key.
    """

    __slots__ = ('_timeline', '_handle', 'payload')

    def __init__(self, timeline: Timeline, payload: object = None):
        self._timeline = timeline
        self._handle = next(_handles)
        self.payload = payload

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def handle(self) -> int:
        return self._handle

    @property
    def position(self) -> Optional[int]:
        if self._timeline is None:
            return None
        return self._timeline.position_of(self)

    def is_positioned(self) -> bool:
        """True while this point appears in its timeline's index."""
        return self.position is not None

    def is_colinear_with(self, other: object) -> bool:
        """Both positioned, on the very same timeline instance."""
        return (
            isinstance(other, RelativePoint)
            and other.is_positioned()
            and self.is_positioned()
            and self._timeline is other._timeline
        )

    # =========================================================================
    # ORDERING (positions only, never payloads)
    # =========================================================================

    def _positions_with(self, other: object) -> Tuple[int, int]:
        if self._timeline is None or getattr(other, 'timeline', None) is None \
                or not self.is_colinear_with(other):
            raise ComparabilityError(
                f"can only compare to other times on the same timeline: "
                f"{self!r} vs {other!r}"
            )
        return self._timeline.position_of(self), self._timeline.position_of(other)

    def _compare(self, other: object, op) -> bool:
        mine, theirs = self._positions_with(other)
        return op(mine, theirs)

    def __lt__(self, other: object) -> bool:
        return self._compare(other, operator.lt)

    def __le__(self, other: object) -> bool:
        return self._compare(other, operator.le)

    def __eq__(self, other: object) -> bool:
        return self._compare(other, operator.eq)

    def __ne__(self, other: object) -> bool:
        return self._compare(other, operator.ne)

    def __ge__(self, other: object) -> bool:
        return self._compare(other, operator.ge)

    def __gt__(self, other: object) -> bool:
        return self._compare(other, operator.gt)

    # Positional equality moves with the timeline; hash stays by identity.
    __hash__ = object.__hash__

    # =========================================================================
    # IDENTITY
    # =========================================================================

    def __copy__(self):
        raise NotCloneableError(f"point {self!r} cannot be copied")

    def __deepcopy__(self, memo):
        raise NotCloneableError(f"point {self!r} cannot be copied")

    def __str__(self) -> str:
        return str(self.payload)

    def __repr__(self) -> str:
        return f"RelativePoint({self.payload!r}, timeline={str(self._timeline)!r})"
