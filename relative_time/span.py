"""
Time Span
=========

An interval between two points on the same timeline.

Every relation here is built from the endpoint comparators, which in
turn only compare RelativePoint positions. No relation has logic of
its own.

`<=` and `>=` are intentionally undefined for spans: "before or equal"
could mean starts-before-or-with or ends-on-or-before. Callers pick
the endpoint comparator they mean.
"""

from __future__ import annotations
from enum import Enum
from itertools import count
from typing import Dict, Optional, Tuple

from .contracts.base import (
    ComparabilityError,
    SpanConstructionError,
    StaleSpanError,
)
from .point import RelativePoint
from .timeline import Timeline


_span_handles = count(1)


class IntervalRelation(Enum):
    """The thirteen basic relations of Allen's interval algebra."""
    BEFORE = "before"
    MEETS = "meets"
    OVERLAPS = "overlaps"
    FINISHED_BY = "finished_by"
    CONTAINS = "contains"
    STARTS = "starts"
    EQUALS = "equals"
    STARTED_BY = "started_by"
    DURING = "during"
    FINISHES = "finishes"
    OVERLAPPED_BY = "overlapped_by"
    MET_BY = "met_by"
    AFTER = "after"

    @property
    def inverse(self) -> IntervalRelation:
        return _INVERSES[self]


_INVERSES = {
    IntervalRelation.BEFORE: IntervalRelation.AFTER,
    IntervalRelation.MEETS: IntervalRelation.MET_BY,
    IntervalRelation.OVERLAPS: IntervalRelation.OVERLAPPED_BY,
    IntervalRelation.FINISHED_BY: IntervalRelation.FINISHES,
    IntervalRelation.CONTAINS: IntervalRelation.DURING,
    IntervalRelation.STARTS: IntervalRelation.STARTED_BY,
    IntervalRelation.EQUALS: IntervalRelation.EQUALS,
}
_INVERSES.update({v: k for k, v in list(_INVERSES.items())})


class TimeSpan:
    """
    Interval with a starting and ending RelativePoint on one timeline.

    Endpoints are fixed at construction. If either endpoint is later
    removed from the timeline the span is stale and every comparator
    raises StaleSpanError.
    """

    def __init__(
        self,
        start: RelativePoint,
        end: RelativePoint,
        timeline: Optional[Timeline] = None,
        name: Optional[str] = None
    ):
        if not isinstance(start, RelativePoint) or not start.is_colinear_with(end):
            raise SpanConstructionError(
                "Cannot make a span unless both points are on the same timeline"
            )
        if timeline is not None and timeline is not start.timeline:
            raise SpanConstructionError(
                f"endpoints belong to {start.timeline!r}, not {timeline!r}"
            )
        if start > end:
            raise SpanConstructionError(
                f"start {start} is positioned after end {end}"
            )

        self._start = start
        self._end = end
        self._timeline = start.timeline
        self._handle = next(_span_handles)
        self.name = name

        self._timeline.register_span(self)

    @property
    def start(self) -> RelativePoint:
        return self._start

    @property
    def end(self) -> RelativePoint:
        return self._end

    @property
    def timeline(self) -> Timeline:
        return self._timeline

    @property
    def handle(self) -> int:
        return self._handle

    def is_stale(self) -> bool:
        return not (self._start.is_positioned() and self._end.is_positioned())

    def endpoint_statuses(self) -> Dict[TimeSpan, Tuple[object, object]]:
        """Endpoint payloads keyed by this span."""
        return {self: (self._start.payload, self._end.payload)}

    def _other(self, b: object) -> TimeSpan:
        if not isinstance(b, TimeSpan):
            raise ComparabilityError(f"cannot compare span {self} to {b!r}")
        for span in (self, b):
            if span.is_stale():
                raise StaleSpanError(
                    f"span {span} has an endpoint no longer on {span.timeline!r}"
                )
        return b

    # =========================================================================
    # SINGLE ENDPOINT COMPARATORS
    # =========================================================================

    def starts_before(self, b: TimeSpan) -> bool:
        return self._start < self._other(b).start

    def starts_after(self, b: TimeSpan) -> bool:
        return self._start > self._other(b).start

    def starts_on_or_after(self, b: TimeSpan) -> bool:
        return self._start >= self._other(b).start

    def starts_with(self, b: TimeSpan) -> bool:
        return self._start == self._other(b).start

    def starts_before_or_with(self, b: TimeSpan) -> bool:
        return self._start <= self._other(b).start

    def ends_before(self, b: TimeSpan) -> bool:
        return self._end < self._other(b).end

    def ends_on_or_before(self, b: TimeSpan) -> bool:
        return self._end <= self._other(b).end

    def ends_on_or_after(self, b: TimeSpan) -> bool:
        return self._end >= self._other(b).end

    def ends_after(self, b: TimeSpan) -> bool:
        return self._end > self._other(b).end

    def ends_with(self, b: TimeSpan) -> bool:
        return self._end == self._other(b).end

    def ends_before_other_starts(self, b: TimeSpan) -> bool:
        return self._end < self._other(b).start

    def ends_as_other_starts(self, b: TimeSpan) -> bool:
        return self._end == self._other(b).start

    def starts_after_other_ends(self, b: TimeSpan) -> bool:
        return self._start > self._other(b).end

    def starts_as_other_ends(self, b: TimeSpan) -> bool:
        return self._start == self._other(b).end

    # =========================================================================
    # SPAN COMPARATORS
    # =========================================================================

    def __eq__(self, b: object) -> bool:
        return self.ends_with(b) and self.starts_with(b)

    def __ne__(self, b: object) -> bool:
        return not self.__eq__(b)

    def __lt__(self, b: TimeSpan) -> bool:
        return self.ends_before_other_starts(b)

    def __gt__(self, b: TimeSpan) -> bool:
        return self.starts_after_other_ends(b)

    def __le__(self, b: TimeSpan) -> bool:
        raise TypeError(
            "<= is ambiguous for spans; use starts_before_or_with or ends_on_or_before"
        )

    def __ge__(self, b: TimeSpan) -> bool:
        raise TypeError(
            ">= is ambiguous for spans; use starts_on_or_after or ends_on_or_after"
        )

    # Positional equality moves with the timeline; hash stays by identity.
    __hash__ = object.__hash__

    def contained_fully_inside(self, b: TimeSpan) -> bool:
        return self.starts_after(b) and self.ends_before(b)

    def contained_inside(self, b: TimeSpan) -> bool:
        return self.starts_on_or_after(b) and self.ends_on_or_before(b)

    def contains_fully(self, b: TimeSpan) -> bool:
        return self.starts_before(b) and self.ends_after(b)

    def contains(self, b: TimeSpan) -> bool:
        return self.starts_before_or_with(b) and self.ends_on_or_after(b)

    def intersects(self, b: TimeSpan) -> bool:
        """Shares at least one position with `b`."""
        return not (self < b or self > b)

    def relation_to(self, b: TimeSpan) -> IntervalRelation:
        """
        Classify this span against `b` as one Allen relation.

        Checks run in a fixed order so that degenerate spans (start and
        end simultaneous) still satisfy a.relation_to(b) ==
        b.relation_to(a).inverse.
        """
        if self == b:
            return IntervalRelation.EQUALS
        if self < b:
            return IntervalRelation.BEFORE
        if self > b:
            return IntervalRelation.AFTER
        if self.starts_with(b):
            if self.ends_before(b):
                return IntervalRelation.STARTS
            return IntervalRelation.STARTED_BY
        if self.ends_with(b):
            if self.starts_after(b):
                return IntervalRelation.FINISHES
            return IntervalRelation.FINISHED_BY
        if self.ends_as_other_starts(b):
            return IntervalRelation.MEETS
        if self.starts_as_other_ends(b):
            return IntervalRelation.MET_BY
        if self.contains_fully(b):
            return IntervalRelation.CONTAINS
        if self.contained_fully_inside(b):
            return IntervalRelation.DURING
        if self.starts_before(b):
            return IntervalRelation.OVERLAPS
        return IntervalRelation.OVERLAPPED_BY

    def __str__(self) -> str:
        if self.name:
            return str(self.name)
        return f"{self._start}..{self._end}"

    def __repr__(self) -> str:
        return f"TimeSpan({self._start!r}, {self._end!r}, name={self.name!r})"
