"""
Relative Time

Ordering of events when only their relative sequence is known, never
an absolute date.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Error codes, exception hierarchy, immutable audit records

2. TIMELINE (timeline.py)
   - Ordered slots of simultaneous points and the authoritative index
   - The only place positions are assigned or changed

3. RELATIVE POINT (point.py)
   - A position-holder bound to one timeline
   - Ordering is delegated entirely to the timeline's index

4. TIME SPAN (span.py)
   - Interval between two colinear points
   - Endpoint comparators and Allen's interval relations built on them

5. TOPOLOGY (topology.py)
   - Precedence and concurrency graphs over a timeline's spans

CONSTRAINTS ENFORCED:
=====================
- A point is only ever indexed on its own timeline
- Points on different timelines are never comparable
- Stale spans fail loudly, never fall back to a default
- Timelines and points cannot be copied
- No durations: under fuzzy time a difference has no meaning
"""

from .contracts import (
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
    AuditAction,
    AuditLogEntry,
)
from .timeline import Timeline, TimelineConfig
from .point import RelativePoint
from .span import TimeSpan, IntervalRelation
from .topology import SpanTopology, GraphMetrics

__version__ = "0.1.0"

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
    'Timeline',
    'TimelineConfig',
    'RelativePoint',
    'TimeSpan',
    'IntervalRelation',
    'SpanTopology',
    'GraphMetrics',
]
