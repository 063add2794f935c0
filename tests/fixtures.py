"""
Timeline Test Fixtures

Explicit factories for deterministic testing - no random generation.
"""

from typing import Dict, Sequence, Tuple

from relative_time import RelativePoint, Timeline, TimelineConfig


def make_points(
    timeline: Timeline,
    payloads: Sequence[str]
) -> Dict[str, RelativePoint]:
    """Create (but do not place) one point per payload."""
    return {payload: RelativePoint(timeline, payload) for payload in payloads}


def make_linear_timeline(
    payloads: Sequence[str] = ("a", "b", "c", "d", "e"),
    name: str = "story",
    config: TimelineConfig = None
) -> Tuple[Timeline, Dict[str, RelativePoint]]:
    """Timeline with one point per slot, appended in payload order."""
    timeline = Timeline(name, config=config)
    points = make_points(timeline, payloads)
    for payload in payloads:
        timeline.append(points[payload])
    return timeline, points


def payload_line(timeline: Timeline) -> list:
    """Slot sequence as sorted payload lists, for order-insensitive slot checks."""
    return [sorted(str(p) for p in slot) for slot in timeline.line]
