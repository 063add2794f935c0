"""
Timeline Tests
==============

INVARIANTS TESTED:
1. Slots and index stay in bijection across every mutation
2. Removal never renumbers; compression does, preserving order
3. Ownership is enforced at the single insertion primitive
4. Timelines carry identity and cannot be copied
"""

import copy
import dataclasses
import logging

import pytest

from relative_time import (
    AnchorNotPositionedError,
    AuditAction,
    AuditLogEntry,
    InvalidPositionError,
    NotCloneableError,
    OwnershipError,
    RelativePoint,
    Timeline,
    TimelineConfig,
    TimelineCorruptionError,
)
from tests.fixtures import make_linear_timeline, payload_line


class TestAppend:
    """Appending creates one new final slot per point."""

    def test_positions_strictly_increase(self):
        timeline, points = make_linear_timeline()

        positions = [timeline.position_of(points[p]) for p in "abcde"]
        assert positions == [0, 1, 2, 3, 4]
        assert len(timeline) == 5
        assert timeline.point_count == 5

    def test_compress_without_removals_is_noop(self):
        timeline, points = make_linear_timeline()
        before = {p: timeline.position_of(points[p]) for p in "abcde"}

        assert timeline.compress() == 0

        after = {p: timeline.position_of(points[p]) for p in "abcde"}
        assert before == after

    def test_foreign_point_rejected(self):
        timeline = Timeline("mine")
        other = Timeline("theirs")
        stray = RelativePoint(other, "stray")

        with pytest.raises(OwnershipError):
            timeline.append(stray)

        assert timeline.position_of(stray) is None
        assert len(timeline) == 0

    def test_never_inserted_point_has_no_position(self):
        timeline = Timeline("t")
        point = RelativePoint(timeline, "x")

        assert timeline.position_of(point) is None
        assert point not in timeline
        assert not point.is_positioned()


class TestRelativeInsertion:
    """append_to_next joins slots; insert_before_next opens new ones."""

    def test_append_to_next_joins_existing_slot(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))
        d = RelativePoint(timeline, "d")

        position = timeline.append_to_next(points["a"], d)

        assert position == 1
        assert payload_line(timeline) == [["a"], ["b", "d"], ["c"]]
        assert d == points["b"]

    def test_append_to_next_creates_missing_slot(self):
        timeline, points = make_linear_timeline(("a", "b"))
        d = RelativePoint(timeline, "d")

        timeline.append_to_next(points["b"], d)

        assert payload_line(timeline) == [["a"], ["b"], ["d"]]

    def test_append_to_next_with_offset_zero_is_simultaneous(self):
        timeline, points = make_linear_timeline(("a", "b"))
        d = RelativePoint(timeline, "d")

        timeline.append_to_next(points["a"], d, 0)

        assert timeline.position_of(d) == 0
        assert d == points["a"]

    def test_insert_before_next_shifts_followers(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))
        d = RelativePoint(timeline, "d")

        timeline.insert_before_next(points["a"], d)

        assert payload_line(timeline) == [["a"], ["d"], ["b"], ["c"]]
        assert timeline.position_of(points["b"]) == 2
        assert timeline.position_of(points["c"]) == 3
        timeline.verify_integrity()

    def test_insert_before_next_larger_offset_leaves_gaps(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))
        d = RelativePoint(timeline, "d")

        timeline.insert_before_next(points["a"], d, 2)

        assert payload_line(timeline) == [["a"], ["b"], ["d"], [], ["c"]]
        assert timeline.position_of(points["b"]) == 1
        assert timeline.position_of(points["c"]) == 4
        timeline.verify_integrity()

        timeline.compress()
        assert payload_line(timeline) == [["a"], ["b"], ["d"], ["c"]]

    def test_insert_before_next_past_end(self):
        timeline, points = make_linear_timeline(("a", "b"))
        d = RelativePoint(timeline, "d")

        timeline.insert_before_next(points["b"], d)

        assert payload_line(timeline) == [["a"], ["b"], ["d"]]

    def test_insert_before_next_rejects_zero_offset(self):
        timeline, points = make_linear_timeline(("a",))
        d = RelativePoint(timeline, "d")

        with pytest.raises(ValueError):
            timeline.insert_before_next(points["a"], d, 0)

    def test_foreign_point_rejected_before_any_shift(self):
        timeline, points = make_linear_timeline(("a", "b"))
        stray = RelativePoint(Timeline("other"), "stray")

        with pytest.raises(OwnershipError):
            timeline.insert_before_next(points["a"], stray)

        assert timeline.position_of(points["b"]) == 1
        assert len(timeline) == 2

    def test_unpositioned_anchor_rejected(self):
        timeline, points = make_linear_timeline(("a",))
        loose = RelativePoint(timeline, "loose")
        d = RelativePoint(timeline, "d")

        with pytest.raises(AnchorNotPositionedError):
            timeline.append_to_next(loose, d)
        with pytest.raises(AnchorNotPositionedError):
            timeline.insert_before_next(loose, d)

        assert not d.is_positioned()


class TestInsertAt:
    """The shared insertion primitive."""

    def test_join_is_deduplicated(self):
        timeline = Timeline("t")
        a = RelativePoint(timeline, "a")

        timeline.insert_at(0, a)
        timeline.insert_at(0, a)

        assert timeline.points_at(0) == (a,)
        assert timeline.point_count == 1

    def test_past_end_pads_with_empty_slots(self):
        timeline = Timeline("t")
        a = RelativePoint(timeline, "a")

        timeline.insert_at(3, a)

        assert len(timeline) == 4
        assert payload_line(timeline) == [[], [], [], ["a"]]
        timeline.compress()
        assert timeline.position_of(a) == 0

    def test_reinsert_moves_point(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))

        timeline.insert_at(2, points["a"])

        assert payload_line(timeline) == [[], ["b"], ["a", "c"]]
        timeline.verify_integrity()

    def test_negative_position_rejected(self):
        timeline = Timeline("t")
        a = RelativePoint(timeline, "a")

        with pytest.raises(InvalidPositionError):
            timeline.insert_at(-1, a)

    def test_offset_before_start_rejected(self):
        timeline, points = make_linear_timeline(("a",))
        d = RelativePoint(timeline, "d")

        with pytest.raises(InvalidPositionError):
            timeline.append_to_next(points["a"], d, -1)


class TestIncreaseAfter:

    def test_only_index_moves(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))

        timeline.increase_after(1, 2)

        assert timeline.position_of(points["a"]) == 0
        assert timeline.position_of(points["b"]) == 3
        assert timeline.position_of(points["c"]) == 4
        assert len(timeline) == 3
        with pytest.raises(TimelineCorruptionError):
            timeline.verify_integrity()

    def test_negative_shift_rejected(self):
        timeline, points = make_linear_timeline(("a", "b"))

        with pytest.raises(InvalidPositionError):
            timeline.increase_after(0, -1)

        assert timeline.position_of(points["a"]) == 0
        assert timeline.position_of(points["b"]) == 1
        timeline.verify_integrity()

    def test_zero_shift_is_noop(self):
        timeline, points = make_linear_timeline(("a", "b"))

        timeline.increase_after(0, 0)

        assert timeline.position_of(points["b"]) == 1
        timeline.verify_integrity()


class TestRemoveAndCompress:

    def test_remove_leaves_empty_slot(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))

        assert timeline.remove(points["b"]) is True

        assert payload_line(timeline) == [["a"], [], ["c"]]
        assert timeline.position_of(points["c"]) == 2
        assert not points["b"].is_positioned()
        assert points["b"].timeline is timeline

    def test_remove_unknown_point_is_noop(self):
        timeline = Timeline("t")
        loose = RelativePoint(timeline, "loose")

        assert timeline.remove(loose) is False

    def test_compress_renumbers_in_order(self):
        timeline, points = make_linear_timeline()
        timeline.remove(points["b"])
        timeline.remove(points["d"])

        removed = timeline.compress()

        assert removed == 2
        assert payload_line(timeline) == [["a"], ["c"], ["e"]]
        assert [timeline.position_of(points[p]) for p in "ace"] == [0, 1, 2]

    def test_compress_is_idempotent(self):
        timeline, points = make_linear_timeline()
        timeline.remove(points["a"])
        timeline.remove(points["c"])
        timeline.compress()
        line, index = timeline.line, timeline.index

        assert timeline.compress() == 0
        assert timeline.line == line
        assert timeline.index == index

    def test_compress_with_consecutive_empty_slots(self):
        timeline, points = make_linear_timeline()
        for p in "bcd":
            timeline.remove(points[p])

        timeline.compress()

        assert timeline.position_of(points["e"]) == 1

    def test_remove_then_append_repositions(self):
        timeline, points = make_linear_timeline(("a", "b"))
        timeline.remove(points["a"])

        timeline.append(points["a"])

        assert points["a"].is_positioned()
        assert timeline.position_of(points["a"]) == 2

    def test_auto_compress(self):
        timeline, points = make_linear_timeline(
            ("a", "b", "c"), config=TimelineConfig(auto_compress=True)
        )

        timeline.remove(points["a"])

        assert len(timeline) == 2
        assert timeline.position_of(points["c"]) == 1

    def test_compress_refuses_corrupt_timeline(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))
        timeline.remove(points["a"])
        timeline.increase_after(0, 1)
        line = timeline.line

        with pytest.raises(TimelineCorruptionError):
            timeline.compress()

        assert timeline.line == line

    def test_corruption_logged_as_warning(self, caplog):
        timeline, points = make_linear_timeline(("a", "b"), name="broken")
        timeline.increase_after(1, 1)

        with caplog.at_level(logging.WARNING, logger="relative_time.timeline"):
            with pytest.raises(TimelineCorruptionError):
                timeline.compress()

        warnings = [
            r for r in caplog.records
            if r.name == "relative_time.timeline" and r.levelno == logging.WARNING
        ]
        assert len(warnings) == 1
        assert "broken" in warnings[0].getMessage()


class TestIdentity:

    def test_equal_only_when_same_name_and_empty(self):
        assert Timeline("x") == Timeline("x")
        assert Timeline("x") != Timeline("y")

        used, _ = make_linear_timeline(("a",), name="x")
        assert used != Timeline("x")

    def test_copy_rejected(self):
        timeline, _ = make_linear_timeline(("a",))

        with pytest.raises(NotCloneableError):
            copy.copy(timeline)
        with pytest.raises(NotCloneableError):
            copy.deepcopy(timeline)

    def test_str_is_name(self):
        assert str(Timeline("saga")) == "saga"


class TestAuditTrail:

    def test_mutations_recorded_in_sequence(self):
        timeline, points = make_linear_timeline(("a", "b"))
        timeline.remove(points["a"])
        timeline.compress()

        log = timeline.get_audit_log()
        actions = [entry.action for entry in log]

        assert actions == [
            AuditAction.INSERT,
            AuditAction.INSERT,
            AuditAction.REMOVE,
            AuditAction.COMPRESS,
        ]
        sequences = [entry.sequence for entry in log]
        assert sequences == sorted(set(sequences))
        assert log[2].payload == "a"
        assert log[2].position == 0
        assert dict(log[3].detail) == {"removed": "1"}

    def test_insert_before_next_records_shift(self):
        timeline, points = make_linear_timeline(("a", "b"))
        d = RelativePoint(timeline, "d")

        timeline.insert_before_next(points["a"], d)

        shift = timeline.get_audit_log()[-2]
        assert shift.action == AuditAction.SHIFT
        assert dict(shift.detail) == {"by": "1", "shifted": "1"}

    def test_audit_can_be_disabled(self):
        timeline, _ = make_linear_timeline(
            ("a", "b"), config=TimelineConfig(record_audit=False)
        )
        assert timeline.get_audit_log() == []

    def test_audit_bounded(self):
        timeline, _ = make_linear_timeline(
            ("a", "b", "c", "d"), config=TimelineConfig(max_audit_entries=2)
        )

        log = timeline.get_audit_log()
        assert [entry.payload for entry in log] == ["c", "d"]
        assert log[-1].sequence == 4

    def test_detail_added_without_mutating_entry(self):
        entry = AuditLogEntry(1, AuditAction.COMPRESS, "t")

        extended = entry.with_detail("removed", "2")

        assert entry.detail == ()
        assert extended.detail == (("removed", "2"),)
        assert extended.sequence == entry.sequence
        with pytest.raises(dataclasses.FrozenInstanceError):
            extended.position = 3

    def test_shift_detail_keeps_keyword_order(self):
        timeline, _ = make_linear_timeline(("a", "b", "c"))

        timeline.increase_after(1, 2)

        shift = timeline.get_audit_log()[-1]
        assert shift.detail == (("by", "2"), ("shifted", "2"))
        assert shift.position == 1

    def test_returned_log_is_a_copy(self):
        timeline, _ = make_linear_timeline(("a",))
        log = timeline.get_audit_log()
        log.clear()

        assert len(timeline.get_audit_log()) == 1


class TestViews:

    def test_points_in_order(self):
        timeline, points = make_linear_timeline(("a", "b", "c"))

        assert [str(p) for p in timeline.points()] == ["a", "b", "c"]

    def test_points_at(self):
        timeline, points = make_linear_timeline(("a", "b"))

        assert timeline.points_at(1) == (points["b"],)
        assert timeline.points_at(9) == ()
        with pytest.raises(InvalidPositionError):
            timeline.points_at(-1)

    def test_index_snapshot(self):
        timeline, points = make_linear_timeline(("a", "b"))

        index = timeline.index
        index.clear()

        assert timeline.index == {points["a"]: 0, points["b"]: 1}

    def test_is_empty_ignores_empty_slots(self):
        timeline, points = make_linear_timeline(("a",))
        timeline.remove(points["a"])

        assert timeline.is_empty()
        assert len(timeline) == 1
