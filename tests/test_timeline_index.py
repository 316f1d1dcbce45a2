"""Tests for the timecode index."""

import pytest

from lyricsync.core.components.timeline.index import TimecodeIndex
from lyricsync.core.models import LyricLine
from lyricsync.exceptions import ValidationError


def _texts(window):
    return tuple(
        line.text if line else None
        for line in (window.previous, window.current, window.next)
    )


class TestWindowAt:
    def test_empty_sequence_returns_all_absent(self):
        index = TimecodeIndex([])
        assert _texts(index.window_at(3.0)) == (None, None, None)

    def test_only_silent_lines_returns_all_absent(self):
        index = TimecodeIndex([LyricLine("", 0.0, 5.0), LyricLine("   ", 5.0, 6.0)])
        assert len(index) == 0
        assert _texts(index.window_at(1.0)) == (None, None, None)

    def test_before_first_line(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(0.0)) == (None, None, "first")
        assert _texts(index.window_at(1.999)) == (None, None, "first")

    def test_inside_line_with_neighbors(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(2.0)) == (None, "first", "second")
        assert _texts(index.window_at(5.0)) == ("first", "second", "third")
        assert _texts(index.window_at(9.0)) == ("second", "third", None)

    def test_end_instant_belongs_to_next_line(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(4.0)) == ("first", "second", "third")

    def test_end_instant_before_gap_is_gap(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(6.0)) == ("second", None, "third")

    def test_in_gap(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(7.5)) == ("second", None, "third")

    def test_after_last_line_keeps_last_as_previous(self, lines):
        index = TimecodeIndex(lines)
        assert _texts(index.window_at(10.0)) == ("third", None, None)
        assert _texts(index.window_at(500.0)) == ("third", None, None)

    def test_silent_intro_is_ignored(self):
        index = TimecodeIndex([LyricLine("", 0.0, 5.0), LyricLine("A", 5.0, 8.0)])
        window = index.window_at(3.0)
        assert window.previous is None
        assert window.current is None
        assert window.next.text == "A"

    def test_round_trip_boundaries(self):
        line = LyricLine("Hello", 10.0, 12.0)
        index = TimecodeIndex([line])
        assert index.window_at(9.999).current is None
        assert index.window_at(9.999).next == line
        assert index.window_at(10.0).current == line
        assert index.window_at(11.0).current == line
        after = index.window_at(12.0)
        assert after.current is None
        assert after.previous == line

    def test_zero_length_line_is_never_current(self):
        index = TimecodeIndex(
            [LyricLine("a", 0.0, 5.0), LyricLine("blip", 6.0, 6.0), LyricLine("b", 8.0, 9.0)]
        )
        assert _texts(index.window_at(6.0)) == ("blip", None, "b")
        assert _texts(index.window_at(5.5)) == ("a", None, "blip")

    def test_order_of_queries_does_not_matter(self, lines):
        index = TimecodeIndex(lines)
        times = [9.5, 0.5, 7.0, 4.0, 2.5, 11.0, 6.0]
        forward = [index.window_at(t) for t in sorted(times)]
        shuffled = {t: index.window_at(t) for t in times}
        assert forward == [shuffled[t] for t in sorted(times)]


class TestBoundaryClasses:
    def test_classes_are_contiguous_and_exhaustive(self, lines):
        index = TimecodeIndex(lines)
        sequence = []
        t = 0.0
        while t < 12.0:
            w = index.window_at(t)
            if w.current is not None:
                cls = "line"
            elif w.previous is None and w.next is not None:
                cls = "before"
            elif w.previous is not None and w.next is None:
                cls = "after"
            else:
                assert w.previous is not None and w.next is not None
                cls = "gap"
            if not sequence or sequence[-1] != cls:
                sequence.append(cls)
            t = round(t + 0.01, 2)
        assert sequence == ["before", "line", "gap", "line", "after"]


class TestValidation:
    def test_rejects_inverted_window(self):
        with pytest.raises(ValidationError):
            TimecodeIndex([LyricLine("bad", 5.0, 4.0)])

    def test_rejects_unsorted_lines(self):
        with pytest.raises(ValidationError):
            TimecodeIndex([LyricLine("b", 5.0, 6.0), LyricLine("a", 1.0, 2.0)])

    def test_rejects_overlapping_lines(self):
        with pytest.raises(ValidationError):
            TimecodeIndex([LyricLine("a", 1.0, 3.0), LyricLine("b", 2.0, 4.0)])

    def test_silent_lines_do_not_count_as_overlap(self):
        index = TimecodeIndex(
            [LyricLine("", 0.0, 5.0), LyricLine("a", 1.0, 3.0), LyricLine("b", 3.0, 4.0)]
        )
        assert len(index) == 2
