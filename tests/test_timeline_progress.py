"""Tests for karaoke reveal progress."""

import pytest

from lyricsync.core.components.timeline.progress import progress_of
from lyricsync.core.models import LyricLine


def test_progress_at_start_middle_and_end():
    line = LyricLine("Hello", 10.0, 12.0)
    assert progress_of(line, 10.0) == 0.0
    assert progress_of(line, 11.0) == pytest.approx(0.5)
    assert progress_of(line, 12.0) == 1.0


def test_progress_is_clamped():
    line = LyricLine("Hello", 10.0, 12.0)
    assert progress_of(line, 0.0) == 0.0
    assert progress_of(line, 99.0) == 1.0


def test_zero_length_line_is_fully_revealed():
    line = LyricLine("blip", 3.0, 3.0)
    assert progress_of(line, 3.0) == 1.0
    assert progress_of(line, 0.0) == 1.0


def test_progress_is_monotonic_within_window():
    line = LyricLine("Hello", 1.0, 4.0)
    values = [progress_of(line, 1.0 + i * 0.05) for i in range(61)]
    assert values == sorted(values)
    assert all(0.0 <= v <= 1.0 for v in values)


def test_progress_is_pure():
    line = LyricLine("Hello", 1.0, 4.0)
    assert progress_of(line, 2.2) == progress_of(line, 2.2)
