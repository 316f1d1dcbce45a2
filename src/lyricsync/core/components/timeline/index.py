"""Timecode index: map a timestamp to the previous/current/next real line."""

from bisect import bisect_right
from typing import Iterable, Sequence

from ....utils.logging import get_logger
from ....utils.validation import validate_line_order
from ...models import LyricLine, LyricWindow

logger = get_logger(__name__)


class TimecodeIndex:
    """Answer "which lines surround time t" for an immutable line sequence.

    Only real lines (non-blank text) are indexed. Windows are half-open,
    ``start_time <= t < end_time``, so a line's end instant belongs to the
    following gap or line. Lookups are O(log n) and keep no state between
    calls, so query order never changes the answer.
    """

    def __init__(self, lines: Iterable[LyricLine]):
        real = tuple(line for line in lines if line.is_real)
        validate_line_order(real)
        self._lines: Sequence[LyricLine] = real
        self._starts = [line.start_time for line in real]
        # Non-overlapping sorted windows have non-decreasing ends.
        self._ends = [line.end_time for line in real]
        logger.debug(f"Indexed {len(real)} real lyric lines")

    @property
    def lines(self) -> Sequence[LyricLine]:
        return self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def _neighbor(self, idx: int):
        if 0 <= idx < len(self._lines):
            return self._lines[idx]
        return None

    def window_at(self, t: float) -> LyricWindow:
        lines = self._lines
        if not lines:
            return LyricWindow()

        if t < lines[0].start_time:
            return LyricWindow(next=lines[0])

        last = lines[-1]
        if t >= last.end_time:
            return LyricWindow(previous=last)

        # Last line starting at or before t; zero-length lines never contain t.
        idx = bisect_right(self._starts, t) - 1
        while idx >= 0 and lines[idx].end_time <= lines[idx].start_time:
            idx -= 1
        if idx >= 0 and lines[idx].start_time <= t < lines[idx].end_time:
            return LyricWindow(
                previous=self._neighbor(idx - 1),
                current=lines[idx],
                next=self._neighbor(idx + 1),
            )

        # In a gap: nearest line that has already ended.
        prev_idx = bisect_right(self._ends, t) - 1
        if prev_idx >= 0:
            return LyricWindow(
                previous=lines[prev_idx], next=self._neighbor(prev_idx + 1)
            )

        return LyricWindow()
