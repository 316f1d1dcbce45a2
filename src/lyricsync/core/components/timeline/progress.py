"""Karaoke reveal progress for the current line."""

from ...models import LyricLine


def progress_of(line: LyricLine, t: float) -> float:
    """Return the fraction of ``line`` revealed at time ``t``, clamped to [0, 1].

    Zero-length lines are fully revealed immediately.
    """
    duration = line.end_time - line.start_time
    if duration <= 0:
        return 1.0
    fraction = (t - line.start_time) / duration
    return max(0.0, min(1.0, fraction))
