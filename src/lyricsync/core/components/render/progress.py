"""Progress reporting for exports."""

from typing import Callable, Optional

from ....config import EXPORT_PROGRESS_FRAMES_SPAN, EXPORT_PROGRESS_FRAMES_START

ProgressCallback = Callable[[int, str], None]


def frame_progress(index: int, total: int) -> int:
    """Map frame ``index`` of ``total`` into the frame-capture band."""
    if total <= 0:
        return EXPORT_PROGRESS_FRAMES_START
    return EXPORT_PROGRESS_FRAMES_START + int(index / total * EXPORT_PROGRESS_FRAMES_SPAN)


class ConsoleProgressBar:
    """Console progress bar fed by (percent, message) callbacks."""

    def __init__(self, prefix: str = "Exporting", echo: Optional[Callable[..., None]] = None):
        self.prefix = prefix
        self.last_percent = -1
        self._echo = echo or print

    def __call__(self, percent: int, message: str) -> None:
        # Only redraw when the percentage moves
        if percent == self.last_percent:
            return
        bar_len = 30
        filled = int(bar_len * min(max(percent, 0), 100) / 100)
        bar = "█" * filled + "░" * (bar_len - filled)
        self._echo(f"\r  {self.prefix}: [{bar}] {percent}% {message}", end="", flush=True)
        self.last_percent = percent

    def finish(self) -> None:
        self._echo()
