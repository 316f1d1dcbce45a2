"""Display-refresh schedulers driving playback ticks."""

import threading
from typing import Any, Callable, Protocol

from ....config import PREVIEW_TICK_RATE


class FrameScheduler(Protocol):
    """Host hook that runs a callback on the next display refresh."""

    def request(self, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class TimerScheduler:
    """Fire callbacks on a timer thread at a fixed refresh rate."""

    def __init__(self, rate: int = PREVIEW_TICK_RATE):
        if rate <= 0:
            raise ValueError("Refresh rate must be positive")
        self.interval = 1.0 / rate

    def request(self, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(self.interval, callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer) -> None:
        handle.cancel()
