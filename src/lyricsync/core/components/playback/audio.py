"""Audio playback collaborator interface and a clock-backed stand-in."""

import threading
import time
from typing import Callable, List, Optional, Protocol


class AudioSource(Protocol):
    """What the playback clock needs from an audio player."""

    @property
    def duration(self) -> Optional[float]: ...

    @property
    def position(self) -> float: ...

    @position.setter
    def position(self, value: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def on_ended(self, callback: Callable[[], None]) -> None: ...

    def on_metadata(self, callback: Callable[[float], None]) -> None: ...


class SimulatedAudio:
    """Silent audio source whose position follows a monotonic clock.

    Used for terminal previews and tests. ``ended`` fires once when the
    position is read at or past the duration while playing.
    """

    def __init__(self, duration: float, clock: Callable[[], float] = time.monotonic):
        self._duration = float(duration)
        self._clock = clock
        self._offset = 0.0
        self._anchor: Optional[float] = None
        self._ended_callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def playing(self) -> bool:
        return self._anchor is not None

    @property
    def position(self) -> float:
        fire = False
        with self._lock:
            pos = self._offset
            if self._anchor is not None:
                pos += self._clock() - self._anchor
                if pos >= self._duration:
                    self._offset = self._duration
                    self._anchor = None
                    fire = True
            pos = min(pos, self._duration)
        if fire:
            for callback in list(self._ended_callbacks):
                callback()
        return pos

    @position.setter
    def position(self, value: float) -> None:
        with self._lock:
            self._offset = max(0.0, min(float(value), self._duration))
            if self._anchor is not None:
                self._anchor = self._clock()

    def play(self) -> None:
        with self._lock:
            if self._anchor is None:
                self._anchor = self._clock()

    def pause(self) -> None:
        with self._lock:
            if self._anchor is not None:
                self._offset = min(
                    self._offset + self._clock() - self._anchor, self._duration
                )
                self._anchor = None

    def on_ended(self, callback: Callable[[], None]) -> None:
        self._ended_callbacks.append(callback)

    def on_metadata(self, callback: Callable[[float], None]) -> None:
        # Duration is known up front.
        callback(self._duration)
