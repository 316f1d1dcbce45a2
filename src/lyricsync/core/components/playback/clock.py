"""Playback clock: sample the timeline on every display tick while playing."""

import threading
from enum import Enum
from typing import Any, Callable, Optional

from ....config import REPLAY_EPSILON
from ....utils.logging import get_logger
from ...models import TimelineState
from ..timeline.sampler import TimelineSampler
from .audio import AudioSource
from .scheduler import FrameScheduler

logger = get_logger(__name__)


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


class PlaybackClock:
    """State machine tying audio position to the timeline sampler.

    The audio position is the only time source; there is no simulated
    clock of our own. While ``PLAYING`` each display tick reads the
    position, samples the timeline and hands the result to ``on_frame``.
    In any other state no ticks are pending and ``current`` keeps the last
    sampled state.
    """

    def __init__(
        self,
        sampler: TimelineSampler,
        audio: AudioSource,
        scheduler: FrameScheduler,
        on_frame: Optional[Callable[[TimelineState], None]] = None,
    ):
        self._sampler = sampler
        self._audio = audio
        self._scheduler = scheduler
        self._on_frame = on_frame
        self._pending: Any = None
        self._lock = threading.RLock()
        self.state = PlaybackState.STOPPED
        self.duration: float = audio.duration or 0.0
        self.current: Optional[TimelineState] = None

        audio.on_ended(self._handle_ended)
        audio.on_metadata(self._handle_metadata)

    @property
    def position(self) -> float:
        return self._audio.position

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def play(self) -> None:
        with self._lock:
            if self.state is PlaybackState.PLAYING:
                return
            if self.duration > 0 and self._audio.position >= self.duration - REPLAY_EPSILON:
                self._audio.position = 0.0
            self._audio.play()
            self.state = PlaybackState.PLAYING
            logger.debug(f"Playing from {self._audio.position:.2f}s")
            self._schedule()

    def pause(self) -> None:
        with self._lock:
            if self.state is not PlaybackState.PLAYING:
                return
            self._audio.pause()
            self.state = PlaybackState.PAUSED
            self._cancel()

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        with self._lock:
            self._audio.pause()
            self._cancel()
            self._audio.position = 0.0
            self.state = PlaybackState.STOPPED
            self._publish(0.0)

    def seek(self, t: float) -> TimelineState:
        """Move to ``t`` immediately; the play/pause state is left alone."""
        with self._lock:
            t = max(0.0, float(t))
            if self.duration > 0:
                t = min(t, self.duration)
            self._audio.position = t
            return self._publish(t)

    def close(self) -> None:
        """Stop the tick chain. Safe to call repeatedly."""
        with self._lock:
            self._cancel()

    def _schedule(self) -> None:
        if self._pending is None:
            self._pending = self._scheduler.request(self._tick)

    def _cancel(self) -> None:
        if self._pending is not None:
            self._scheduler.cancel(self._pending)
            self._pending = None

    def _tick(self) -> None:
        with self._lock:
            self._pending = None
            if self.state is not PlaybackState.PLAYING:
                return
            position = self._audio.position
            # Reading the position may have ended the track.
            if self.state is not PlaybackState.PLAYING:
                return
            self._publish(position)
            self._schedule()

    def _publish(self, t: float) -> TimelineState:
        self.current = self._sampler.sample(t)
        if self._on_frame is not None:
            self._on_frame(self.current)
        return self.current

    def _handle_ended(self) -> None:
        with self._lock:
            self._cancel()
            self.state = PlaybackState.ENDED
            self._publish(self.duration)
            logger.debug("Playback ended")

    def _handle_metadata(self, duration: float) -> None:
        with self._lock:
            self.duration = float(duration)
            self._publish(0.0)
