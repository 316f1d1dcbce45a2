"""Real-time playback driver and its collaborators."""

from .audio import AudioSource, SimulatedAudio
from .clock import PlaybackClock, PlaybackState
from .scheduler import FrameScheduler, TimerScheduler

__all__ = [
    "AudioSource",
    "FrameScheduler",
    "PlaybackClock",
    "PlaybackState",
    "SimulatedAudio",
    "TimerScheduler",
]
