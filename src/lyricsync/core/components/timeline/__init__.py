"""Timeline derivation: which lyric and background are active at time t."""

from .backgrounds import background_at
from .index import TimecodeIndex
from .progress import progress_of
from .sampler import TimelineSampler

__all__ = ["TimecodeIndex", "TimelineSampler", "background_at", "progress_of"]
