"""Timeline sampler: the single time -> display-state function."""

from typing import Iterable, Optional, Sequence

from ...models import BackgroundAsset, BackgroundSpec, LyricLine, TimelineState
from .backgrounds import background_at
from .index import TimecodeIndex
from .progress import progress_of


class TimelineSampler:
    """Compose line window, reveal progress and background for any time.

    Both live playback and export call ``sample``; neither re-derives the
    window logic on its own. The sampler is immutable after construction,
    so results do not depend on call order.
    """

    def __init__(
        self,
        lines: Iterable[LyricLine],
        backgrounds: BackgroundSpec,
    ):
        self._index = TimecodeIndex(lines)
        self._fallback: BackgroundAsset = backgrounds.fallback
        self._assets: Sequence[BackgroundAsset] = tuple(backgrounds.assets)

    @property
    def lines(self) -> Sequence[LyricLine]:
        return self._index.lines

    @property
    def assets(self) -> Sequence[BackgroundAsset]:
        return self._assets

    def sample(self, t: float) -> TimelineState:
        window = self._index.window_at(t)
        progress: Optional[float] = None
        if window.current is not None:
            progress = progress_of(window.current, t)
        return TimelineState(
            time=t,
            previous=window.previous,
            current=window.current,
            next=window.next,
            progress=progress,
            active_background=background_at(self._assets, t, self._fallback),
        )

    __call__ = sample
