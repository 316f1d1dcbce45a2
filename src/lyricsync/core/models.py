"""Data models for lyric timing, backgrounds and derived timeline state."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LyricLine:
    """A lyric line with its display window in seconds.

    Empty text marks a deliberate silent gap (e.g. a synthesized intro).
    Such lines keep their time window but never take part in display-line
    selection.
    """

    text: str
    start_time: float
    end_time: float

    @property
    def is_real(self) -> bool:
        return self.text.strip() != ""

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def validate(self) -> None:
        if self.start_time < 0 or self.end_time < 0:
            raise ValueError("Line timing must be non-negative")
        if self.end_time < self.start_time:
            raise ValueError("Line end_time must be >= start_time")


@dataclass(frozen=True)
class BackgroundAsset:
    """A background image reference shown during [start_time, end_time)."""

    url: str
    start_time: float
    end_time: float

    def covers(self, t: float) -> bool:
        return self.start_time <= t < self.end_time


@dataclass(frozen=True)
class BackgroundSpec:
    """Static fallback image plus optional time-windowed backgrounds."""

    fallback: BackgroundAsset
    assets: tuple = ()

    @classmethod
    def from_urls(
        cls,
        fallback_url: str,
        assets: Optional[List[BackgroundAsset]] = None,
        duration: float = 0.0,
    ) -> "BackgroundSpec":
        return cls(
            fallback=BackgroundAsset(fallback_url, 0.0, duration),
            assets=tuple(assets or ()),
        )

    @property
    def urls(self) -> List[str]:
        """Distinct image references, fallback first, in first-seen order."""
        seen: List[str] = []
        for url in [self.fallback.url, *(a.url for a in self.assets)]:
            if url not in seen:
                seen.append(url)
        return seen


@dataclass(frozen=True)
class LyricWindow:
    """Previous/current/next real lines around a timestamp."""

    previous: Optional[LyricLine] = None
    current: Optional[LyricLine] = None
    next: Optional[LyricLine] = None


@dataclass(frozen=True)
class TimelineState:
    """Everything a frame needs to show at one instant."""

    time: float
    previous: Optional[LyricLine]
    current: Optional[LyricLine]
    next: Optional[LyricLine]
    progress: Optional[float]
    active_background: BackgroundAsset


@dataclass
class ExportJob:
    """Transient bookkeeping for one export call."""

    frame_rate: int
    total_frames: int
    current_frame_index: int = 0
    rendered_frames: List[str] = field(default_factory=list)
    audio_asset: Optional[str] = None
    output_asset: Optional[str] = None

    @property
    def registered_assets(self) -> List[str]:
        names = list(self.rendered_frames)
        if self.audio_asset:
            names.append(self.audio_asset)
        if self.output_asset:
            names.append(self.output_asset)
        return names
