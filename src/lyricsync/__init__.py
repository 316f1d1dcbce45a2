"""LyricSync - hand-timed lyrics to karaoke lyric videos."""

__version__ = "0.1.0"
