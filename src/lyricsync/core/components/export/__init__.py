"""Offline, frame-accurate video export."""

from .driver import ExportFrameDriver
from .encoder import MoviePyEncoder

__all__ = ["ExportFrameDriver", "MoviePyEncoder"]
