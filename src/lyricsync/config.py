"""Configuration settings for LyricSync."""

import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple

from .exceptions import ConfigError

# Directories
DEFAULT_OUTPUT_DIR = Path.cwd()

# Video settings (can be overridden via environment variables)
VIDEO_WIDTH = int(os.getenv("LYRICSYNC_VIDEO_WIDTH", "1280"))
VIDEO_HEIGHT = int(os.getenv("LYRICSYNC_VIDEO_HEIGHT", "720"))
FPS = int(os.getenv("LYRICSYNC_FPS", "30"))

# Resolution presets
RESOLUTION_PRESETS = {
    "480p": (854, 480),
    "720p": (1280, 720),
    "1080p": (1920, 1080),
    "1440p": (2560, 1440),
    "4k": (3840, 2160),
}


# Colors (RGB tuples)
class Colors:
    CANVAS = (0, 0, 0)
    SIDE_TEXT = (209, 213, 219)
    SIDE_TEXT_ALPHA = 178
    BASE_TEXT = (156, 163, 175)
    # Left-to-right highlight gradient stops
    HIGHLIGHT_STOPS = ((253, 224, 71), (255, 255, 255), (251, 191, 36))
    PROGRESS_BG = (60, 60, 80)
    PROGRESS_FG = (250, 204, 21)


# Font settings (can be overridden via environment variables)
FONT_SIZE = int(os.getenv("LYRICSYNC_FONT_SIZE", "48"))
SIDE_LINE_SCALE = 0.6
LINE_OFFSET_FACTOR = 1.5
LYRICS_ROTATION_DEGREES = -5.0

# Layout
ART_SIZE_PERCENT = int(os.getenv("LYRICSYNC_ART_SIZE", "40"))
ART_SIZE_RANGE = (20, 70)
ART_MARGIN = 30
OVERLAY_OPACITY = 0.6
FRAME_JPEG_QUALITY = 80

# Playback
REPLAY_EPSILON = 0.1
SILENT_INTRO_THRESHOLD = 0.1
PREVIEW_TICK_RATE = 30

# Export progress bands (percent of the whole job)
EXPORT_PROGRESS_INIT = 0
EXPORT_PROGRESS_AUDIO = 5
EXPORT_PROGRESS_FRAMES_START = 10
EXPORT_PROGRESS_FRAMES_SPAN = 80
EXPORT_PROGRESS_ENCODE = 90
EXPORT_PROGRESS_DONE = 99

# Encoding
VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "192k"
PIXEL_FORMAT = "yuv420p"

# Assets
DEFAULT_BACKGROUND_URL = os.getenv(
    "LYRICSYNC_DEFAULT_BACKGROUND",
    "https://storage.googleapis.com/aistudio-hosting/workspace-template-assets/"
    "lyric-video-maker/default_bg.jpg",
)
ASSET_FETCH_TIMEOUT = 30

# Background generation (Gemini)
PROMPT_MODEL = os.getenv("LYRICSYNC_PROMPT_MODEL", "gemini-2.5-flash")
IMAGE_MODEL = os.getenv("LYRICSYNC_IMAGE_MODEL", "imagen-4.0-generate-001")
IMAGE_ASPECT_RATIO = "16:9"


def validate_config() -> None:
    """Validate configuration values."""
    if VIDEO_WIDTH <= 0 or VIDEO_HEIGHT <= 0:
        raise ConfigError("Invalid video dimensions")

    if FPS <= 0:
        raise ConfigError("Invalid FPS value")

    if FONT_SIZE <= 0:
        raise ConfigError("Invalid font size")

    if not ART_SIZE_RANGE[0] <= ART_SIZE_PERCENT <= ART_SIZE_RANGE[1]:
        raise ConfigError(
            f"Art size must be between {ART_SIZE_RANGE[0]} and {ART_SIZE_RANGE[1]} percent"
        )


def get_work_dir() -> Optional[Path]:
    """Get encoder working directory from environment, if pinned."""
    work_dir = os.getenv("LYRICSYNC_WORK_DIR")
    if work_dir:
        return Path(work_dir)
    return None


def make_work_dir() -> Path:
    """Return the pinned working directory or a fresh temporary one."""
    pinned = get_work_dir()
    if pinned is not None:
        pinned.mkdir(parents=True, exist_ok=True)
        return pinned
    return Path(tempfile.mkdtemp(prefix="lyricsync-"))


# Validate config on import
validate_config()


def parse_resolution(resolution_str: str) -> Tuple[int, int]:
    """
    Parse resolution string into (width, height) tuple.

    Args:
        resolution_str: Resolution as "WIDTHxHEIGHT" (e.g., "1280x720")
                       or preset name (e.g., "720p", "1080p", "4k")

    Returns:
        Tuple of (width, height)

    Raises:
        ValueError: If resolution string is invalid
    """
    resolution_str = resolution_str.lower().strip()

    if resolution_str in RESOLUTION_PRESETS:
        return RESOLUTION_PRESETS[resolution_str]

    if "x" in resolution_str:
        try:
            parts = resolution_str.split("x")
            width = int(parts[0])
            height = int(parts[1])
            if width > 0 and height > 0:
                return (width, height)
        except (ValueError, IndexError):
            pass

    raise ValueError(
        f"Invalid resolution: {resolution_str}. "
        f"Use format 'WIDTHxHEIGHT' (e.g., '1280x720') or "
        f"preset name: {', '.join(RESOLUTION_PRESETS.keys())}"
    )


def get_gemini_api_key() -> Optional[str]:
    """Get the Gemini API key from the environment."""
    for name in ("LYRICSYNC_GEMINI_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        value = os.getenv(name)
        if value:
            return value
    return None
