"""Font utilities for cross-platform font loading."""

import os
import sys
from functools import lru_cache
from typing import Optional

from PIL import ImageFont

from ..config import FONT_SIZE


# Platform-specific font paths in order of preference. CJK-capable faces come
# first so Chinese and Japanese lyrics render without tofu.
FONT_PATHS = {
    "darwin": [
        "/System/Library/Fonts/PingFang.ttc",
        "/System/Library/Fonts/STHeiti Medium.ttc",
        "/System/Library/Fonts/Helvetica.ttc",
        "/Library/Fonts/Arial.ttf",
    ],
    "linux": [
        "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
        "/usr/share/fonts/noto-cjk/NotoSansCJK-Bold.ttc",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        "/usr/share/fonts/TTF/DejaVuSans.ttf",
    ],
    "win32": [
        "C:/Windows/Fonts/msjhbd.ttc",
        "C:/Windows/Fonts/msjh.ttc",
        "C:/Windows/Fonts/arialbd.ttf",
        "C:/Windows/Fonts/arial.ttf",
    ],
}


def _get_platform_fonts() -> list[str]:
    """Get font paths for the current platform."""
    platform = sys.platform
    if platform.startswith("linux"):
        platform = "linux"
    return FONT_PATHS.get(platform, FONT_PATHS["linux"])


def get_font_path() -> Optional[str]:
    """
    Get the path to the font that will be used for rendering.

    Returns:
        Path to font file, or None if using default
    """
    for path in _get_platform_fonts():
        if os.path.exists(path):
            return path

    for platform_fonts in FONT_PATHS.values():
        for path in platform_fonts:
            if os.path.exists(path):
                return path

    return None


@lru_cache(maxsize=16)
def get_font(
    size: int = FONT_SIZE, path: Optional[str] = None
) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """
    Get a suitable font for rendering, with cross-platform support.

    Args:
        size: Font size in pixels (default from config)
        path: Explicit font file; platform fonts are used when omitted

    Returns:
        PIL ImageFont object
    """
    candidates = [path] if path else []
    resolved = get_font_path()
    if resolved:
        candidates.append(resolved)

    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    # Last resort: PIL's bundled font
    return ImageFont.load_default(size)
