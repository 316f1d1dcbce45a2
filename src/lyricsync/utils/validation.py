"""Validation utilities."""

import re
from pathlib import Path

from ..config import ART_SIZE_RANGE
from ..exceptions import ValidationError


def validate_frame_rate(fps: int) -> int:
    """Validate export frame rate."""
    if fps <= 0 or fps > 120:
        raise ValidationError("Frame rate must be between 1 and 120")
    return fps


def validate_art_size(percent: int) -> int:
    """Validate album art width percentage."""
    min_size, max_size = ART_SIZE_RANGE
    if not min_size <= percent <= max_size:
        raise ValidationError(f"Art size must be between {min_size} and {max_size}")
    return percent


def validate_duration(duration: float) -> float:
    """Validate a track duration in seconds."""
    if duration is None or duration != duration or duration <= 0:
        raise ValidationError("Duration must be a positive number of seconds")
    return float(duration)


def validate_output_path(path: str) -> Path:
    """Validate and normalize output path."""
    output_path = Path(path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ValidationError(f"Cannot create output directory: {e}")

    if output_path.suffix.lower() != ".mp4":
        raise ValidationError("Output file must have .mp4 extension")

    return output_path


def validate_line_order(lines) -> None:
    """Validate that lines are sorted, non-inverted and non-overlapping."""
    prev = None
    for idx, line in enumerate(lines):
        start = line.start_time
        end = line.end_time
        if end < start:
            raise ValidationError(
                f"Line {idx + 1} has end before start ({start:.2f}s -> {end:.2f}s)"
            )
        if prev is not None:
            if start < prev.start_time:
                raise ValidationError(
                    f"Line {idx + 1} starts before previous line "
                    f"({start:.2f}s < {prev.start_time:.2f}s)"
                )
            if start < prev.end_time:
                raise ValidationError(
                    f"Line {idx + 1} overlaps previous line "
                    f"({start:.2f}s < {prev.end_time:.2f}s)"
                )
        prev = line


def sanitize_filename(name: str) -> str:
    """Remove invalid characters from filename."""
    sanitized = re.sub(r'[<>:"/\\|?*]', "", name)
    return sanitized[:100].strip()


def build_output_filename(title: str, artist: str) -> str:
    """Derive the exported video's file name from song title and artist."""
    stem = sanitize_filename(f"{title} - {artist}") or "lyrics"
    return f"{stem}.mp4"
