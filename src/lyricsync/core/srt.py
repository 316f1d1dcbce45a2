"""SubRip (SRT) ingest into lyric lines."""

import re
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from ..config import SILENT_INTRO_THRESHOLD
from ..exceptions import SubtitleError
from ..utils.logging import get_logger
from .models import LyricLine

logger = get_logger(__name__)

TIME_LINE_PATTERN = re.compile(
    r"(\d{2}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(\d{2}:\d{2}:\d{2}[,.]\d{3})"
)
BLOCK_SEPARATOR = re.compile(r"\n\s*\n+")


def timecode_to_seconds(code: str) -> float:
    """Convert ``HH:MM:SS,mmm`` (or ``.mmm``) to seconds."""
    hours, minutes, seconds = code.replace(",", ".").split(":")
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def _parse_block(block: str) -> Optional[LyricLine]:
    rows = block.split("\n")
    if len(rows) < 2:
        return None

    time_idx = next((i for i, row in enumerate(rows) if "-->" in row), None)
    if time_idx is None:
        return None

    match = TIME_LINE_PATTERN.search(rows[time_idx])
    if not match:
        return None

    start = timecode_to_seconds(match.group(1))
    end = timecode_to_seconds(match.group(2))
    if end < start:
        return None
    return LyricLine(
        text="\n".join(rows[time_idx + 1 :]), start_time=start, end_time=end
    )


def parse_srt(text: str) -> List[LyricLine]:
    """Parse SRT text; malformed blocks are skipped."""
    blocks = BLOCK_SEPARATOR.split(text.replace("\r", "").strip())
    lines = []
    for idx, block in enumerate(blocks):
        line = _parse_block(block)
        if line is None:
            logger.debug(f"Skipping malformed subtitle block {idx + 1}")
            continue
        lines.append(line)
    lines.sort(key=lambda l: l.start_time)
    return lines


def load_srt(path: Path) -> List[LyricLine]:
    """Read and parse an SRT file, failing if nothing usable is found."""
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise SubtitleError(f"Cannot read subtitle file {path}: {e}") from e
    lines = parse_srt(text)
    if not lines:
        raise SubtitleError(f"No usable subtitle blocks in {path}")
    logger.info(f"Loaded {len(lines)} lyric lines from {path}")
    return lines


def fix_line_overlaps(lines: List[LyricLine]) -> List[LyricLine]:
    """Trim each line's end so it never runs past the next line's start."""
    fixed = list(lines)
    for idx in range(len(fixed) - 1):
        line, nxt = fixed[idx], fixed[idx + 1]
        if line.end_time > nxt.start_time:
            logger.warning(
                "Line %d overlaps the next line (%.2fs > %.2fs), trimming",
                idx + 1,
                line.end_time,
                nxt.start_time,
            )
            fixed[idx] = replace(line, end_time=max(line.start_time, nxt.start_time))
    return fixed


def with_silent_intro(lines: List[LyricLine]) -> List[LyricLine]:
    """Prepend an empty line covering the silence before the first lyric."""
    if not lines:
        return []
    first_start = lines[0].start_time
    if first_start > SILENT_INTRO_THRESHOLD:
        return [LyricLine(text="", start_time=0.0, end_time=first_start), *lines]
    return list(lines)
