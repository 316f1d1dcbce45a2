"""Logging configuration for LyricSync."""

import logging
import sys
from pathlib import Path
from typing import Optional

# Chatty dependencies: HTTP clients used for asset fetches and the Gemini SDK,
# image decoding, and the ffmpeg/MoviePy encoding stack.
NOISY_LOGGERS = (
    "urllib3",
    "httpx",
    "google_genai",
    "PIL",
    "moviepy",
    "imageio_ffmpeg",
)

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
BRIEF_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(
    level: str = "INFO", log_file: Optional[Path] = None, verbose: bool = False
) -> logging.Logger:
    """Set up logging configuration.

    The console uses the brief format unless ``verbose``; a log file always
    gets timestamps so long exports can be timed afterwards.
    """
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger("lyricsync")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(DETAILED_FORMAT if verbose else BRIEF_FORMAT)
    )
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "lyricsync") -> logging.Logger:
    """Get logger instance."""
    return logging.getLogger(name)
