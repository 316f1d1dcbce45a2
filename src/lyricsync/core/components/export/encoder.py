"""Encoder service: working storage plus image-sequence + audio muxing."""

from __future__ import annotations

import os
import shutil
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from moviepy import AudioFileClip, ImageSequenceClip
from moviepy.config import FFMPEG_BINARY

from ....config import (
    AUDIO_BITRATE,
    AUDIO_CODEC,
    PIXEL_FORMAT,
    VIDEO_CODEC,
    make_work_dir,
)
from ....exceptions import AssetLoadError, EncoderError, ExportBusyError
from ....utils.logging import get_logger

logger = get_logger(__name__)

TEMP_AUDIO_SUFFIX = "-audio.m4a"


class MoviePyEncoder:
    """Shared encoding backend owned by the caller and injected into exports.

    Lifecycle is uninitialized -> initialized, then busy while a job holds
    the session and idle otherwise. Assets live in a flat working
    directory; jobs must unlink what they write.
    """

    def __init__(self, work_dir: Optional[Path] = None):
        self._requested_dir = Path(work_dir) if work_dir else None
        self._work_dir: Optional[Path] = None
        self._owns_dir = False
        self._lock = threading.Lock()
        self.ffmpeg_binary: Optional[str] = None

    @property
    def is_initialized(self) -> bool:
        return self._work_dir is not None

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def work_dir(self) -> Path:
        if self._work_dir is None:
            raise EncoderError("Encoder is not initialized")
        return self._work_dir

    def initialize(self) -> None:
        """Locate ffmpeg and prepare working storage. Idempotent."""
        if self.is_initialized:
            return
        binary = shutil.which(FFMPEG_BINARY) or (
            FFMPEG_BINARY if os.path.isfile(FFMPEG_BINARY) else None
        )
        if not binary:
            raise EncoderError(f"ffmpeg binary not found: {FFMPEG_BINARY}")
        self.ffmpeg_binary = binary

        try:
            if self._requested_dir is not None:
                self._requested_dir.mkdir(parents=True, exist_ok=True)
                self._work_dir = self._requested_dir
            else:
                self._work_dir = make_work_dir()
                self._owns_dir = True
        except OSError as e:
            raise EncoderError(f"Cannot create encoder working directory: {e}") from e
        logger.debug(f"Encoder ready (ffmpeg: {binary}, work dir: {self._work_dir})")

    @contextmanager
    def session(self) -> Iterator["MoviePyEncoder"]:
        """Hold the encoder exclusively; a concurrent caller is rejected."""
        if not self._lock.acquire(blocking=False):
            raise ExportBusyError("An export is already running on this encoder")
        try:
            yield self
        finally:
            self._lock.release()

    def asset_path(self, name: str) -> Path:
        if Path(name).name != name:
            raise EncoderError(f"Invalid asset name: {name}")
        return self.work_dir / name

    def write_asset(self, name: str, data: bytes) -> None:
        try:
            self.asset_path(name).write_bytes(data)
        except OSError as e:
            raise EncoderError(f"Failed to write {name}: {e}") from e

    def read_asset(self, name: str) -> bytes:
        try:
            return self.asset_path(name).read_bytes()
        except OSError as e:
            raise EncoderError(f"Failed to read {name}: {e}") from e

    def unlink_asset(self, name: str) -> None:
        self.asset_path(name).unlink(missing_ok=True)

    def list_assets(self) -> List[str]:
        if self._work_dir is None:
            return []
        return sorted(p.name for p in self._work_dir.iterdir() if p.is_file())

    def run(
        self,
        frames: Sequence[str],
        audio: str,
        output: str,
        frame_rate: int,
    ) -> None:
        """Mux ``frames`` at ``frame_rate`` with ``audio`` into ``output``.

        The result is cut to the shorter of the two streams.
        """
        if not frames:
            raise EncoderError("No frames to encode")

        temp_audio = self.asset_path(Path(output).stem + TEMP_AUDIO_SUFFIX)
        video = None
        audio_clip = None
        try:
            video = ImageSequenceClip(
                [str(self.asset_path(name)) for name in frames], fps=frame_rate
            )
            audio_clip = AudioFileClip(str(self.asset_path(audio)))
            duration = min(video.duration, audio_clip.duration)
            video = video.with_duration(duration).with_audio(
                audio_clip.subclipped(0, duration)
            )
            video.write_videofile(
                str(self.asset_path(output)),
                fps=frame_rate,
                codec=VIDEO_CODEC,
                audio_codec=AUDIO_CODEC,
                audio_bitrate=AUDIO_BITRATE,
                ffmpeg_params=["-pix_fmt", PIXEL_FORMAT],
                temp_audiofile=str(temp_audio),
                remove_temp=True,
                logger=None,
            )
        except EncoderError:
            raise
        except Exception as e:
            raise EncoderError(f"Encoding failed: {e}") from e
        finally:
            if audio_clip is not None:
                audio_clip.close()
            if video is not None:
                video.close()
            # MoviePy only removes its audio track after a successful mux
            temp_audio.unlink(missing_ok=True)

    def close(self) -> None:
        """Remove working storage created by this encoder."""
        if self._work_dir is not None and self._owns_dir:
            shutil.rmtree(self._work_dir, ignore_errors=True)
        self._work_dir = None
        self._owns_dir = False


def probe_duration(audio_path: str) -> float:
    """Read an audio file's duration in seconds."""
    try:
        clip = AudioFileClip(audio_path)
    except Exception as e:
        raise AssetLoadError(f"Cannot read audio duration of {audio_path}: {e}") from e
    try:
        duration = clip.duration
    finally:
        clip.close()
    if not duration or duration <= 0:
        raise AssetLoadError(f"Audio duration unknown for {audio_path}")
    return float(duration)
