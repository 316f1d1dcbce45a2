"""Export frame driver: sample the timeline on a synthetic frame clock."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Callable, Iterable, Optional

from ....config import (
    DEFAULT_OUTPUT_DIR,
    EXPORT_PROGRESS_AUDIO,
    EXPORT_PROGRESS_DONE,
    EXPORT_PROGRESS_ENCODE,
    EXPORT_PROGRESS_INIT,
    FPS,
)
from ....exceptions import ExportError, ValidationError
from ....utils.logging import get_logger
from ....utils.validation import (
    build_output_filename,
    validate_duration,
    validate_frame_rate,
)
from ...models import BackgroundSpec, ExportJob, LyricLine
from ..render.assets import AssetLoader
from ..render.frame_renderer import FrameComposer, encode_jpeg
from ..render.progress import ProgressCallback, frame_progress
from ..timeline.sampler import TimelineSampler
from .encoder import MoviePyEncoder

logger = get_logger(__name__)

FRAME_NAME = "frame-{:05d}.jpg"
OUTPUT_NAME = "output.mp4"


def _noop_progress(percent: int, message: str) -> None:
    pass


def count_frames(duration: float, frame_rate: int) -> int:
    return int(math.floor(duration * frame_rate))


def frame_time(index: int, frame_rate: int) -> float:
    return index / frame_rate


class ExportFrameDriver:
    """Render every frame of a song offline and hand them to the encoder.

    Frames are produced strictly in index order. Any failure aborts the
    whole job; the working storage is cleaned up whether the export
    succeeds or not. Only one export may run per encoder at a time.
    Exports cannot be cancelled once started.
    """

    def __init__(
        self,
        encoder: MoviePyEncoder,
        loader: Optional[AssetLoader] = None,
        composer_factory: Callable[[], FrameComposer] = FrameComposer,
    ):
        self.encoder = encoder
        self.loader = loader or AssetLoader()
        self.composer_factory = composer_factory

    def export(
        self,
        lines: Iterable[LyricLine],
        backgrounds: BackgroundSpec,
        audio: str,
        duration: float,
        frame_rate: int = FPS,
        on_progress: Optional[ProgressCallback] = None,
        *,
        title: str = "",
        artist: str = "",
        output_dir: Optional[Path] = None,
        output_path: Optional[Path] = None,
    ) -> Path:
        """Export a lyric video and return the written file's path."""
        report = on_progress or _noop_progress
        duration = validate_duration(duration)
        frame_rate = validate_frame_rate(frame_rate)
        total_frames = count_frames(duration, frame_rate)
        if total_frames <= 0:
            raise ValidationError(
                f"Duration {duration:.3f}s is shorter than one frame at {frame_rate}fps"
            )
        sampler = TimelineSampler(lines, backgrounds)
        target = self._resolve_target(title, artist, output_dir, output_path)

        with self.encoder.session():
            job: Optional[ExportJob] = None
            try:
                report(EXPORT_PROGRESS_INIT, "Preparing export engine...")
                self.encoder.initialize()
                job = ExportJob(frame_rate=frame_rate, total_frames=total_frames)
                logger.info(
                    f"Exporting {duration:.1f}s at {frame_rate}fps ({total_frames} frames)"
                )

                report(EXPORT_PROGRESS_AUDIO, "Loading audio...")
                job.audio_asset = "input" + (Path(audio).suffix or ".mp3")
                audio_bytes = self.loader.read_bytes(str(audio))
                self.encoder.write_asset(job.audio_asset, audio_bytes)

                images = self.loader.preload(backgrounds.urls)
                composer = self.composer_factory()
                album_art = backgrounds.fallback.url

                for i in range(total_frames):
                    job.current_frame_index = i
                    report(
                        frame_progress(i, total_frames),
                        f"Capturing frame {i}/{total_frames}",
                    )
                    state = sampler.sample(frame_time(i, frame_rate))
                    frame = composer.compose(state, images, album_art_url=album_art)
                    name = FRAME_NAME.format(i)
                    job.rendered_frames.append(name)
                    self.encoder.write_asset(name, encode_jpeg(frame))

                report(EXPORT_PROGRESS_ENCODE, "Encoding video...")
                job.output_asset = OUTPUT_NAME
                self.encoder.run(
                    job.rendered_frames, job.audio_asset, job.output_asset, frame_rate
                )

                report(EXPORT_PROGRESS_DONE, "Done! Saving file...")
                data = self.encoder.read_asset(job.output_asset)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
                logger.info(f"Done! Output: {target}")
                return target
            except Exception as e:
                logger.error(f"Export failed: {e}")
                raise ExportError(f"Export failed: {e}") from e
            finally:
                self._cleanup(job)

    @staticmethod
    def _resolve_target(
        title: str,
        artist: str,
        output_dir: Optional[Path],
        output_path: Optional[Path],
    ) -> Path:
        if output_path is not None:
            return Path(output_path)
        return Path(output_dir or DEFAULT_OUTPUT_DIR) / build_output_filename(
            title, artist
        )

    def _cleanup(self, job: Optional[ExportJob]) -> None:
        if job is None:
            return
        for name in job.registered_assets:
            try:
                self.encoder.unlink_asset(name)
            except Exception as e:
                logger.warning(f"Could not remove {name}: {e}")
        logger.debug(f"Released {len(job.registered_assets)} working assets")
        job.rendered_frames.clear()
