"""Command-line interface using Click."""

import sys
import time
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

import click

from . import __version__
from .config import (
    ART_SIZE_PERCENT,
    DEFAULT_BACKGROUND_URL,
    FPS,
    PREVIEW_TICK_RATE,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
    parse_resolution,
)
from .core.components.export.driver import ExportFrameDriver
from .core.components.export.encoder import MoviePyEncoder, probe_duration
from .core.components.playback.audio import SimulatedAudio
from .core.components.playback.clock import PlaybackClock, PlaybackState
from .core.components.playback.scheduler import TimerScheduler
from .core.components.render.frame_renderer import FrameComposer
from .core.components.render.progress import ConsoleProgressBar
from .core.components.timeline.sampler import TimelineSampler
from .core.components.visuals.gemini import GeminiVisualsClient
from .core.components.visuals.generator import (
    BackgroundGenerator,
    load_background_assets,
    save_background_assets,
)
from .core.models import BackgroundSpec, LyricLine, TimelineState
from .core.srt import fix_line_overlaps, load_srt, with_silent_intro
from .exceptions import LyricSyncError
from .utils.logging import setup_logging
from .utils.validation import (
    validate_art_size,
    validate_duration,
    validate_frame_rate,
    validate_output_path,
)


def load_lines(srt_path: str) -> list[LyricLine]:
    """Load subtitle lines ready for the sampler."""
    return with_silent_intro(fix_line_overlaps(load_srt(Path(srt_path))))


def format_state(state: TimelineState) -> str:
    """One-line textual rendering of a timeline state."""

    def _text(line: Optional[LyricLine]) -> str:
        return line.text.replace("\n", " / ") if line else "-"

    progress = f"{state.progress:.0%}" if state.progress is not None else "-"
    return (
        f"[{format_time(state.time)}] prev: {_text(state.previous)} | "
        f"current: {_text(state.current)} ({progress}) | next: {_text(state.next)}"
    )


def format_time(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def sample_times(
    at: Sequence[float], step: Optional[float], until: Optional[float]
) -> list[float]:
    """Expand --at / --step / --until options into sample times."""
    times = list(at)
    if step is not None:
        if step <= 0:
            raise click.BadParameter("--step must be positive")
        if until is None:
            raise click.BadParameter("--step requires --until")
        count = int(until / step)
        times.extend(round(i * step, 6) for i in range(count + 1))
    if not times:
        raise click.BadParameter("Provide --at or --step/--until")
    return times


def karaoke_bar(state: TimelineState) -> str:
    """Render the current line with a text highlight sweep."""
    if state.current is None:
        return ""
    text = state.current.text.replace("\n", " ")
    revealed = int(len(text) * (state.progress or 0.0))
    return click.style(text[:revealed], fg="yellow", bold=True) + text[revealed:]


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx, verbose, log_file):
    """LyricSync - time lyrics to audio and export karaoke lyric videos."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose,
    )
    ctx.obj["logger"] = logger
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("srt_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("audio_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Song title")
@click.option("--artist", required=True, help="Artist name")
@click.option("--background", help="Background / album art image (path or URL)")
@click.option(
    "--backgrounds-json",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON list of timed background images",
)
@click.option("--fps", type=int, default=FPS, show_default=True, help="Frame rate")
@click.option("--resolution", type=str, default=None,
              help="Video resolution (e.g., '1280x720', '720p', '1080p')")
@click.option("--art-size", type=int, default=ART_SIZE_PERCENT, show_default=True,
              help="Album art width as a percentage of the frame")
@click.option("--font", "font_path", type=click.Path(exists=True, dir_okay=False),
              help="Font file for lyrics")
@click.option("--output-dir", type=click.Path(file_okay=False), default=None,
              help="Directory for the exported video")
@click.option("-o", "--output", help="Explicit output video path")
@click.option("--no-progress", is_flag=True, help="Disable progress bar")
@click.pass_context
def render(ctx, srt_file, audio_file, title, artist, background, backgrounds_json,
           fps, resolution, art_size, font_path, output_dir, output, no_progress):
    """Export a karaoke lyric video from SRT timings and an audio file."""
    logger = ctx.obj["logger"]

    try:
        fps = validate_frame_rate(fps)
        art_size = validate_art_size(art_size)
        width, height = VIDEO_WIDTH, VIDEO_HEIGHT
        if resolution:
            try:
                width, height = parse_resolution(resolution)
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--resolution")
        output_path = validate_output_path(output) if output else None

        lines = load_lines(srt_file)
        duration = probe_duration(audio_file)
        assets = load_background_assets(Path(backgrounds_json)) if backgrounds_json else []
        backgrounds = BackgroundSpec.from_urls(
            background or DEFAULT_BACKGROUND_URL, assets, duration
        )
        logger.info(f"Resolution: {width}x{height}, FPS: {fps}, duration: {duration:.1f}s")

        encoder = MoviePyEncoder()
        driver = ExportFrameDriver(
            encoder,
            composer_factory=partial(
                FrameComposer,
                width=width,
                height=height,
                art_size=art_size,
                font_path=font_path,
            ),
        )
        progress = None if no_progress else ConsoleProgressBar()
        try:
            result = driver.export(
                lines,
                backgrounds,
                audio_file,
                duration,
                fps,
                progress,
                title=title,
                artist=artist,
                output_dir=Path(output_dir) if output_dir else None,
                output_path=output_path,
            )
        finally:
            if progress is not None:
                progress.finish()
            encoder.close()

        logger.info(f"✅ Lyric video exported: {result}")

    except click.BadParameter:
        raise
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}")
        if ctx.obj.get("verbose"):
            import traceback

            traceback.print_exc()
        sys.exit(1)


@cli.command()
@click.argument("srt_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Song title")
@click.option("--artist", required=True, help="Artist name")
@click.option("-o", "--output", required=True, type=click.Path(dir_okay=False),
              help="JSON list to write (images are saved beside it)")
@click.option("--no-progress", is_flag=True, help="Disable progress bar")
@click.pass_context
def backgrounds(ctx, srt_file, title, artist, output, no_progress):
    """Generate AI background images for each lyric stanza."""
    logger = ctx.obj["logger"]
    progress = None if no_progress else ConsoleProgressBar(prefix="Generating")
    try:
        lines = load_lines(srt_file)
        generator = BackgroundGenerator(GeminiVisualsClient())
        try:
            assets = generator.generate(lines, title, artist, progress)
        finally:
            if progress is not None:
                progress.finish()
        if not assets:
            logger.warning("No background images were generated")
        result = save_background_assets(assets, Path(output))
        logger.info(f"✅ Background list written: {result}")
        logger.info(f"Use it with: lyricsync render ... --backgrounds-json {result}")
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)


@cli.command("inspect")
@click.argument("srt_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--at", "at", type=float, multiple=True, help="Sample time in seconds")
@click.option("--step", type=float, default=None, help="Sample every N seconds")
@click.option("--until", type=float, default=None, help="Last time for --step")
@click.pass_context
def inspect_timeline(ctx, srt_file, at, step, until):
    """Print which lyric lines are shown at the given times."""
    logger = ctx.obj["logger"]
    times = sample_times(at, step, until)
    try:
        sampler = TimelineSampler(
            load_lines(srt_file), BackgroundSpec.from_urls(DEFAULT_BACKGROUND_URL)
        )
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    for t in times:
        click.echo(format_state(sampler.sample(t)))


@cli.command()
@click.argument("srt_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--duration", type=float, default=None,
              help="Track length in seconds (defaults to the last line's end)")
@click.option("--start", type=float, default=0.0, help="Start position in seconds")
@click.option("--rate", type=int, default=PREVIEW_TICK_RATE, show_default=True,
              help="Display refresh rate")
@click.pass_context
def preview(ctx, srt_file, duration, start, rate):
    """Play the lyric timeline in the terminal against a silent clock."""
    logger = ctx.obj["logger"]
    try:
        lines = load_lines(srt_file)
        duration = validate_duration(duration or max(l.end_time for l in lines))
        sampler = TimelineSampler(lines, BackgroundSpec.from_urls(DEFAULT_BACKGROUND_URL))
    except LyricSyncError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    last = {"text": None}

    def show(state: TimelineState) -> None:
        line = f"{format_time(state.time)} {karaoke_bar(state)}"
        if line != last["text"]:
            click.echo("\r\033[K" + line, nl=False)
            last["text"] = line

    clock = PlaybackClock(sampler, SimulatedAudio(duration), TimerScheduler(rate), show)
    clock.seek(start)
    clock.play()
    try:
        while clock.state is PlaybackState.PLAYING:
            time.sleep(0.1)
    except KeyboardInterrupt:
        clock.pause()
    finally:
        clock.close()
        click.echo()


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
