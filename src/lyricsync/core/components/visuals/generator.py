"""Generate time-windowed background images from lyric stanzas.

The remote models are reached through an injected client object exposing
two calls:

- ``write_prompts(system_instruction, user_prompt) -> str`` returning a JSON
  array of ``{"stanza": ..., "prompt": ...}`` objects.
- ``generate_image(prompt) -> bytes | None`` returning JPEG bytes.

This module owns stanza grouping, prompt assembly, response parsing,
progress reporting and the mapping back onto stanza time windows.
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from ....exceptions import GenerationError, ValidationError
from ....utils.logging import get_logger
from ...models import BackgroundAsset, LyricLine
from ..render.assets import AssetLoader, to_data_uri

logger = get_logger(__name__)

STANZA_SIZE = 2
END_MARKER = "END"

SYSTEM_INSTRUCTION = (
    "You are a creative director for music videos. Your task is to interpret "
    "song lyrics and generate a JSON array of visually striking, artistic image "
    "generation prompts in English. Each prompt should correspond to a lyrical "
    "stanza and capture its mood, theme, and key imagery. The prompts must be "
    "suitable for a generative AI image model. Focus on creating beautiful and "
    "evocative scenes. Do not include any text in the prompts. Ensure the visual "
    "style is consistent across all prompts for a cohesive video. The song's "
    "overall theme is defined by its title and artist."
)

_JSON_FENCE = re.compile(r"^\s*```(?:json)?\s*\n?|\n?```\s*$")


class VisualsClient(Protocol):
    def write_prompts(self, system_instruction: str, user_prompt: str) -> str: ...

    def generate_image(self, prompt: str) -> Optional[bytes]: ...


@dataclass(frozen=True)
class Stanza:
    text: str
    start_time: float
    end_time: float


def group_stanzas(lines: Sequence[LyricLine], size: int = STANZA_SIZE) -> List[Stanza]:
    """Group real lines into stanzas of ``size``; the last may be shorter."""
    real = [l for l in lines if l.is_real and l.text != END_MARKER]
    stanzas = []
    for i in range(0, len(real), size):
        chunk = real[i : i + size]
        stanzas.append(
            Stanza(
                text="\n".join(l.text for l in chunk),
                start_time=chunk[0].start_time,
                end_time=chunk[-1].end_time,
            )
        )
    return stanzas


def fallback_prompt(title: str) -> str:
    return f"A beautiful abstract visualization of the feeling of the song '{title}'"


def build_user_prompt(
    stanzas: Sequence[Stanza], lines: Sequence[LyricLine], title: str, artist: str
) -> str:
    full_lyrics = "\n".join(l.text for l in lines if l.is_real and l.text != END_MARKER)
    return (
        f"Song Title: {title}\n"
        f"Artist: {artist}\n"
        f"Full Lyrics for context:\n{full_lyrics}\n"
        "---\n"
        "Now, generate an image prompt for each of the following stanzas. Return a "
        'JSON array of objects, where each object has a "stanza" key (the original '
        'text) and a "prompt" key (the generated English image prompt).\n'
        f"Stanzas:\n{json.dumps([s.text for s in stanzas], ensure_ascii=False)}"
    )


def parse_prompts(text: str) -> dict:
    """Parse the prompt-writer response into a stanza -> prompt mapping."""
    cleaned = _JSON_FENCE.sub("", text or "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise GenerationError("AI failed to generate prompts in the correct format.") from e
    if not isinstance(data, list):
        raise GenerationError("AI failed to generate prompts in the correct format.")

    prompts = {}
    for item in data:
        if not isinstance(item, dict):
            continue
        stanza, prompt = item.get("stanza"), item.get("prompt")
        if isinstance(stanza, str) and isinstance(prompt, str) and stanza not in prompts:
            prompts[stanza] = prompt
    return prompts


class BackgroundGenerator:
    """Turn lyric stanzas into time-windowed background images."""

    def __init__(self, client: VisualsClient):
        self.client = client

    def generate(
        self,
        lines: Sequence[LyricLine],
        title: str,
        artist: str,
        on_progress: Optional[Callable[[int, str], None]] = None,
    ) -> List[BackgroundAsset]:
        report = on_progress or (lambda percent, message: None)

        report(0, "Analysing lyrics...")
        stanzas = group_stanzas(lines)
        if not stanzas:
            return []

        report(10, "Writing visual prompts...")
        try:
            response = self.client.write_prompts(
                SYSTEM_INSTRUCTION, build_user_prompt(stanzas, lines, title, artist)
            )
        except Exception as e:
            raise GenerationError(f"Prompt generation failed: {e}") from e
        prompts = parse_prompts(response)

        assets: List[BackgroundAsset] = []
        total = len(stanzas)
        for i, stanza in enumerate(stanzas):
            report(20 + round(i / total * 80), f"Generating image {i + 1} / {total}...")
            prompt = prompts.get(stanza.text) or fallback_prompt(title)
            logger.debug(f"Generating image for prompt: {prompt}")
            try:
                image = self.client.generate_image(prompt)
            except Exception as e:
                raise GenerationError(f"Image generation failed: {e}") from e
            if not image:
                logger.warning(f"No image returned for stanza {i + 1}, skipping")
                continue
            assets.append(
                BackgroundAsset(
                    url=to_data_uri(image),
                    start_time=stanza.start_time,
                    end_time=stanza.end_time,
                )
            )

        report(100, "Images ready!")
        logger.info(f"Generated {len(assets)} background images")
        return assets


def load_background_assets(path: Path) -> List[BackgroundAsset]:
    """Read ``[{"url", "startTime", "endTime"}, ...]`` from a JSON file.

    Relative file references resolve against the JSON file's directory.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read background list {path}: {e}") from e
    if not isinstance(data, list):
        raise ValidationError(f"Background list {path} must be a JSON array")

    base = Path(path).parent
    assets = []
    for idx, item in enumerate(data):
        try:
            url = str(item["url"])
            start = float(item.get("startTime", item.get("start_time")))
            end = float(item.get("endTime", item.get("end_time")))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Background entry {idx + 1} is invalid: {e}") from e
        if end < start:
            raise ValidationError(f"Background entry {idx + 1} ends before it starts")
        if "://" not in url and not url.startswith("data:") and not Path(url).is_absolute():
            url = str(base / url)
        assets.append(BackgroundAsset(url=url, start_time=start, end_time=end))
    return assets


def save_background_assets(
    assets: Sequence[BackgroundAsset],
    path: Path,
    loader: Optional[AssetLoader] = None,
) -> Path:
    """Write images beside ``path`` and a list that ``load_background_assets`` reads."""
    loader = loader or AssetLoader()
    path = Path(path)

    entries = []
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        for idx, asset in enumerate(assets, start=1):
            name = f"{path.stem}-{idx:02d}.jpg"
            (path.parent / name).write_bytes(loader.read_bytes(asset.url))
            entries.append(
                {"url": name, "startTime": asset.start_time, "endTime": asset.end_time}
            )
        path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
    except OSError as e:
        raise GenerationError(f"Cannot save background images to {path.parent}: {e}") from e
    logger.info(f"Saved {len(entries)} background images to {path.parent}")
    return path
