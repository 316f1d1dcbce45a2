"""Frame rendering for lyric videos."""

from io import BytesIO
from typing import Dict, Mapping, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont, ImageOps

from ....config import (
    ART_MARGIN,
    ART_SIZE_PERCENT,
    FONT_SIZE,
    FRAME_JPEG_QUALITY,
    LINE_OFFSET_FACTOR,
    LYRICS_ROTATION_DEGREES,
    OVERLAY_OPACITY,
    SIDE_LINE_SCALE,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
    Colors,
)
from ....utils.fonts import get_font
from ....utils.validation import validate_art_size
from ...models import LyricLine, TimelineState

FontType = ImageFont.ImageFont | ImageFont.FreeTypeFont


def cover_image(img: Image.Image, width: int, height: int) -> Image.Image:
    """Scale ``img`` to cover width x height and crop the centre."""
    return ImageOps.fit(
        img.convert("RGB"), (width, height), method=Image.Resampling.LANCZOS
    )


def gradient_row(width: int, stops=Colors.HIGHLIGHT_STOPS) -> np.ndarray:
    """Return a (width, 3) uint8 row interpolating evenly spaced color stops."""
    if width <= 0:
        return np.zeros((0, 3), dtype=np.uint8)
    positions = np.linspace(0.0, 1.0, len(stops))
    xs = np.linspace(0.0, 1.0, width)
    channels = [
        np.interp(xs, positions, [stop[c] for stop in stops]) for c in range(3)
    ]
    return np.stack(channels, axis=1).round().astype(np.uint8)


def clip_mask(mask: Image.Image, left: int, width: int) -> Image.Image:
    """Zero every column of ``mask`` outside [left, left + width)."""
    arr = np.array(mask)
    right = max(left, left + width)
    arr[:, : max(left, 0)] = 0
    arr[:, max(right, 0):] = 0
    return Image.fromarray(arr)


def encode_jpeg(img: Image.Image, quality: int = FRAME_JPEG_QUALITY) -> bytes:
    buf = BytesIO()
    img.convert("RGB").save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


class FrameComposer:
    """Render a timeline state as a still image.

    Layout: background scaled to cover the canvas, a black darkening
    overlay, square album art on the left, and a tilted three-line lyric
    block (previous / current / next) centred in the remaining width. The
    current line's highlight is a hard left-to-right clip at the reveal
    fraction.
    """

    def __init__(
        self,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        art_size: int = ART_SIZE_PERCENT,
        font_size: int = FONT_SIZE,
        font_path: Optional[str] = None,
    ):
        self.width = width
        self.height = height
        self.art_size = validate_art_size(art_size)
        self.font_size = font_size
        self.font = get_font(font_size, font_path)
        self.side_font = get_font(max(1, int(font_size * SIDE_LINE_SCALE)), font_path)
        self._cover_cache: Dict[Tuple[int, Tuple[int, int]], Image.Image] = {}
        self._art_cache: Dict[Tuple[int, int], Image.Image] = {}

    @property
    def art_width(self) -> int:
        return int(self.width * self.art_size / 100)

    def compose(
        self,
        state: TimelineState,
        images: Mapping[str, Image.Image],
        album_art_url: Optional[str] = None,
    ) -> Image.Image:
        canvas = Image.new("RGB", (self.width, self.height), Colors.CANVAS)

        background = images.get(state.active_background.url)
        if background is not None:
            canvas.paste(self._cover(background), (0, 0))

        overlay = Image.new("RGB", canvas.size, (0, 0, 0))
        canvas = Image.blend(canvas, overlay, OVERLAY_OPACITY)

        art = images.get(album_art_url) if album_art_url else None
        if art is not None:
            self._draw_album_art(canvas, art)

        lyrics_width = self.width - self.art_width
        if lyrics_width > 0:
            layer = self._render_lyrics(state, lyrics_width)
            canvas.paste(layer, (self.art_width, 0), layer)

        return canvas

    def _cover(self, img: Image.Image) -> Image.Image:
        key = (id(img), (self.width, self.height))
        if key not in self._cover_cache:
            self._cover_cache[key] = cover_image(img, self.width, self.height)
        return self._cover_cache[key]

    def _draw_album_art(self, canvas: Image.Image, art: Image.Image) -> None:
        size = self.art_width - 2 * ART_MARGIN
        if size <= 0:
            return
        key = (id(art), size)
        if key not in self._art_cache:
            self._art_cache[key] = cover_image(art, size, size)
        canvas.paste(self._art_cache[key], (ART_MARGIN, (self.height - size) // 2))

    def _render_lyrics(self, state: TimelineState, width: int) -> Image.Image:
        layer = Image.new("RGBA", (width, self.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        cx, cy = width / 2.0, self.height / 2.0
        offset = self.font_size * LINE_OFFSET_FACTOR
        side_fill = Colors.SIDE_TEXT + (Colors.SIDE_TEXT_ALPHA,)

        if state.previous is not None:
            self._draw_text(draw, (cx, cy - offset), state.previous.text, self.side_font, side_fill)
        if state.next is not None:
            self._draw_text(draw, (cx, cy + offset), state.next.text, self.side_font, side_fill)
        if state.current is not None:
            self._draw_current(layer, draw, (cx, cy), state.current, state.progress or 0.0)

        # Tilt the block about its centre; PIL rotates counter-clockwise.
        return layer.rotate(
            -LYRICS_ROTATION_DEGREES,
            resample=Image.Resampling.BICUBIC,
            center=(cx, cy),
        )

    @staticmethod
    def _draw_text(draw, xy, text: str, font: FontType, fill) -> None:
        draw.text(xy, text, font=font, fill=fill, anchor="mm", align="center")

    def _draw_current(
        self,
        layer: Image.Image,
        draw: ImageDraw.ImageDraw,
        xy: Tuple[float, float],
        line: LyricLine,
        progress: float,
    ) -> None:
        self._draw_text(draw, xy, line.text, self.font, Colors.BASE_TEXT + (255,))

        left, _top, right, _bottom = draw.textbbox(
            xy, line.text, font=self.font, anchor="mm", align="center"
        )
        left = int(left)
        text_width = int(round(right - left))
        reveal = int(round(text_width * progress))
        if reveal <= 0:
            return

        mask = Image.new("L", layer.size, 0)
        ImageDraw.Draw(mask).text(
            xy, line.text, font=self.font, fill=255, anchor="mm", align="center"
        )
        mask = clip_mask(mask, left, reveal)

        row = np.zeros((layer.width, 3), dtype=np.uint8)
        lo, hi = max(left, 0), min(left + text_width, layer.width)
        if hi > lo:
            row[lo:hi] = gradient_row(text_width)[lo - left: hi - left]
        fill = np.broadcast_to(row, (layer.height, layer.width, 3))
        highlight = Image.fromarray(np.ascontiguousarray(fill)).convert("RGBA")
        layer.paste(highlight, (0, 0), mask)
