"""Load image and audio assets from data URIs, URLs or local paths."""

import base64
import binascii
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, Optional

import requests
from PIL import Image, UnidentifiedImageError

from ....config import ASSET_FETCH_TIMEOUT
from ....exceptions import AssetLoadError
from ....utils.logging import get_logger

logger = get_logger(__name__)


def _describe(url: str) -> str:
    if url.startswith("data:"):
        return url[: url.find(",") + 1] + "..." if "," in url else "data:..."
    return url


class AssetLoader:
    """Resolve opaque asset references into bytes and images."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = ASSET_FETCH_TIMEOUT,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout

    def read_bytes(self, url: str) -> bytes:
        """Fetch the raw bytes behind ``url``."""
        if url.startswith("data:"):
            return self._decode_data_uri(url)

        if url.startswith(("http://", "https://")):
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                raise AssetLoadError(f"Failed to fetch {url}: {e}") from e
            return response.content

        path = Path(url[len("file://"):] if url.startswith("file://") else url)
        try:
            return path.read_bytes()
        except OSError as e:
            raise AssetLoadError(f"Failed to read {path}: {e}") from e

    def load_image(self, url: str) -> Image.Image:
        """Decode ``url`` into an RGB image."""
        data = self.read_bytes(url)
        try:
            with Image.open(BytesIO(data)) as img:
                return img.convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise AssetLoadError(f"Not a readable image: {_describe(url)}") from e

    def preload(self, urls: Iterable[str]) -> Dict[str, Image.Image]:
        """Load every distinct image once; the first failure aborts."""
        images: Dict[str, Image.Image] = {}
        for url in urls:
            if url in images:
                continue
            logger.debug(f"Loading image {_describe(url)}")
            images[url] = self.load_image(url)
        logger.debug(f"Preloaded {len(images)} images")
        return images

    @staticmethod
    def _decode_data_uri(url: str) -> bytes:
        header, sep, payload = url.partition(",")
        if not sep:
            raise AssetLoadError("Malformed data URI")
        try:
            if header.endswith(";base64"):
                return base64.b64decode(payload, validate=True)
            return payload.encode("utf-8")
        except (binascii.Error, ValueError) as e:
            raise AssetLoadError(f"Malformed data URI: {e}") from e


def to_data_uri(data: bytes, mime: str = "image/jpeg") -> str:
    """Encode bytes as a base64 data URI."""
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
