"""Test configuration and fixtures.

Provides reusable fixtures for:
- Lyric line sequences with gaps and silent intros
- In-memory image assets (data URIs and files)
- A fake encoder backend recording its working storage
"""

import base64
import os
import threading
from contextlib import contextmanager
from io import BytesIO

import pytest
from PIL import Image

from lyricsync.core.models import BackgroundAsset, BackgroundSpec, LyricLine
from lyricsync.exceptions import EncoderError, ExportBusyError


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Lyric fixtures
# =============================================================================


@pytest.fixture
def lines():
    """Three real lines with a gap between the second and third."""
    return [
        LyricLine("first", 2.0, 4.0),
        LyricLine("second", 4.0, 6.0),
        LyricLine("third", 8.0, 10.0),
    ]


@pytest.fixture
def lines_with_intro(lines):
    return [LyricLine("", 0.0, 2.0), *lines]


# =============================================================================
# Image fixtures
# =============================================================================


def make_image_bytes(color=(200, 40, 40), size=(32, 18), fmt="PNG") -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def make_data_uri(color=(200, 40, 40), size=(32, 18)) -> str:
    data = base64.b64encode(make_image_bytes(color, size)).decode("ascii")
    return f"data:image/png;base64,{data}"


@pytest.fixture
def red_uri():
    return make_data_uri((200, 40, 40))


@pytest.fixture
def blue_uri():
    return make_data_uri((40, 40, 200))


@pytest.fixture
def background_spec(red_uri, blue_uri):
    return BackgroundSpec.from_urls(
        red_uri, [BackgroundAsset(blue_uri, 0.0, 5.0)], duration=10.0
    )


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(b"ID3fake-audio")
    return path


# =============================================================================
# Encoder fixture
# =============================================================================


class FakeEncoder:
    """In-memory stand-in for MoviePyEncoder."""

    def __init__(self, fail_init=False, fail_run=False):
        self.storage = {}
        self.calls = []
        self.initialized = False
        self.fail_init = fail_init
        self.fail_run = fail_run
        self.init_count = 0
        self.run_args = None
        self.max_assets = 0
        self._lock = threading.Lock()

    @property
    def is_initialized(self):
        return self.initialized

    def initialize(self):
        self.calls.append("initialize")
        if self.fail_init:
            raise EncoderError("backend unavailable")
        if not self.initialized:
            self.init_count += 1
        self.initialized = True

    @contextmanager
    def session(self):
        if not self._lock.acquire(blocking=False):
            raise ExportBusyError("An export is already running on this encoder")
        try:
            yield self
        finally:
            self._lock.release()

    def write_asset(self, name, data):
        self.calls.append(("write", name))
        self.storage[name] = data
        self.max_assets = max(self.max_assets, len(self.storage))

    def read_asset(self, name):
        return self.storage[name]

    def unlink_asset(self, name):
        self.calls.append(("unlink", name))
        self.storage.pop(name, None)

    def list_assets(self):
        return sorted(self.storage)

    def run(self, frames, audio, output, frame_rate):
        self.calls.append("run")
        self.run_args = (list(frames), audio, output, frame_rate)
        if self.fail_run:
            raise EncoderError("ffmpeg exited with status 1")
        self.storage[output] = b"MP4" + str(len(frames)).encode()


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


@pytest.fixture
def make_encoder():
    """Factory for fake encoders configured to fail."""
    return FakeEncoder


# =============================================================================
# Background generation fixtures
# =============================================================================


class FakeVisualsClient:
    """Scripted stand-in for the Gemini visuals client."""

    def __init__(self, response, images=None, fail_image=False):
        self.response = response
        self.images = images
        self.fail_image = fail_image
        self.prompt_calls = []
        self.image_prompts = []

    def write_prompts(self, system_instruction, user_prompt):
        self.prompt_calls.append((system_instruction, user_prompt))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def generate_image(self, prompt):
        self.image_prompts.append(prompt)
        if self.fail_image:
            raise RuntimeError("quota exceeded")
        if self.images is not None:
            return self.images.pop(0)
        return b"jpeg-bytes"
