"""Tests for asset loading."""

from unittest.mock import Mock

import pytest
import requests

from lyricsync.config import DEFAULT_BACKGROUND_URL
from lyricsync.core.components.render.assets import AssetLoader, to_data_uri
from lyricsync.exceptions import AssetLoadError

from conftest import make_image_bytes


class TestReadBytes:
    def test_base64_data_uri(self):
        assert AssetLoader().read_bytes(to_data_uri(b"hello", "text/plain")) == b"hello"

    def test_plain_data_uri(self):
        assert AssetLoader().read_bytes("data:text/plain,hi") == b"hi"

    def test_malformed_data_uri(self):
        loader = AssetLoader()
        with pytest.raises(AssetLoadError):
            loader.read_bytes("data:image/png;base64")
        with pytest.raises(AssetLoadError):
            loader.read_bytes("data:image/png;base64,@@@")

    def test_local_path_and_file_url(self, tmp_path):
        path = tmp_path / "a.bin"
        path.write_bytes(b"abc")
        loader = AssetLoader()
        assert loader.read_bytes(str(path)) == b"abc"
        assert loader.read_bytes(f"file://{path}") == b"abc"

    def test_missing_file(self, tmp_path):
        with pytest.raises(AssetLoadError, match="Failed to read"):
            AssetLoader().read_bytes(str(tmp_path / "missing.jpg"))

    def test_http_uses_session(self):
        session = Mock()
        session.get.return_value = Mock(content=b"remote", raise_for_status=Mock())
        loader = AssetLoader(session=session, timeout=5)
        assert loader.read_bytes("https://example.com/bg.jpg") == b"remote"
        session.get.assert_called_once_with("https://example.com/bg.jpg", timeout=5)

    def test_http_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(AssetLoadError, match="refused"):
            AssetLoader(session=session).read_bytes("http://example.com/x.jpg")


class TestImages:
    def test_load_image_is_rgb(self, red_uri):
        img = AssetLoader().load_image(red_uri)
        assert img.mode == "RGB"
        assert img.getpixel((0, 0)) == (200, 40, 40)

    def test_not_an_image(self):
        with pytest.raises(AssetLoadError, match="Not a readable image"):
            AssetLoader().load_image(to_data_uri(b"plain text"))

    def test_preload_deduplicates(self, tmp_path, red_uri):
        path = tmp_path / "bg.jpg"
        path.write_bytes(make_image_bytes(fmt="JPEG"))
        images = AssetLoader().preload([red_uri, str(path), red_uri])
        assert list(images) == [red_uri, str(path)]

    def test_preload_aborts_on_first_failure(self, red_uri, tmp_path):
        with pytest.raises(AssetLoadError):
            AssetLoader().preload([red_uri, str(tmp_path / "nope.png")])


@pytest.mark.network
def test_fetch_default_background_over_http():
    img = AssetLoader().load_image(DEFAULT_BACKGROUND_URL)
    assert img.mode == "RGB"
    assert img.width > 0 and img.height > 0
