"""
Tests for reference image acquisition.

Network calls are replaced with a patched requests.get.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import png_bytes
from worksheet_studio.errors import ImageDecodeFailure, NetworkAcquisitionFailure
from worksheet_studio.synthesis.acquisition import ReferenceImage, fetch_image, load_image_file


def _response(content=b"", content_type="image/png", status_error=None):
    response = MagicMock()
    response.content = content
    response.headers = {"Content-Type": content_type}
    response.raise_for_status.side_effect = status_error
    return response


class TestFetchImage:

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_fetches_image(self, mock_get):
        # Arrange
        mock_get.return_value = _response(png_bytes((10, 10)), "image/png; charset=binary")

        # Act
        reference = fetch_image("https://example.com/a.png", timeout=3.0)

        # Assert
        assert reference.mime_type == "image/png"
        assert reference.data == png_bytes((10, 10))
        args, kwargs = mock_get.call_args
        assert args == ("https://example.com/a.png",)
        assert kwargs["timeout"] == 3.0

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(NetworkAcquisitionFailure, match="refused"):
            fetch_image("https://example.com/a.png")

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_http_error(self, mock_get):
        mock_get.return_value = _response(status_error=requests.exceptions.HTTPError("403 Forbidden"))
        with pytest.raises(NetworkAcquisitionFailure):
            fetch_image("https://example.com/a.png")

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_non_image_content_type(self, mock_get):
        mock_get.return_value = _response(b"<html></html>", "text/html")
        with pytest.raises(NetworkAcquisitionFailure, match="text/html"):
            fetch_image("https://example.com/page")

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_undecodable_body(self, mock_get):
        mock_get.return_value = _response(b"not really a png")
        with pytest.raises(NetworkAcquisitionFailure):
            fetch_image("https://example.com/a.png")

    @patch("worksheet_studio.synthesis.acquisition.fetch.requests.get")
    def test_non_http_url_never_requested(self, mock_get):
        with pytest.raises(NetworkAcquisitionFailure):
            fetch_image("file:///etc/passwd")
        mock_get.assert_not_called()

    def test_banner_text_for_network_failure(self):
        error = NetworkAcquisitionFailure("blocked")
        assert "save the image to your device" in error.banner_text()


class TestLoadImageFile:

    def test_loads_png(self, sample_image):
        reference = load_image_file(sample_image)
        assert reference.mime_type == "image/png"
        assert reference.data == sample_image.read_bytes()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageDecodeFailure):
            load_image_file(tmp_path / "missing.png")

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "notes.png"
        path.write_text("hello")
        with pytest.raises(ImageDecodeFailure):
            load_image_file(path)


def test_reference_image_data_url():
    reference = ReferenceImage(data=b"abc", mime_type="image/jpeg")
    assert reference.base64 == "YWJj"
    assert reference.data_url == "data:image/jpeg;base64,YWJj"


def test_empty_reference_rejected():
    with pytest.raises(ValueError):
        ReferenceImage(data=b"", mime_type="image/png")
