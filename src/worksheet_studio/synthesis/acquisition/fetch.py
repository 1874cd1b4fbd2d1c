"""
Module: synthesis.acquisition.fetch

Purpose:
    Acquire reference images from a URL or a local file and hand back
    raw bytes with their MIME type. Content is checked by decoding it,
    so a non-image never reaches the generator.

Key Functions:
    - fetch_image(): HTTP(S) download via requests
    - load_image_file(): Read an image file from disk

Key Classes:
    - ReferenceImage: Bytes plus MIME type

Dependencies:
    - requests: HTTP
    - synthesis.images.decoder: Validation by decoding

Used By:
    - synthesis.controller: Reference loading
    - worksheet_studio.cli: --source
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path

import requests

from worksheet_studio.errors import ImageDecodeFailure, NetworkAcquisitionFailure
from worksheet_studio.synthesis.images import decode_image, is_remote_url

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 15.0
USER_AGENT = "worksheet-studio"


@dataclass(frozen=True)
class ReferenceImage:
    """
    Acquired image (immutable).

    Attributes:
        data: Raw encoded bytes
        mime_type: e.g. "image/png"
    """
    data: bytes
    mime_type: str

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("Reference image is empty")

    @property
    def base64(self) -> str:
        """Bare base64 text, the form generators accept."""
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"


def fetch_image(url: str, *, timeout: float = DEFAULT_TIMEOUT_S) -> ReferenceImage:
    """
    Download an image.

    Args:
        url: http(s) URL
        timeout: Connect and read timeout in seconds

    Returns:
        ReferenceImage with the response body

    Raises:
        NetworkAcquisitionFailure: Non-HTTP URL, connection error,
            non-2xx status, non-image content type or undecodable body
    """
    if not is_remote_url(url):
        raise NetworkAcquisitionFailure(f"Not an http(s) URL: {url!r}")

    logger.info(f"Fetching reference image from {url}")
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise NetworkAcquisitionFailure(f"Could not fetch {url}: {e}") from e

    content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
    if content_type and not content_type.startswith("image/"):
        raise NetworkAcquisitionFailure(f"{url} returned {content_type}, not an image")

    data = response.content
    try:
        image = decode_image(data)
    except ImageDecodeFailure as e:
        raise NetworkAcquisitionFailure(f"{url} did not return a readable image: {e}") from e

    mime_type = content_type or _mime_for_format(image.format)
    logger.debug(f"Fetched {len(data)} bytes ({mime_type})")
    return ReferenceImage(data=data, mime_type=mime_type)


def load_image_file(path: Path) -> ReferenceImage:
    """
    Read an image file.

    Raises:
        ImageDecodeFailure: Missing file or not an image
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ImageDecodeFailure(f"Could not read {path}: {e}") from e

    image = decode_image(data)
    guessed, _ = mimetypes.guess_type(path.name)
    mime_type = guessed if guessed and guessed.startswith("image/") else _mime_for_format(image.format)
    logger.debug(f"Loaded {path} ({len(data)} bytes, {mime_type})")
    return ReferenceImage(data=data, mime_type=mime_type)


def _mime_for_format(fmt: str | None) -> str:
    return f"image/{(fmt or 'png').lower()}"
