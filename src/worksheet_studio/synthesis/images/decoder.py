"""
Module: synthesis.images.decoder

Purpose:
    Decode raster sources into PIL images. Sources arrive as raw bytes
    (file uploads, URL fetches), data URLs (generated illustrations) or
    bare base64 strings (the form the generator returns images in).

Key Functions:
    - decode_image(): Bytes / data URL / base64 -> PIL Image
    - encode_data_url(): PIL Image -> data URL
    - is_remote_url(): True for http(s) URLs

Dependencies:
    - PIL: Image decoding

Used By:
    - synthesis.images.provider
    - synthesis.output (resolving generated illustrations and logos)
    - synthesis.acquisition.fetch
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Union

from PIL import Image, UnidentifiedImageError

from worksheet_studio.errors import ImageDecodeFailure

logger = logging.getLogger(__name__)

ImageSource = Union[bytes, str]

_DATA_URL_PREFIX = "data:"


def is_remote_url(value: str) -> bool:
    """Check for an http(s) URL."""
    lowered = value.strip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def decode_image(source: ImageSource) -> Image.Image:
    """
    Decode an image source into a fully loaded PIL image.

    Strings without a ``data:`` prefix are treated as bare base64 PNG
    data.

    Args:
        source: Raw bytes, data URL or base64 text

    Returns:
        Loaded PIL Image (pixel data read, file handle released)

    Raises:
        ImageDecodeFailure: If the source is empty, not base64, or not a
            recognised raster format
    """
    if isinstance(source, str):
        data = _decode_text_source(source)
    else:
        data = bytes(source)

    if not data:
        raise ImageDecodeFailure("Image source is empty")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeFailure(f"Could not decode image ({len(data)} bytes): {e}") from e

    logger.debug(f"Decoded {image.format} image {image.size[0]}x{image.size[1]} ({image.mode})")
    return image


def encode_data_url(image: Image.Image, fmt: str = "PNG") -> str:
    """
    Encode an image as a data URL.

    Example:
        >>> encode_data_url(Image.new("RGB", (1, 1))).startswith("data:image/png;base64,")
        True
    """
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    payload = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/{fmt.lower()};base64,{payload}"


def _decode_text_source(source: str) -> bytes:
    """Extract bytes from a data URL or bare base64 string."""
    text = source.strip()
    if text.startswith(_DATA_URL_PREFIX):
        header, sep, text = text.partition(",")
        if not sep:
            raise ImageDecodeFailure("Data URL has no payload")
        if ";base64" not in header:
            raise ImageDecodeFailure(f"Unsupported data URL encoding: {header}")
    # Line-wrapped base64 is common in pasted payloads
    text = "".join(text.split())
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeFailure(f"Image data is not valid base64: {e}") from e
