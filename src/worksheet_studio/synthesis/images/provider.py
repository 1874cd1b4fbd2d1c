"""
Module: synthesis.images.provider

Purpose:
    Abstract interface for getting illustration crops out of the
    reference image the worksheet was generated from.

Key Classes:
    - ImageProvider: Abstract base class for crop access
    - SourceImageProvider: Decodes the reference once, crops on demand
    - ImageDecodeFailure: Re-exported decode error

Dependencies:
    - PIL: Image manipulation
    - worksheet_studio.core.models.bounds: NormalizedBox

Used By:
    - synthesis.layout.sections: Image sections
    - synthesis.controller: One provider per reference image
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from PIL import Image

from worksheet_studio.core.models import NormalizedBox
from worksheet_studio.errors import ImageDecodeFailure

from .cropper import BoxLike, crop_normalized
from .decoder import ImageSource, decode_image

logger = logging.getLogger(__name__)


class ImageProvider(ABC):
    """
    Abstract interface for cropping from a reference image.

    Implementations handle where the reference comes from and when it
    is decoded.
    """

    @abstractmethod
    def get_crop(self, box: BoxLike) -> Optional[Image.Image]:
        """
        Crop a normalized region.

        Args:
            box: NormalizedBox or raw [ymin, xmin, ymax, xmax]

        Returns:
            Cropped image, or None if the box is unusable

        Raises:
            ImageDecodeFailure: If the reference image cannot be decoded
        """


class SourceImageProvider(ImageProvider):
    """
    Provider that crops from a reference image given as bytes or base64.

    The reference is decoded lazily on first use and crops are cached
    per box, so repeated renders of the same worksheet reuse them. A new
    reference means a new provider.

    Example:
        >>> provider = SourceImageProvider(png_bytes)
        >>> crop = provider.get_crop([100, 100, 500, 900])
    """

    def __init__(self, source: ImageSource) -> None:
        """
        Initialize provider.

        Args:
            source: Raw bytes, data URL or base64 text of the reference
        """
        self._source = source
        self._image: Optional[Image.Image] = None
        self._failure: Optional[ImageDecodeFailure] = None
        self._crops: Dict[NormalizedBox, Image.Image] = {}

    @classmethod
    def from_image(cls, image: Image.Image) -> SourceImageProvider:
        """Create a provider around an already decoded image."""
        provider = cls(b"")
        provider._image = image
        return provider

    def get_crop(self, box: BoxLike) -> Optional[Image.Image]:
        """Get cropped region for a box (cached)."""
        if not isinstance(box, NormalizedBox):
            box = NormalizedBox.from_components(box)
        if box is None:
            return None

        cached = self._crops.get(box)
        if cached is None:
            cached = crop_normalized(self._get_image(), box)
            if cached is None:
                return None
            self._crops[box] = cached
        # Callers get their own copy so the cache stays pristine
        return cached.copy()

    def _get_image(self) -> Image.Image:
        """Lazy decode of the reference image."""
        if self._failure is not None:
            raise self._failure
        if self._image is None:
            try:
                self._image = decode_image(self._source)
            except ImageDecodeFailure as e:
                logger.warning(f"Reference image could not be decoded: {e}")
                self._failure = e
                raise
        return self._image

    def close(self) -> None:
        """Release the decoded image and cached crops."""
        if self._image is not None:
            self._image.close()
            self._image = None
        self._crops.clear()

    def __enter__(self) -> "SourceImageProvider":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit - close resources."""
        self.close()
