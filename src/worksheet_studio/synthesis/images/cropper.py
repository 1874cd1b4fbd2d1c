"""
Module: synthesis.images.cropper

Purpose:
    Crop illustration regions out of a reference image using normalized
    [ymin, xmin, ymax, xmax] boxes on a 0-1000 scale.

Key Functions:
    - box_to_pixels(): Normalized box -> pixel rectangle (or None)
    - crop_normalized(): Crop one region (or None for "no crop")

Algorithm:
    With W, H the natural size of the source:
        sx = xmin/1000*W, sy = ymin/1000*H
        sw = (xmax-xmin)/1000*W, sh = (ymax-ymin)/1000*H
    A new sw x sh surface receives the source region at its origin.
    Missing or non-numeric components, and boxes that collapse to no
    pixels, short-circuit to None instead of producing an empty image.

Dependencies:
    - PIL: Image manipulation
    - worksheet_studio.core.models.bounds: NormalizedBox

Used By:
    - synthesis.images.provider: SourceImageProvider
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence, Tuple, Union

from PIL import Image

from worksheet_studio.core.models import NormalizedBox

logger = logging.getLogger(__name__)

BoxLike = Union[NormalizedBox, Sequence[Any], None]


def box_to_pixels(
    box: BoxLike,
    width: int,
    height: int,
) -> Optional[Tuple[int, int, int, int]]:
    """
    Map a normalized box onto an image of the given size.

    Components outside [0, 1000] are clamped first.

    Args:
        box: NormalizedBox or raw [ymin, xmin, ymax, xmax] sequence
        width: Source image width in pixels
        height: Source image height in pixels

    Returns:
        (left, top, crop_width, crop_height), or None when the box is
        undefined or covers no whole pixel

    Example:
        >>> box_to_pixels([0, 0, 500, 500], 200, 100)
        (0, 0, 100, 50)
        >>> box_to_pixels([0, None, 500, 500], 200, 100) is None
        True
    """
    if not isinstance(box, NormalizedBox):
        box = NormalizedBox.from_components(box)
    if box is None:
        return None

    left, top, crop_width, crop_height = box.clamped().to_pixel_rect(width, height)
    if crop_width <= 0 or crop_height <= 0:
        logger.debug(f"Box {box!r} covers no pixels on {width}x{height} image")
        return None
    return left, top, crop_width, crop_height


def crop_normalized(image: Image.Image, box: BoxLike) -> Optional[Image.Image]:
    """
    Crop a normalized region from an image.

    Pure function: identical (image, box) inputs give pixel-identical
    output.

    Args:
        image: Decoded source image
        box: NormalizedBox or raw [ymin, xmin, ymax, xmax] sequence

    Returns:
        New image of the crop size, or None when no crop is performed
    """
    rect = box_to_pixels(box, image.width, image.height)
    if rect is None:
        return None

    left, top, crop_width, crop_height = rect
    # crop() returns a new image, never a view of the source
    return image.crop((left, top, left + crop_width, top + crop_height))
