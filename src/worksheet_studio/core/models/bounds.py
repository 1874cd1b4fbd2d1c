"""
Module: bounds

Purpose:
    Provides the NormalizedBox dataclass - a crop region of a reference
    image expressed as [ymin, xmin, ymax, xmax] on a 0-1000 scale, the
    format the AI generator uses for bounding boxes.

Key Functions:
    - NormalizedBox.from_components(values): Build from a raw sequence,
      returning None when any component is undefined
    - NormalizedBox.clamped(): Copy with components limited to [0, 1000]
    - NormalizedBox.to_pixel_rect(width, height): Map onto pixel space

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - core.models.sections.WorksheetSection
    - synthesis.images.cropper
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional, Sequence

#: Upper bound of the normalized coordinate space.
NORMALIZED_SCALE = 1000


def _as_component(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it is undefined."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True, slots=True)
class NormalizedBox:
    """
    Normalized crop region (immutable).

    Components are kept exactly as received; out-of-range values are only
    clamped when the box is mapped onto an image.

    Attributes:
        ymin: Top edge on the 0-1000 scale
        xmin: Left edge on the 0-1000 scale
        ymax: Bottom edge on the 0-1000 scale
        xmax: Right edge on the 0-1000 scale

    Example:
        >>> box = NormalizedBox(100, 200, 500, 800)
        >>> box.to_pixel_rect(1000, 2000)
        (200, 200, 600, 800)
    """

    ymin: float
    xmin: float
    ymax: float
    xmax: float

    @classmethod
    def from_components(cls, values: Optional[Sequence[Any]]) -> Optional[NormalizedBox]:
        """
        Build a box from a raw [ymin, xmin, ymax, xmax] sequence.

        Args:
            values: Sequence from the AI response (may be None)

        Returns:
            NormalizedBox, or None if the sequence does not hold exactly
            four defined numeric components
        """
        if values is None or len(values) != 4:
            return None
        components = [_as_component(v) for v in values]
        if any(c is None for c in components):
            return None
        return cls(*components)

    def clamped(self) -> NormalizedBox:
        """Copy with every component limited to [0, NORMALIZED_SCALE]."""
        def clamp(v: float) -> float:
            return min(max(v, 0.0), float(NORMALIZED_SCALE))
        return NormalizedBox(
            clamp(self.ymin), clamp(self.xmin), clamp(self.ymax), clamp(self.xmax)
        )

    def to_pixel_rect(self, width: int, height: int) -> tuple[int, int, int, int]:
        """
        Map this box onto an image of the given size.

        Args:
            width: Natural pixel width of the source image
            height: Natural pixel height of the source image

        Returns:
            (left, top, crop_width, crop_height) in whole pixels. The crop
            size may be zero or negative for degenerate boxes.
        """
        sx = self.xmin / NORMALIZED_SCALE * width
        sy = self.ymin / NORMALIZED_SCALE * height
        s_width = (self.xmax - self.xmin) / NORMALIZED_SCALE * width
        s_height = (self.ymax - self.ymin) / NORMALIZED_SCALE * height
        return int(sx), int(sy), int(s_width), int(s_height)

    def as_list(self) -> list[float]:
        """Components in wire order [ymin, xmin, ymax, xmax]."""
        return [self.ymin, self.xmin, self.ymax, self.xmax]

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"NormalizedBox({self.ymin:g}, {self.xmin:g}, {self.ymax:g}, {self.xmax:g})"
