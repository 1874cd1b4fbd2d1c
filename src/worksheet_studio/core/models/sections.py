"""
Module: sections

Purpose:
    Provides the WorksheetSection dataclass and the SectionType tag.
    A section is one unit of worksheet content; its payload shape is
    fixed by its type (see core.models.content).

Key Functions:
    - is_image_section(section): The image-section rule (explicit type
      OR a four-element bounding box)
    - WorksheetSection.crop_box: Parsed NormalizedBox, if usable

Dependencies:
    - dataclasses (std)
    - .bounds.NormalizedBox
    - .content

Used By:
    - core.models.worksheet.WorksheetData
    - core.schemas.validator
    - synthesis.layout.sections
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Tuple

from .bounds import NormalizedBox
from .content import SectionContent, TextContent


class SectionType(str, Enum):
    """Declared or inferred section type."""
    TEXT = "text"
    MATCHING = "matching"
    FILL_BLANK = "fill-blank"
    DRAWING = "drawing"
    MATH = "math"
    IMAGE = "image"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> Optional[SectionType]:
        """Return the matching member, or None for unknown tags."""
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


@dataclass(frozen=True, slots=True)
class WorksheetSection:
    """
    One worksheet section (immutable).

    Attributes:
        id: Identifier, unique within a worksheet
        type: Resolved section type
        content: Payload matching the type
        title: Optional heading
        bounding_box: Raw [ymin, xmin, ymax, xmax] components as received
            (0-1000 scale, any component may be None)
        image_prompt: Prompt used to regenerate the illustration
        generated_image_url: Data URL or URL of a regenerated illustration
        declared_type: Raw type tag from the response, if any

    Example:
        >>> s = WorksheetSection("s1", SectionType.TEXT, TextContent("Hi"))
        >>> is_image_section(s)
        False
    """

    id: str
    type: SectionType
    content: SectionContent = TextContent()
    title: Optional[str] = None
    bounding_box: Optional[Tuple[Any, ...]] = None
    image_prompt: Optional[str] = None
    generated_image_url: Optional[str] = None
    declared_type: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate section on construction."""
        if not self.id:
            raise ValueError("Section id must be non-empty")

    @property
    def crop_box(self) -> Optional[NormalizedBox]:
        """Usable crop box, or None when missing or incomplete."""
        return NormalizedBox.from_components(self.bounding_box)

    def with_generated_image(self, url: str) -> WorksheetSection:
        """Copy of this section carrying a regenerated illustration."""
        return replace(self, generated_image_url=url)


def is_image_section(section: WorksheetSection) -> bool:
    """
    Check whether a section renders as an illustration.

    True if the type is IMAGE or the bounding box has exactly four
    elements, which lets a response omit the type but still supply a
    crop region.
    """
    if section.type is SectionType.IMAGE:
        return True
    return section.bounding_box is not None and len(section.bounding_box) == 4
