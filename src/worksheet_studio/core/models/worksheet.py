"""
Module: worksheet

Purpose:
    Provides WorksheetData - the immutable snapshot of one generated
    worksheet - and GeneratedWorksheetImage for the full-page image mode.

Key Functions:
    - WorksheetData.find_section(section_id)
    - WorksheetData.with_section_image(section_id, url): New snapshot
      with one section structurally replaced

Dependencies:
    - dataclasses (std)
    - .sections.WorksheetSection

Used By:
    - core.schemas.validator
    - synthesis.layout, synthesis.output, synthesis.controller
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .sections import WorksheetSection


@dataclass(frozen=True, slots=True)
class WorksheetData:
    """
    Structured worksheet (immutable).

    Created once per successful generation. The only change ever made is
    attaching a regenerated illustration, which produces a new instance.

    Attributes:
        title: Worksheet title
        sections: Ordered sections
        subject: Optional subject tag
        grade_level: Optional grade tag
        instructions: Optional instructions paragraph
    """

    title: str
    sections: Tuple[WorksheetSection, ...] = ()
    subject: Optional[str] = None
    grade_level: Optional[str] = None
    instructions: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate section ids are unique."""
        seen = set()
        for section in self.sections:
            if section.id in seen:
                raise ValueError(f"Duplicate section id: {section.id!r}")
            seen.add(section.id)

    def find_section(self, section_id: str) -> Optional[WorksheetSection]:
        """Return the section with this id, or None."""
        return next((s for s in self.sections if s.id == section_id), None)

    def with_section_image(self, section_id: str, url: str) -> WorksheetData:
        """
        Attach a regenerated illustration to one section.

        Args:
            section_id: Section to update
            url: Data URL or URL of the new illustration

        Returns:
            New WorksheetData; all other sections are shared unchanged

        Raises:
            KeyError: If no section has this id
        """
        if self.find_section(section_id) is None:
            raise KeyError(f"Section not found: {section_id}")
        sections = tuple(
            s.with_generated_image(url) if s.id == section_id else s
            for s in self.sections
        )
        return replace(self, sections=sections)


@dataclass(frozen=True, slots=True)
class GeneratedWorksheetImage:
    """
    A worksheet generated as a single full-page picture.

    Attributes:
        image_url: Data URL (or URL) of the generated page
        prompt: Prompt the page was generated from
    """

    image_url: str
    prompt: str = ""
