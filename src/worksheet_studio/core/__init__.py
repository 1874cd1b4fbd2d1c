"""
Worksheet Studio Core Package

Shared data models, response validation and derived values. These are
the single source of truth for every output target.

**DESIGN NOTES:**

1. **Immutable Data Models**
   Frozen dataclasses; attaching a regenerated image builds a new snapshot.

2. **Calculated Values (Never Stored)**
   Total marks and answer-line counts are always derived from the model
   through `core.derived`, so the view and the exported document cannot
   disagree.

3. **Typed Section Payloads**
   Each section type has exactly one payload shape (`core.models.content`).
"""

from .models import (
    BrandingOptions,
    ExamData,
    ExamQuestion,
    GeneratedWorksheetImage,
    NormalizedBox,
    SectionType,
    WorksheetData,
    WorksheetSection,
    is_image_section,
)
from .derived import answer_line_count, total_marks
from .schemas import parse_exam, parse_response, parse_worksheet

__all__ = [
    "BrandingOptions",
    "ExamData",
    "ExamQuestion",
    "GeneratedWorksheetImage",
    "NormalizedBox",
    "SectionType",
    "WorksheetData",
    "WorksheetSection",
    "is_image_section",
    "answer_line_count",
    "total_marks",
    "parse_exam",
    "parse_response",
    "parse_worksheet",
]
