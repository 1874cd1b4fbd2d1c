"""
Core Models Package

Immutable, validated data models that serve as the single source of truth.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation while a view or document is being synthesized
2. Safe to hand to background threads
3. Attaching a regenerated image produces a new snapshot instead of a
   half-updated section
"""

from .bounds import NormalizedBox, NORMALIZED_SCALE
from .content import (
    TextContent,
    MatchPair,
    MatchingContent,
    FillBlankContent,
    DrawingContent,
    MathProblem,
    MathContent,
    ImageContent,
    SectionContent,
)
from .sections import SectionType, WorksheetSection, is_image_section
from .worksheet import WorksheetData, GeneratedWorksheetImage
from .exam import ExamQuestion, ExamData
from .branding import BrandingOptions
from .search import SearchResult

__all__ = [
    "NormalizedBox",
    "NORMALIZED_SCALE",
    "TextContent",
    "MatchPair",
    "MatchingContent",
    "FillBlankContent",
    "DrawingContent",
    "MathProblem",
    "MathContent",
    "ImageContent",
    "SectionContent",
    "SectionType",
    "WorksheetSection",
    "is_image_section",
    "WorksheetData",
    "GeneratedWorksheetImage",
    "ExamQuestion",
    "ExamData",
    "BrandingOptions",
    "SearchResult",
]
