"""
Module: synthesis.layout

Purpose:
    Section layout, composition and pagination. Produces the DocumentView
    that the screen and print renderers draw.

Key Functions:
    - synthesize_view(): Data + branding -> DocumentView
    - layout_section(): One section -> SectionLayout
    - paginate(): Composed items -> pages

Key Classes:
    - LayoutConfig: Page geometry and type sizes
    - DocumentView, PagePlan, Placement: Layout results
    - RegenerationTracker: Time-bounded pending markers

Dependencies:
    - reportlab, PIL.ImageFont: Font metrics (synthesis.layout.fonts)
    - PIL: Image sizes

Used By:
    - synthesis.output: Renderers
    - synthesis.controller
"""

from .config import LayoutConfig
from .models import (
    DocumentKind,
    DocumentView,
    RenderTarget,
    PagePlan,
    Placement,
    SectionLayout,
    ImageBlock,
    MatchingBlock,
    FillBlankBlock,
    DrawingBlock,
    MathBlock,
    MathCell,
    TextBlock,
    RegenerateControl,
    WorksheetHeader,
    ExamHeader,
    InstructionsLayout,
    QuestionLayout,
    FullPageImageLayout,
    Composition,
    TextOp,
    LineOp,
    RectOp,
    ImageOp,
    Typeface,
    SANS,
    SERIF,
)
from .regeneration import RegenerationTracker
from .sections import layout_section, layout_sections
from .compose import compose_item, compose_footer, wrap_text, column_letter
from .fonts import font_path, load_font, text_width
from .paginator import paginate, footer_top, PaginationResult
from .view import synthesize_view, DocumentData

__all__ = [
    "LayoutConfig",
    "DocumentKind",
    "DocumentView",
    "RenderTarget",
    "PagePlan",
    "Placement",
    "SectionLayout",
    "ImageBlock",
    "MatchingBlock",
    "FillBlankBlock",
    "DrawingBlock",
    "MathBlock",
    "MathCell",
    "TextBlock",
    "RegenerateControl",
    "WorksheetHeader",
    "ExamHeader",
    "InstructionsLayout",
    "QuestionLayout",
    "FullPageImageLayout",
    "Composition",
    "TextOp",
    "LineOp",
    "RectOp",
    "ImageOp",
    "Typeface",
    "SANS",
    "SERIF",
    "RegenerationTracker",
    "layout_section",
    "layout_sections",
    "compose_item",
    "compose_footer",
    "wrap_text",
    "text_width",
    "font_path",
    "load_font",
    "column_letter",
    "paginate",
    "footer_top",
    "PaginationResult",
    "synthesize_view",
    "DocumentData",
]
