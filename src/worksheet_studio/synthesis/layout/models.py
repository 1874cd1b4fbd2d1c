"""
Module: synthesis.layout.models

Purpose:
    Data models for document layout.
    Immutable dataclasses describing what to draw (blocks), where to draw
    it (placements and pages) and the finished view.

Key Classes:
    - ImageBlock, MatchingBlock, FillBlankBlock, DrawingBlock, MathBlock,
      TextBlock: Per-section-type layout descriptors
    - SectionLayout: Section title plus its block
    - WorksheetHeader, ExamHeader, InstructionsLayout, QuestionLayout,
      FullPageImageLayout: Document-level items
    - TextOp, LineOp, RectOp, ImageOp, Composition: Draw operations
    - Placement, PagePlan: Items positioned on pages
    - DocumentView: Complete view consumed by the renderers

Dependencies:
    - PIL: Image type
    - dataclasses (std)

Used By:
    - synthesis.layout.sections / view: Create items
    - synthesis.layout.compose: Creates Compositions
    - synthesis.layout.paginator: Creates PagePlans
    - synthesis.output: Draws DocumentViews
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Literal, Optional, Tuple, Union

from PIL import Image

from .config import LayoutConfig


class RenderTarget(str, Enum):
    """Where a view is being drawn."""
    SCREEN = "screen"  # Interactive preview; footer pinned to the page bottom
    PRINT = "print"    # Paginated print output; footer flows after content

    def __str__(self) -> str:
        return self.value


class DocumentKind(str, Enum):
    """Kind of document a view was synthesized from."""
    WORKSHEET = "worksheet"
    WORKSHEET_IMAGE = "worksheet-image"
    EXAM = "exam"

    def __str__(self) -> str:
        return self.value


# ─────────────────────────────────────────────────────────────────────────────
# Section blocks
# ─────────────────────────────────────────────────────────────────────────────

ImageSourceKind = Literal["generated", "cropped", "placeholder"]


@dataclass(frozen=True)
class RegenerateControl:
    """
    Regenerate affordance for an illustration.

    Attributes:
        section_id: Section whose image would be regenerated
        prompt: Prompt sent to the generator
        pending: True while a request is in flight (bounded by timeout)
        callback: Regeneration hook wired by the orchestrator
    """
    section_id: str
    prompt: str
    pending: bool = False
    callback: Optional[Callable[[str, str], Any]] = field(default=None, compare=False, repr=False)

    def trigger(self) -> Any:
        """Fire the regeneration request; the result is not awaited here."""
        if self.callback is None:
            return None
        return self.callback(self.section_id, self.prompt)


@dataclass(frozen=True)
class ImageBlock:
    """
    Illustration section.

    Attributes:
        source: Where the picture came from; "placeholder" when nothing
            usable was available
        image: Decoded picture (None for placeholders)
        image_url: Generated image URL, when that was the source
        caption: Text shown above the picture
        prompt_note: Text shown below the picture
        regenerate: Regenerate control, when wired
        error: Why a placeholder was used, if a decode failed
    """
    source: ImageSourceKind
    image: Optional[Image.Image] = None
    image_url: Optional[str] = None
    caption: Optional[str] = None
    prompt_note: Optional[str] = None
    regenerate: Optional[RegenerateControl] = None
    error: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.source == "placeholder"


@dataclass(frozen=True)
class MatchingBlock:
    """Two columns of equal length, both in input order."""
    left: Tuple[str, ...]
    right: Tuple[str, ...]

    @property
    def row_count(self) -> int:
        return len(self.left)


@dataclass(frozen=True)
class FillBlankBlock:
    """
    Sentence fragments interleaved with blanks.

    Attributes:
        fragments: Text around the blanks (blank_count + 1 items)
        blank_count: Number of blank-line placeholders
    """
    fragments: Tuple[str, ...]
    blank_count: int


@dataclass(frozen=True)
class DrawingBlock:
    """Fixed-size blank canvas with its prompt."""
    prompt: str
    height: int


@dataclass(frozen=True)
class MathCell:
    """One problem with an empty answer box."""
    question: str


@dataclass(frozen=True)
class MathBlock:
    """Grid of math problem cells."""
    cells: Tuple[MathCell, ...]
    columns: int = 2


@dataclass(frozen=True)
class TextBlock:
    """Plain paragraph."""
    text: str


SectionBlock = Union[ImageBlock, MatchingBlock, FillBlankBlock, DrawingBlock, MathBlock, TextBlock]


@dataclass(frozen=True)
class SectionLayout:
    """
    Layout of one worksheet section.

    Attributes:
        section_id: Stable key across re-renders
        title: Optional heading
        block: Type-specific descriptor
    """
    section_id: str
    title: Optional[str]
    block: SectionBlock


# ─────────────────────────────────────────────────────────────────────────────
# Document items
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WorksheetHeader:
    """Worksheet title block with branding; image-only pages omit the title and name field."""
    title: Optional[str] = None
    header_text: Optional[str] = None
    subject: Optional[str] = None
    grade_level: Optional[str] = None
    logo: Optional[Image.Image] = None
    name_label: Optional[str] = "Name"


@dataclass(frozen=True)
class ExamHeader:
    """
    Exam title block.

    Attributes:
        title: Branding override or institution, uppercased
        subtitle: "<subject> Examination"
        grade: Grade line value
        duration: Duration line value
        date: Date or blank-line placeholder
        total_marks: Sum of question marks, computed once
        logo: Optional branding logo
    """
    title: str
    subtitle: str
    grade: str
    duration: str
    date: str
    total_marks: int
    logo: Optional[Image.Image] = None


@dataclass(frozen=True)
class InstructionsLayout:
    """Instructions paragraph (worksheet) or bulleted list (exam)."""
    lines: Tuple[str, ...]
    heading: Optional[str] = None
    bulleted: bool = False


@dataclass(frozen=True)
class QuestionLayout:
    """
    One exam question with its answer space.

    Attributes:
        question_id: Stable key
        label: Display label such as "1."
        text_lines: Question text split on literal line breaks
        marks: Mark value
        marks_label: Annotation such as "[3]"
        answer_lines: Blank answer lines, from answer_line_count(marks)
    """
    question_id: str
    label: str
    text_lines: Tuple[str, ...]
    marks: int
    marks_label: str
    answer_lines: int


@dataclass(frozen=True)
class FullPageImageLayout:
    """A worksheet generated as one picture."""
    image: Optional[Image.Image]
    image_url: str
    error: Optional[str] = None


LayoutItem = Union[
    WorksheetHeader,
    ExamHeader,
    InstructionsLayout,
    SectionLayout,
    QuestionLayout,
    FullPageImageLayout,
]


# ─────────────────────────────────────────────────────────────────────────────
# Draw operations
# ─────────────────────────────────────────────────────────────────────────────

Color = Tuple[int, int, int]
BLACK: Color = (0, 0, 0)
GREY: Color = (110, 110, 110)
LIGHT_GREY: Color = (200, 200, 200)

TextAlign = Literal["left", "center", "right"]


@dataclass(frozen=True)
class Typeface:
    """Font names for one family (see synthesis.layout.fonts)."""
    regular: str
    bold: str
    italic: str


SANS = Typeface("StudioSans", "StudioSans-Bold", "StudioSans-Italic")
SERIF = Typeface("StudioSerif", "StudioSerif-Bold", "StudioSerif-Italic")


@dataclass(frozen=True)
class TextOp:
    """
    One run of text.

    Attributes:
        x: Anchor X (left edge, centre or right edge per `align`)
        y: Baseline Y
        text: Text to draw (never wrapped by the renderer)
        font: Layout font name, e.g. "StudioSans-Bold"
        size: Font size in pixels
        align: Horizontal anchoring
        color: RGB fill
        screen_only: Drawn on screen, omitted from print
    """
    x: int
    y: int
    text: str
    font: str
    size: int
    align: TextAlign = "left"
    color: Color = BLACK
    screen_only: bool = False


@dataclass(frozen=True)
class LineOp:
    """Straight stroke from (x1, y1) to (x2, y2)."""
    x1: int
    y1: int
    x2: int
    y2: int
    width: int = 2
    color: Color = BLACK
    dashed: bool = False


@dataclass(frozen=True)
class RectOp:
    """Rectangle outline, optionally filled."""
    x: int
    y: int
    width: int
    height: int
    stroke: int = 2
    color: Color = BLACK
    fill: Optional[Color] = None
    dashed: bool = False


@dataclass(frozen=True)
class ImageOp:
    """Picture scaled into the (x, y, width, height) box."""
    x: int
    y: int
    width: int
    height: int
    image: Image.Image = field(compare=False, repr=False)


DrawOp = Union[TextOp, LineOp, RectOp, ImageOp]


@dataclass(frozen=True)
class Composition:
    """
    Draw operations for one item, relative to its top-left corner.

    Attributes:
        ops: Operations in painting order
        height: Vertical space the item occupies
    """
    ops: Tuple[DrawOp, ...]
    height: int


# ─────────────────────────────────────────────────────────────────────────────
# Pages
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Placement:
    """
    An item positioned on a page.

    Attributes:
        item: The layout item
        top: Y offset from page top (pixels)
        height: Measured height (pixels)
        ops: Draw operations relative to (margin_left, top)

    Example:
        >>> Placement(item, top=100, height=200).bottom
        300
    """
    item: LayoutItem
    top: int
    height: int
    ops: Tuple[DrawOp, ...] = field(default=(), compare=False, repr=False)

    @property
    def bottom(self) -> int:
        """Bottom Y coordinate (top + height)."""
        return self.top + self.height


@dataclass(frozen=True)
class PagePlan:
    """
    Complete layout plan for a single page.

    Attributes:
        index: Page number (0-indexed)
        placements: Items on this page in drawing order
        height_used: Total vertical space used below the top margin
        footer_text: Footer for this page
    """
    index: int
    placements: Tuple[Placement, ...]
    height_used: int
    footer_text: str = ""

    @property
    def placement_count(self) -> int:
        """Number of items on this page."""
        return len(self.placements)

    @property
    def is_empty(self) -> bool:
        """Check if page has no placements."""
        return len(self.placements) == 0


@dataclass(frozen=True)
class DocumentView:
    """
    Renderable view shared by the screen and print targets.

    Attributes:
        kind: Document kind
        items: Every layout item in reading order
        pages: Items arranged onto pages
        total_marks: Exam total (None for worksheets)
        warnings: Layout warnings (e.g. an item taller than a page)
        typeface: Font family the view was composed with
        config: Page geometry the view was composed for
    """
    kind: DocumentKind
    items: Tuple[LayoutItem, ...]
    pages: Tuple[PagePlan, ...]
    total_marks: Optional[int] = None
    warnings: Tuple[str, ...] = ()
    typeface: Typeface = SANS
    config: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def page_count(self) -> int:
        """Number of pages in the view."""
        return len(self.pages)

    @property
    def sections(self) -> Tuple[SectionLayout, ...]:
        """Section layouts in order."""
        return tuple(i for i in self.items if isinstance(i, SectionLayout))

    @property
    def questions(self) -> Tuple[QuestionLayout, ...]:
        """Question layouts in order."""
        return tuple(i for i in self.items if isinstance(i, QuestionLayout))

    @property
    def answer_line_counts(self) -> Tuple[int, ...]:
        """Answer lines reserved per question, in order."""
        return tuple(q.answer_lines for q in self.questions)
