"""
Module: synthesis.layout.compose

Purpose:
    Compose layout items into draw operations. Every item is measured
    and drawn from the same Composition, so the paginator, the print
    renderer and the raster renderer agree on every position.

Key Functions:
    - compose_item(): LayoutItem -> Composition
    - compose_footer(): Footer text -> Composition
    - wrap_text(): Greedy word wrap using font metrics
    - text_width(): Width of a run of text in pixels

Algorithm:
    Coordinates are pixels relative to the item's top-left corner at
    the left margin. Text is wrapped with the metrics of the TrueType
    files both renderers draw with (synthesis.layout.fonts).

Dependencies:
    - synthesis.layout.fonts: Font metrics
    - PIL: Image sizes
    - synthesis.layout.models

Used By:
    - synthesis.layout.view: Measures items before pagination
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PIL import Image

from .config import LayoutConfig
from .fonts import text_width
from .models import (
    BLACK,
    GREY,
    LIGHT_GREY,
    Color,
    Composition,
    DrawingBlock,
    DrawOp,
    ExamHeader,
    FillBlankBlock,
    FullPageImageLayout,
    ImageBlock,
    ImageOp,
    InstructionsLayout,
    LayoutItem,
    LineOp,
    MatchingBlock,
    MathBlock,
    QuestionLayout,
    SANS,
    SERIF,
    RectOp,
    SectionLayout,
    TextAlign,
    TextBlock,
    TextOp,
    Typeface,
    WorksheetHeader,
)

logger = logging.getLogger(__name__)

# Largest factor a small illustration is enlarged by
MAX_UPSCALE = 2.0

BLANK_WIDTH = 220
QUESTION_LABEL_WIDTH = 90
QUESTION_MARKS_WIDTH = 150
BOX_PADDING = 16
PLACEHOLDER_FILL: Color = (245, 245, 245)


# ─────────────────────────────────────────────────────────────────────────────
# Text wrapping
# ─────────────────────────────────────────────────────────────────────────────

def wrap_text(text: str, font: str, size: int, max_width: float) -> Tuple[str, ...]:
    """
    Greedy word wrap.

    Literal line breaks always start a new line and blank lines are
    kept. Words wider than the line are broken between characters.

    Example:
        >>> wrap_text("a\\n\\nb", "StudioSans", 10, 500)
        ('a', '', 'b')
    """
    lines: List[str] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            for piece in _break_word(word, font, size, max_width):
                candidate = f"{current} {piece}" if current else piece
                if current and text_width(candidate, font, size) > max_width:
                    lines.append(current)
                    current = piece
                else:
                    current = candidate
        lines.append(current)
    return tuple(lines)


def _break_word(word: str, font: str, size: int, max_width: float) -> List[str]:
    if text_width(word, font, size) <= max_width:
        return [word]
    pieces = []
    current = ""
    for char in word:
        if current and text_width(current + char, font, size) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


# ─────────────────────────────────────────────────────────────────────────────
# Builder
# ─────────────────────────────────────────────────────────────────────────────

class _Builder:
    """Accumulates draw operations while tracking the running Y offset."""

    def __init__(self, config: LayoutConfig, face: Typeface) -> None:
        self.config = config
        self.face = face
        self.width = config.available_width
        self.ops: List[DrawOp] = []
        self.y = 0

    def gap(self, px: int) -> None:
        self.y += px

    def text(
        self,
        text: str,
        *,
        size: int,
        font: Optional[str] = None,
        align: TextAlign = "left",
        indent: int = 0,
        width: Optional[int] = None,
        color: Color = BLACK,
        screen_only: bool = False,
    ) -> int:
        """Wrap and emit text, advancing Y. Returns the number of lines."""
        font = font or self.face.regular
        width = width if width is not None else self.width - indent
        if align == "center":
            x = indent + width // 2
        elif align == "right":
            x = indent + width
        else:
            x = indent

        lines = wrap_text(text, font, size, width)
        line_height = self.config.line_height(size)
        for line in lines:
            if line:
                self.ops.append(TextOp(
                    x=x, y=self.y + size, text=line, font=font, size=size,
                    align=align, color=color, screen_only=screen_only,
                ))
            self.y += line_height
        return len(lines)

    def rule(self, thickness: int = 4, color: Color = BLACK) -> None:
        """Full-width horizontal rule."""
        mid = self.y + thickness // 2
        self.ops.append(LineOp(0, mid, self.width, mid, width=thickness, color=color))
        self.y += thickness

    def image(self, image: Image.Image, max_width: int, max_height: int) -> None:
        """Scale a picture into the box, centred horizontally."""
        w, h = _fit(image.size, max_width, max_height)
        self.ops.append(ImageOp(x=(self.width - w) // 2, y=self.y, width=w, height=h, image=image))
        self.y += h

    def boxed_text(
        self,
        text: str,
        x: int,
        top: int,
        width: int,
        height: int,
        *,
        size: int,
        font: Optional[str] = None,
    ) -> None:
        """Text vertically centred in a box, clipped to the lines that fit."""
        font = font or self.face.regular
        line_height = self.config.line_height(size)
        lines = list(wrap_text(text, font, size, width))
        max_lines = max(1, height // line_height)
        if len(lines) > max_lines:
            lines = lines[:max_lines]
            last = lines[-1].rstrip(".")
            while last and text_width(last + "...", font, size) > width:
                last = last[:-1].rstrip()
            lines[-1] = last + "..."
        start = top + (height - len(lines) * line_height) // 2
        for i, line in enumerate(lines):
            if line:
                self.ops.append(TextOp(x=x, y=start + i * line_height + size, text=line, font=font, size=size))

    def finish(self) -> Composition:
        return Composition(ops=tuple(self.ops), height=self.y)


def _fit(size: Tuple[int, int], max_width: int, max_height: int) -> Tuple[int, int]:
    """Scaled (width, height) preserving aspect ratio."""
    iw, ih = size
    if iw <= 0 or ih <= 0:
        return 1, 1
    scale = min(max_width / iw, max_height / ih, MAX_UPSCALE)
    return max(1, int(iw * scale)), max(1, int(ih * scale))


# ─────────────────────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────────────────────

def compose_item(item: LayoutItem, config: LayoutConfig, face: Typeface = SANS) -> Composition:
    """
    Compose one layout item.

    Args:
        item: Header, instructions, section, question or page image
        config: Layout configuration
        face: Font family for the document

    Returns:
        Composition relative to the item's top-left corner
    """
    b = _Builder(config, face)
    if isinstance(item, WorksheetHeader):
        _worksheet_header(b, item)
    elif isinstance(item, ExamHeader):
        _exam_header(b, item)
    elif isinstance(item, InstructionsLayout):
        _instructions(b, item)
    elif isinstance(item, SectionLayout):
        _section(b, item)
    elif isinstance(item, QuestionLayout):
        _question(b, item)
    elif isinstance(item, FullPageImageLayout):
        _full_page_image(b, item)
    else:
        raise TypeError(f"Unsupported layout item: {type(item).__name__}")
    return b.finish()


def compose_footer(text: str, config: LayoutConfig, face: Typeface = SANS) -> Composition:
    """Centred footer line sized to the footer band."""
    size = config.small_font_px
    baseline = (config.footer_height + size) // 2
    op = TextOp(
        x=config.available_width // 2, y=baseline, text=text,
        font=face.regular, size=size, align="center", color=GREY,
    )
    return Composition(ops=(op,), height=config.footer_height)


# ─────────────────────────────────────────────────────────────────────────────
# Document items
# ─────────────────────────────────────────────────────────────────────────────

def _logo(b: _Builder, logo: Optional[Image.Image]) -> None:
    if logo is None:
        return
    b.image(logo, b.width // 3, b.config.logo_height)
    b.gap(b.config.title_spacing)


def _worksheet_header(b: _Builder, header: WorksheetHeader) -> None:
    cfg = b.config
    _logo(b, header.logo)
    if header.header_text:
        b.text(header.header_text, size=cfg.small_font_px, font=b.face.bold, align="center", color=GREY)
        b.gap(10)
    if header.title:
        b.text(header.title, size=cfg.title_font_px, font=b.face.bold, align="center")

    tags = []
    if header.subject:
        tags.append(f"Subject: {header.subject}")
    if header.grade_level:
        tags.append(f"Grade: {header.grade_level}")
    if tags:
        b.text("   |   ".join(tags), size=cfg.small_font_px, align="center", color=GREY)
    b.gap(cfg.title_spacing)

    if header.name_label:
        # Name field: label followed by a write-in line
        label = f"{header.name_label}:"
        size = cfg.body_font_px
        baseline = b.y + size
        label_width = int(text_width(label, b.face.regular, size))
        b.ops.append(TextOp(x=0, y=baseline, text=label, font=b.face.regular, size=size))
        b.ops.append(LineOp(label_width + 15, baseline + 4, int(b.width * 0.55), baseline + 4))
        b.gap(cfg.line_height(size))
        b.gap(cfg.title_spacing)

    b.rule()


def _exam_header(b: _Builder, header: ExamHeader) -> None:
    cfg = b.config
    _logo(b, header.logo)
    if header.title:
        b.text(header.title, size=cfg.title_font_px, font=b.face.bold, align="center")
    if header.subtitle:
        b.text(header.subtitle, size=cfg.heading_font_px, align="center")
    b.gap(cfg.title_spacing)

    size = cfg.body_font_px
    baseline = b.y + size
    b.ops.extend([
        TextOp(x=0, y=baseline, text=f"Grade: {header.grade}", font=b.face.regular, size=size),
        TextOp(x=b.width // 2, y=baseline, text=f"Time: {header.duration}",
               font=b.face.regular, size=size, align="center"),
        TextOp(x=b.width, y=baseline, text=f"Date: {header.date}",
               font=b.face.regular, size=size, align="right"),
    ])
    b.gap(cfg.line_height(size))
    b.ops.append(TextOp(
        x=b.width, y=b.y + size, text=f"Total Marks: {header.total_marks}",
        font=b.face.bold, size=size, align="right",
    ))
    b.gap(cfg.line_height(size))
    b.gap(10)
    b.rule()


def _instructions(b: _Builder, instructions: InstructionsLayout) -> None:
    cfg = b.config
    size = cfg.body_font_px
    if instructions.heading:
        b.text(instructions.heading, size=size, font=b.face.bold)
        b.gap(10)
    if instructions.bulleted:
        indent = 50
        for line in instructions.lines:
            b.ops.append(TextOp(x=10, y=b.y + size, text="•", font=b.face.regular, size=size))
            b.text(line, size=size, indent=indent)
    else:
        for line in instructions.lines:
            b.text(line, size=size, font=b.face.italic, align="center")


def _question(b: _Builder, question: QuestionLayout) -> None:
    cfg = b.config
    size = cfg.body_font_px
    baseline = b.y + size
    b.ops.append(TextOp(x=0, y=baseline, text=question.label, font=b.face.bold, size=size))
    b.ops.append(TextOp(
        x=b.width, y=baseline, text=question.marks_label,
        font=b.face.bold, size=size, align="right",
    ))

    text_width_px = b.width - QUESTION_LABEL_WIDTH - QUESTION_MARKS_WIDTH
    for line in question.text_lines:
        b.text(line, size=size, indent=QUESTION_LABEL_WIDTH, width=text_width_px)

    b.gap(10)
    for _ in range(question.answer_lines):
        b.gap(cfg.answer_line_gap)
        b.ops.append(LineOp(QUESTION_LABEL_WIDTH, b.y, b.width, b.y, width=2, color=LIGHT_GREY))
    b.gap(10)


def _full_page_image(b: _Builder, page: FullPageImageLayout) -> None:
    if page.image is not None:
        b.image(page.image, b.width, b.config.available_height - b.config.block_spacing)
    else:
        _placeholder(b, "Worksheet image unavailable")


# ─────────────────────────────────────────────────────────────────────────────
# Sections
# ─────────────────────────────────────────────────────────────────────────────

def _section(b: _Builder, section: SectionLayout) -> None:
    cfg = b.config
    if section.title:
        b.text(section.title, size=cfg.heading_font_px, font=b.face.bold)
        b.gap(cfg.title_spacing)

    block = section.block
    if isinstance(block, ImageBlock):
        _image_block(b, block)
    elif isinstance(block, MatchingBlock):
        _matching_block(b, block)
    elif isinstance(block, FillBlankBlock):
        _fill_blank_block(b, block)
    elif isinstance(block, DrawingBlock):
        _drawing_block(b, block)
    elif isinstance(block, MathBlock):
        _math_block(b, block)
    elif isinstance(block, TextBlock):
        b.text(block.text, size=cfg.body_font_px)
    else:
        raise TypeError(f"Unsupported section block: {type(block).__name__}")


def _image_block(b: _Builder, block: ImageBlock) -> None:
    cfg = b.config
    if block.caption:
        b.text(block.caption, size=cfg.body_font_px, font=b.face.bold)
        b.gap(10)
    if block.regenerate is not None:
        label = "[Regenerating...]" if block.regenerate.pending else "[Regenerate image]"
        b.text(label, size=cfg.small_font_px, align="right", color=GREY, screen_only=True)

    if block.image is not None:
        b.image(block.image, b.width, cfg.max_image_height)
    else:
        _placeholder(b, "Illustration unavailable")

    if block.prompt_note:
        b.gap(10)
        b.text(block.prompt_note, size=cfg.small_font_px, font=b.face.italic, color=GREY)


def _placeholder(b: _Builder, label: str) -> None:
    cfg = b.config
    height = cfg.placeholder_height
    b.ops.append(RectOp(
        0, b.y, b.width, height, stroke=3, color=GREY, fill=PLACEHOLDER_FILL, dashed=True,
    ))
    size = cfg.body_font_px
    b.ops.append(TextOp(
        x=b.width // 2, y=b.y + (height + size) // 2, text=label,
        font=b.face.italic, size=size, align="center", color=GREY,
    ))
    b.gap(height)


def _matching_block(b: _Builder, block: MatchingBlock) -> None:
    cfg = b.config
    column_width = int(b.width * 0.4)
    right_x = b.width - column_width
    row_height = cfg.matching_row_height
    row_gap = 20
    size = cfg.body_font_px
    dot = 12

    for i, (left, right) in enumerate(zip(block.left, block.right)):
        top = b.y
        b.ops.append(RectOp(0, top, column_width, row_height))
        b.ops.append(RectOp(right_x, top, column_width, row_height))
        b.boxed_text(f"{i + 1}. {left}", BOX_PADDING, top, column_width - 2 * BOX_PADDING, row_height, size=size)
        b.boxed_text(
            f"{column_letter(i)}. {right}", right_x + BOX_PADDING, top,
            column_width - 2 * BOX_PADDING, row_height, size=size,
        )
        mid = top + row_height // 2 - dot // 2
        b.ops.append(RectOp(column_width + 20, mid, dot, dot, stroke=1, fill=BLACK))
        b.ops.append(RectOp(right_x - 20 - dot, mid, dot, dot, stroke=1, fill=BLACK))
        b.gap(row_height + row_gap)

    if block.row_count:
        b.gap(-row_gap)


def column_letter(index: int) -> str:
    """A, B, ... Z, AA, AB, ..."""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def _fill_blank_block(b: _Builder, block: FillBlankBlock) -> None:
    cfg = b.config
    size = cfg.body_font_px
    font = b.face.regular
    line_height = cfg.line_height(size)
    space = text_width(" ", font, size)

    # None marks a blank
    tokens: List[Optional[str]] = []
    for i, fragment in enumerate(block.fragments):
        tokens.extend(fragment.split())
        if i < len(block.fragments) - 1:
            tokens.append(None)

    lines: List[List[Tuple[float, Optional[str]]]] = [[]]
    cursor = 0.0
    for token in tokens:
        width = BLANK_WIDTH if token is None else text_width(token, font, size)
        if lines[-1] and cursor + width > b.width:
            lines.append([])
            cursor = 0.0
        lines[-1].append((cursor, token))
        cursor += width + space

    for line in lines:
        baseline = b.y + size
        run_x: Optional[float] = None
        run: List[str] = []
        for x, token in line:
            if token is None:
                if run:
                    b.ops.append(TextOp(x=int(run_x), y=baseline, text=" ".join(run), font=font, size=size))
                    run, run_x = [], None
                b.ops.append(LineOp(int(x), baseline + 4, int(x) + BLANK_WIDTH, baseline + 4))
            else:
                if run_x is None:
                    run_x = x
                run.append(token)
        if run:
            b.ops.append(TextOp(x=int(run_x), y=baseline, text=" ".join(run), font=font, size=size))
        b.gap(line_height)


def _drawing_block(b: _Builder, block: DrawingBlock) -> None:
    cfg = b.config
    if block.prompt:
        b.text(block.prompt, size=cfg.body_font_px, font=b.face.italic)
        b.gap(10)
    b.ops.append(RectOp(0, b.y, b.width, block.height, stroke=3, color=GREY, dashed=True))
    b.gap(block.height)


def _math_block(b: _Builder, block: MathBlock) -> None:
    cfg = b.config
    columns = max(1, block.columns)
    gap = 30
    cell_width = (b.width - gap * (columns - 1)) // columns
    cell_height = cfg.math_cell_height
    size = cfg.body_font_px

    for i, cell in enumerate(block.cells):
        row, col = divmod(i, columns)
        x = col * (cell_width + gap)
        top = b.y + row * (cell_height + gap)
        b.ops.append(RectOp(x, top, cell_width, cell_height, color=LIGHT_GREY))
        b.boxed_text(
            cell.question, x + BOX_PADDING, top,
            int(cell_width * 0.6) - BOX_PADDING, cell_height, size=size, font=b.face.bold,
        )
        # Empty answer box
        b.ops.append(RectOp(
            x + int(cell_width * 0.65), top + BOX_PADDING,
            int(cell_width * 0.35) - BOX_PADDING, cell_height - 2 * BOX_PADDING,
            color=GREY, dashed=True,
        ))

    rows = -(-len(block.cells) // columns)
    if rows:
        b.gap(rows * cell_height + (rows - 1) * gap)
