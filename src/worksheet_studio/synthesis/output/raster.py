"""
Module: synthesis.output.raster

Purpose:
    Render a DocumentView to images with Pillow. This is the on-screen
    preview and the PNG download. It replays the same draw operations as
    the PDF renderer.

Key Functions:
    - render_pages(): One PIL image per page
    - render_to_png(): PNG bytes of one page, or all pages stacked

Dependencies:
    - PIL: Drawing and PNG encoding
    - synthesis.layout: DocumentView, draw operations

Used By:
    - synthesis.controller: Image export
    - worksheet_studio.cli
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw

from worksheet_studio.synthesis.layout import (
    DocumentView,
    ImageOp,
    LineOp,
    PagePlan,
    RectOp,
    RenderTarget,
    TextOp,
    compose_footer,
    footer_top,
    load_font,
)
from worksheet_studio.synthesis.layout.models import Color, DrawOp

logger = logging.getLogger(__name__)

DASH_PATTERN_PX = (18, 12)
PAGE_GAP_PX = 40
BACKGROUND: Color = (255, 255, 255)


def render_pages(
    view: DocumentView,
    *,
    target: RenderTarget = RenderTarget.SCREEN,
) -> List[Image.Image]:
    """
    Render every page of a view.

    Args:
        view: Synthesized document view
        target: SCREEN pins footers and shows regenerate controls

    Returns:
        RGB images, one per page, at the view's pixel size
    """
    images = [_render_page(view, page, target) for page in view.pages]
    logger.debug(f"Rasterized {len(images)} pages ({target})")
    return images


def render_to_png(
    view: DocumentView,
    page: Optional[int] = 0,
    *,
    target: RenderTarget = RenderTarget.SCREEN,
) -> bytes:
    """
    Encode a page as PNG.

    Args:
        view: Synthesized document view
        page: Page index, or None to stack every page vertically
        target: Render target

    Returns:
        PNG bytes

    Raises:
        IndexError: If `page` is out of range
    """
    if page is None:
        image = _stack(render_pages(view, target=target))
    else:
        if not 0 <= page < view.page_count:
            raise IndexError(f"Page {page} out of range (0..{view.page_count - 1})")
        image = _render_page(view, view.pages[page], target)

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def _stack(pages: Sequence[Image.Image]) -> Image.Image:
    """Stack pages top to bottom with a gap between them."""
    width = max(p.width for p in pages)
    height = sum(p.height for p in pages) + PAGE_GAP_PX * (len(pages) - 1)
    sheet = Image.new("RGB", (width, height), (230, 230, 230))
    y = 0
    for p in pages:
        sheet.paste(p, (0, y))
        y += p.height + PAGE_GAP_PX
    return sheet


def _render_page(view: DocumentView, page: PagePlan, target: RenderTarget) -> Image.Image:
    config = view.config
    image = Image.new("RGB", (config.page_width, config.page_height), BACKGROUND)
    draw = ImageDraw.Draw(image)

    for placement in page.placements:
        _draw_ops(image, draw, placement.ops, config.margin_left, placement.top, target)

    if page.footer_text:
        footer = compose_footer(page.footer_text, config, view.typeface)
        _draw_ops(image, draw, footer.ops, config.margin_left, footer_top(page, config, target), target)
    return image


def _draw_ops(
    image: Image.Image,
    draw: ImageDraw.ImageDraw,
    ops: Sequence[DrawOp],
    left: int,
    top: int,
    target: RenderTarget,
) -> None:
    """Replay draw operations offset by (left, top)."""
    for op in ops:
        if isinstance(op, TextOp):
            if op.screen_only and target is RenderTarget.PRINT:
                continue
            anchor = {"left": "ls", "center": "ms", "right": "rs"}[op.align]
            draw.text(
                (left + op.x, top + op.y), op.text,
                font=load_font(op.font, op.size), fill=op.color, anchor=anchor,
            )
        elif isinstance(op, LineOp):
            start = (left + op.x1, top + op.y1)
            end = (left + op.x2, top + op.y2)
            if op.dashed:
                _dashed_line(draw, start, end, op.color, op.width)
            else:
                draw.line([start, end], fill=op.color, width=op.width)
        elif isinstance(op, RectOp):
            box = (left + op.x, top + op.y, left + op.x + op.width, top + op.y + op.height)
            if op.dashed:
                if op.fill is not None:
                    draw.rectangle(box, fill=op.fill)
                _dashed_rect(draw, box, op.color, op.stroke)
            else:
                draw.rectangle(box, fill=op.fill, outline=op.color, width=op.stroke)
        elif isinstance(op, ImageOp):
            picture = op.image.convert("RGBA").resize((op.width, op.height), Image.Resampling.LANCZOS)
            image.paste(picture, (left + op.x, top + op.y), picture)


def _dashed_line(
    draw: ImageDraw.ImageDraw,
    start: Tuple[int, int],
    end: Tuple[int, int],
    color: Color,
    width: int,
) -> None:
    """Axis-aligned or diagonal dashed stroke."""
    (x1, y1), (x2, y2) = start, end
    length = ((x2 - x1) ** 2 + (y2 - y1) ** 2) ** 0.5
    if length == 0:
        return
    dash, space = DASH_PATTERN_PX
    dx, dy = (x2 - x1) / length, (y2 - y1) / length
    pos = 0.0
    while pos < length:
        seg_end = min(pos + dash, length)
        draw.line(
            [(x1 + dx * pos, y1 + dy * pos), (x1 + dx * seg_end, y1 + dy * seg_end)],
            fill=color, width=width,
        )
        pos += dash + space


def _dashed_rect(
    draw: ImageDraw.ImageDraw,
    box: Tuple[int, int, int, int],
    color: Color,
    width: int,
) -> None:
    x1, y1, x2, y2 = box
    _dashed_line(draw, (x1, y1), (x2, y1), color, width)
    _dashed_line(draw, (x2, y1), (x2, y2), color, width)
    _dashed_line(draw, (x2, y2), (x1, y2), color, width)
    _dashed_line(draw, (x1, y2), (x1, y1), color, width)
