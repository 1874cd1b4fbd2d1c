"""
Module: synthesis.output.renderer

Purpose:
    Render a DocumentView to PDF using ReportLab.
    Each PagePlan becomes one PDF page; every placement's draw operations
    are replayed at their pixel positions, converted to points.

Key Functions:
    - render_to_pdf(): Main rendering function

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - synthesis.layout: DocumentView, draw operations

Used By:
    - synthesis.controller: Print export
    - worksheet_studio.cli
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from worksheet_studio.synthesis.layout import (
    DocumentView,
    ImageOp,
    LineOp,
    PagePlan,
    RectOp,
    RenderTarget,
    TextOp,
    compose_footer,
    font_path,
    footer_top,
)
from worksheet_studio.synthesis.layout.models import Color, DrawOp

logger = logging.getLogger(__name__)

DASH_PATTERN_PX = (18, 12)


def render_to_pdf(
    view: DocumentView,
    output_path: Optional[Path] = None,
    *,
    target: RenderTarget = RenderTarget.PRINT,
) -> bytes:
    """
    Render a view to PDF.

    Args:
        view: Synthesized document view
        output_path: Also write the PDF here when given
        target: PRINT flows the footer after content and omits screen-only
            controls; SCREEN pins the footer and keeps them

    Returns:
        PDF bytes

    Example:
        >>> pdf = render_to_pdf(view)
        >>> pdf[:5]
        b'%PDF-'
    """
    config = view.config
    page_width_pt = _px_to_pt(config.page_width, config.dpi)
    page_height_pt = _px_to_pt(config.page_height, config.dpi)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_width_pt, page_height_pt))
    c.setTitle(f"{view.kind} document")

    for page in view.pages:
        _render_page(c, view, page, target, page_height_pt)
        c.showPage()

    c.save()
    data = buf.getvalue()

    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        logger.info(f"Rendered {view.page_count} pages to {output_path}")
    else:
        logger.info(f"Rendered {view.page_count} pages ({len(data)} bytes)")
    return data


def _render_page(
    c: canvas.Canvas,
    view: DocumentView,
    page: PagePlan,
    target: RenderTarget,
    page_height_pt: float,
) -> None:
    """Render a single page's placements and its footer."""
    config = view.config
    for placement in page.placements:
        _draw_ops(c, placement.ops, config.margin_left, placement.top, config.dpi, page_height_pt, target)

    if page.footer_text:
        footer = compose_footer(page.footer_text, config, view.typeface)
        top = footer_top(page, config, target)
        _draw_ops(c, footer.ops, config.margin_left, top, config.dpi, page_height_pt, target)


def _draw_ops(
    c: canvas.Canvas,
    ops: Sequence[DrawOp],
    left_px: int,
    top_px: int,
    dpi: int,
    page_height_pt: float,
    target: RenderTarget,
) -> None:
    """Replay draw operations offset by (left_px, top_px)."""
    for op in ops:
        c.saveState()
        if isinstance(op, TextOp):
            if op.screen_only and target is RenderTarget.PRINT:
                c.restoreState()
                continue
            _draw_text(c, op, left_px, top_px, dpi, page_height_pt)
        elif isinstance(op, LineOp):
            _set_stroke(c, op.color, op.width, op.dashed, dpi)
            c.line(
                _px_to_pt(left_px + op.x1, dpi),
                page_height_pt - _px_to_pt(top_px + op.y1, dpi),
                _px_to_pt(left_px + op.x2, dpi),
                page_height_pt - _px_to_pt(top_px + op.y2, dpi),
            )
        elif isinstance(op, RectOp):
            _set_stroke(c, op.color, op.stroke, op.dashed, dpi)
            if op.fill is not None:
                c.setFillColorRGB(*_rgb(op.fill))
            c.rect(
                _px_to_pt(left_px + op.x, dpi),
                _transform_y(page_height_pt, top_px + op.y, op.height, dpi),
                _px_to_pt(op.width, dpi),
                _px_to_pt(op.height, dpi),
                stroke=1,
                fill=1 if op.fill is not None else 0,
            )
        elif isinstance(op, ImageOp):
            c.drawImage(
                _pil_to_reader(op.image),
                _px_to_pt(left_px + op.x, dpi),
                _transform_y(page_height_pt, top_px + op.y, op.height, dpi),
                width=_px_to_pt(op.width, dpi),
                height=_px_to_pt(op.height, dpi),
                mask="auto",
            )
        c.restoreState()


def _draw_text(
    c: canvas.Canvas,
    op: TextOp,
    left_px: int,
    top_px: int,
    dpi: int,
    page_height_pt: float,
) -> None:
    font_path(op.font)
    c.setFont(op.font, _px_to_pt(op.size, dpi))
    c.setFillColorRGB(*_rgb(op.color))
    x_pt = _px_to_pt(left_px + op.x, dpi)
    y_pt = page_height_pt - _px_to_pt(top_px + op.y, dpi)
    if op.align == "center":
        c.drawCentredString(x_pt, y_pt, op.text)
    elif op.align == "right":
        c.drawRightString(x_pt, y_pt, op.text)
    else:
        c.drawString(x_pt, y_pt, op.text)


def _set_stroke(c: canvas.Canvas, color: Color, width_px: int, dashed: bool, dpi: int) -> None:
    c.setStrokeColorRGB(*_rgb(color))
    c.setLineWidth(_px_to_pt(width_px, dpi))
    if dashed:
        c.setDash([_px_to_pt(v, dpi) for v in DASH_PATTERN_PX])


def _rgb(color: Color) -> tuple:
    return tuple(v / 255.0 for v in color)


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _px_to_pt(px: float, dpi: int) -> float:
    """
    Convert pixels to PDF points.

    PDF points are 1/72 inch.
    """
    return px * 72.0 / dpi


def _transform_y(
    page_height_pt: float,
    y_px_top: float,
    height_px: float,
    dpi: int,
) -> float:
    """
    Convert top-down pixel Y coordinate to bottom-up PDF Y.

    Args:
        page_height_pt: Page height in points
        y_px_top: Y position from top in pixels (absolute)
        height_px: Height of element in pixels
        dpi: Dots per inch

    Returns:
        Y of the element's bottom edge, in points from the page bottom
    """
    return page_height_pt - _px_to_pt(y_px_top + height_px, dpi)
