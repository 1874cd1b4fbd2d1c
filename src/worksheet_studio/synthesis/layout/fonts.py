"""
Module: synthesis.layout.fonts

Purpose:
    Resolve the TrueType files behind the layout's font names. Each
    name maps to one file that is registered with ReportLab and loaded
    by Pillow, so text is measured, printed and rasterized with the same
    glyphs.

Key Functions:
    - font_path(): Resolve (and register) a layout font name
    - load_font(): Pillow font for a name and pixel size
    - text_width(): Width of a run of text in pixels

Dependencies:
    - reportlab: TTFont registration, string widths
    - PIL.ImageFont: TrueType loading and advance widths

Used By:
    - synthesis.layout.compose: Word wrapping
    - synthesis.output.renderer: PDF text
    - synthesis.output.raster: PNG text
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Dict, Tuple

import reportlab
from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)

# Bitstream Vera ships with ReportLab, so the last candidate always exists
_BUNDLED_DIR = os.path.join(os.path.dirname(reportlab.__file__), "fonts")

_FONT_FILES: Dict[str, Tuple[str, ...]] = {
    "StudioSans": ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "arial.ttf", "Arial.ttf", "Vera.ttf"),
    "StudioSans-Bold": ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "arialbd.ttf", "Arial Bold.ttf", "VeraBd.ttf"),
    "StudioSans-Italic": ("DejaVuSans-Oblique.ttf", "LiberationSans-Italic.ttf", "ariali.ttf", "Arial Italic.ttf", "VeraIt.ttf"),
    "StudioSerif": ("DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "times.ttf", "Times New Roman.ttf", "Vera.ttf"),
    "StudioSerif-Bold": ("DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf", "timesbd.ttf", "Times New Roman Bold.ttf", "VeraBd.ttf"),
    "StudioSerif-Italic": ("DejaVuSerif-Italic.ttf", "LiberationSerif-Italic.ttf", "timesi.ttf", "Times New Roman Italic.ttf", "VeraIt.ttf"),
}


@lru_cache(maxsize=None)
def font_path(name: str) -> str:
    """
    Resolve a layout font name to a TrueType file and register it with
    ReportLab under that name.

    Candidates are looked up the way Pillow finds fonts (working
    directory, then the system font directories); the bundled Vera
    files are the last resort.

    Raises:
        KeyError: If `name` is not a layout font
    """
    for candidate in _FONT_FILES[name]:
        bundled = os.path.join(_BUNDLED_DIR, candidate)
        try:
            path = ImageFont.truetype(candidate, 12).path
        except OSError:
            if not os.path.exists(bundled):
                continue
            path = bundled
        pdfmetrics.registerFont(TTFont(name, path))
        logger.debug(f"Font {name} -> {path}")
        return path
    raise OSError(f"No TrueType file found for {name}")


@lru_cache(maxsize=64)
def load_font(name: str, size: int) -> ImageFont.FreeTypeFont:
    """Pillow font for a layout font name at `size` pixels."""
    return ImageFont.truetype(font_path(name), size)


def text_width(text: str, font: str, size: int) -> float:
    """
    Width of `text` in pixels at `size` pixels.

    The wider of the PDF advance width and Pillow's hinted advance, so a
    line that fits here fits in both renderers.
    """
    font_path(font)
    return max(
        pdfmetrics.stringWidth(text, font, size),
        load_font(font, size).getlength(text),
    )
