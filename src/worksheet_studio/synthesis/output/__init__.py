"""
Module: synthesis.output

Purpose:
    Output generation: print PDF (ReportLab), screen/PNG raster (Pillow)
    and the portable Word document (python-docx).

Key Functions:
    - render_to_pdf(): DocumentView -> PDF bytes
    - render_pages() / render_to_png(): DocumentView -> images / PNG bytes
    - synthesize_document(): Data model -> .docx bytes

Dependencies:
    - reportlab, PIL, python-docx
    - synthesis.layout: DocumentView

Used By:
    - synthesis.controller: Export orchestration
    - worksheet_studio.cli
"""

from .renderer import render_to_pdf
from .raster import render_pages, render_to_png
from .docx_writer import synthesize_document, write_document

__all__ = [
    "render_to_pdf",
    "render_pages",
    "render_to_png",
    "synthesize_document",
    "write_document",
]
