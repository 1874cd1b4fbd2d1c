"""
Worksheet Studio synthesis package.

Turns validated worksheets and exams into an on-screen view, a print
rendering and a Word document, and orchestrates generation sessions.

Example:
    >>> from worksheet_studio.synthesis import StudioController, SynthesisConfig
    >>> with StudioController(generator, SynthesisConfig(output_dir=out)) as studio:
    ...     studio.generate_worksheet("Fractions, grade 4")
    ...     studio.export_document()
"""

from .config import SynthesisConfig
from .layout import DocumentView, LayoutConfig, RenderTarget, synthesize_view
from .output import render_pages, render_to_pdf, render_to_png, synthesize_document, write_document
from .generation import ContentGenerator, StaticContentGenerator
from .acquisition import ReferenceImage, fetch_image, load_image_file
from .controller import StudioController, ExportResult, export_filename

__all__ = [
    "SynthesisConfig",
    "LayoutConfig",
    "DocumentView",
    "RenderTarget",
    "synthesize_view",
    "render_pages",
    "render_to_pdf",
    "render_to_png",
    "synthesize_document",
    "write_document",
    "ContentGenerator",
    "StaticContentGenerator",
    "ReferenceImage",
    "fetch_image",
    "load_image_file",
    "StudioController",
    "ExportResult",
    "export_filename",
]
