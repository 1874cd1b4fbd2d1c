"""
Module: synthesis.layout.view

Purpose:
    Build the renderable DocumentView for a worksheet, a full-page image
    worksheet or an exam. The same view feeds the screen (PNG) and print
    (PDF) renderers; only footer presentation differs between them.

Key Functions:
    - synthesize_view(): Data + branding -> DocumentView
    - exam_items(), worksheet_items(), worksheet_image_items(): Item lists

Algorithm:
    1. Build layout items from the data model with core.derived helpers
    2. Compose each item into draw operations (measuring it)
    3. Paginate with atomic grouping
    4. Attach per-page footer text

Dependencies:
    - worksheet_studio.core: Models and derived values
    - synthesis.layout: Sections, composition, pagination

Used By:
    - synthesis.controller
    - worksheet_studio.cli
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple, Union

from PIL import Image

from worksheet_studio.core.derived import (
    answer_line_count,
    date_text,
    exam_footer_text,
    exam_header_text,
    marks_label,
    question_label,
    question_text_lines,
    subject_heading,
    total_marks,
    worksheet_footer_text,
)
from worksheet_studio.core.models import (
    BrandingOptions,
    ExamData,
    GeneratedWorksheetImage,
    WorksheetData,
)
from worksheet_studio.errors import ImageDecodeFailure, NetworkAcquisitionFailure
from worksheet_studio.synthesis.images import ImageProvider, decode_image, is_remote_url

from .compose import compose_item
from .config import LayoutConfig
from .models import (
    SANS,
    SERIF,
    DocumentKind,
    DocumentView,
    ExamHeader,
    FullPageImageLayout,
    InstructionsLayout,
    LayoutItem,
    QuestionLayout,
    WorksheetHeader,
)
from .paginator import paginate
from .regeneration import RegenerationTracker
from .sections import RegenerateCallback, UrlLoader, layout_sections

logger = logging.getLogger(__name__)

DocumentData = Union[WorksheetData, GeneratedWorksheetImage, ExamData]

EXAM_INSTRUCTIONS_HEADING = "Instructions:"


def synthesize_view(
    data: DocumentData,
    branding: Optional[BrandingOptions] = None,
    *,
    config: Optional[LayoutConfig] = None,
    images: Optional[ImageProvider] = None,
    regeneration: Optional[RegenerationTracker] = None,
    on_regenerate: Optional[RegenerateCallback] = None,
    url_loader: Optional[UrlLoader] = None,
) -> DocumentView:
    """
    Synthesize the renderable view of a document.

    Args:
        data: Worksheet, full-page image worksheet or exam
        branding: Header override and logo, shared with the exporter
        config: Layout configuration (defaults to A4 at 200 DPI)
        images: Crop provider for the worksheet's reference image
        regeneration: Pending markers for regenerate controls
        on_regenerate: Regeneration hook wired by the orchestrator
        url_loader: Fetches remote image URLs

    Returns:
        DocumentView with items, pages and footers

    Raises:
        TypeError: If `data` is not a supported document type

    Example:
        >>> view = synthesize_view(exam, BrandingOptions())
        >>> view.total_marks == sum(q.marks for q in exam.questions)
        True
    """
    config = config or LayoutConfig()
    branding = branding or BrandingOptions()

    marks: Optional[int] = None
    if isinstance(data, ExamData):
        kind, face = DocumentKind.EXAM, SERIF
        marks = total_marks(data.questions)
        items = exam_items(data, branding, marks)
    elif isinstance(data, WorksheetData):
        kind, face = DocumentKind.WORKSHEET, SANS
        items = worksheet_items(
            data, branding, config,
            images=images, regeneration=regeneration,
            on_regenerate=on_regenerate, url_loader=url_loader,
        )
    elif isinstance(data, GeneratedWorksheetImage):
        kind, face = DocumentKind.WORKSHEET_IMAGE, SANS
        items = worksheet_image_items(data, branding, url_loader=url_loader)
    else:
        raise TypeError(f"Cannot synthesize a view for {type(data).__name__}")

    composed = [(item, compose_item(item, config, face)) for item in items]
    result = paginate(composed, config)

    pages = tuple(
        replace(page, footer_text=_footer_text(kind, branding, page.index, result.page_count))
        for page in result.pages
    )

    logger.info(f"Synthesized {kind} view: {len(items)} items, {len(pages)} pages")
    return DocumentView(
        kind=kind,
        items=tuple(items),
        pages=pages,
        total_marks=marks,
        warnings=result.warnings,
        typeface=face,
        config=config,
    )


def _footer_text(
    kind: DocumentKind,
    branding: BrandingOptions,
    page_index: int,
    page_count: int,
) -> str:
    if kind is DocumentKind.EXAM:
        return exam_footer_text(branding, page_index + 1, page_count)
    return worksheet_footer_text(branding)


# ─────────────────────────────────────────────────────────────────────────────
# Item builders
# ─────────────────────────────────────────────────────────────────────────────

def exam_items(
    exam: ExamData,
    branding: BrandingOptions,
    marks: Optional[int] = None,
) -> List[LayoutItem]:
    """Header, instruction bullets and one item per question."""
    items: List[LayoutItem] = [
        ExamHeader(
            title=exam_header_text(exam, branding).upper(),
            subtitle=subject_heading(exam),
            grade=exam.grade,
            duration=exam.duration,
            date=date_text(exam.date),
            total_marks=total_marks(exam.questions) if marks is None else marks,
            logo=branding.logo_image,
        )
    ]
    if exam.instructions:
        items.append(InstructionsLayout(
            lines=tuple(exam.instructions),
            heading=EXAM_INSTRUCTIONS_HEADING,
            bulleted=True,
        ))
    for question in exam.questions:
        items.append(QuestionLayout(
            question_id=question.id,
            label=question_label(question.number),
            text_lines=question_text_lines(question.text),
            marks=question.marks,
            marks_label=marks_label(question.marks),
            answer_lines=answer_line_count(question.marks),
        ))
    return items


def worksheet_items(
    worksheet: WorksheetData,
    branding: BrandingOptions,
    config: Optional[LayoutConfig] = None,
    **section_options,
) -> List[LayoutItem]:
    """Header, instructions and one item per section."""
    items: List[LayoutItem] = [
        WorksheetHeader(
            title=worksheet.title,
            header_text=branding.header_override,
            subject=worksheet.subject,
            grade_level=worksheet.grade_level,
            logo=branding.logo_image,
        )
    ]
    if worksheet.instructions:
        items.append(InstructionsLayout(lines=(worksheet.instructions,)))
    items.extend(layout_sections(worksheet.sections, config=config, **section_options))
    return items


def worksheet_image_items(
    page: GeneratedWorksheetImage,
    branding: BrandingOptions,
    *,
    url_loader: Optional[UrlLoader] = None,
) -> List[LayoutItem]:
    """Branding header (when set) and the generated page picture."""
    items: List[LayoutItem] = []
    if branding.header_override or branding.logo_image is not None:
        items.append(WorksheetHeader(
            header_text=branding.header_override,
            logo=branding.logo_image,
            name_label=None,
        ))

    picture, error = _load_page_image(page.image_url, url_loader)
    items.append(FullPageImageLayout(image=picture, image_url=page.image_url, error=error))
    return items


def _load_page_image(
    url: str,
    url_loader: Optional[UrlLoader],
) -> Tuple[Optional[Image.Image], Optional[str]]:
    try:
        if is_remote_url(url):
            if url_loader is None:
                return None, "Remote image not loaded"
            return decode_image(url_loader(url)), None
        return decode_image(url), None
    except (ImageDecodeFailure, NetworkAcquisitionFailure) as e:
        logger.warning(f"Generated worksheet image unusable: {e}")
        return None, str(e)
