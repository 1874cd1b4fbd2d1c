"""
Module: synthesis.output.docx_writer

Purpose:
    Export documents as Word files with python-docx. Every derived value
    (total marks, answer lines, header text, date placeholder) is
    re-derived from the data model through core.derived, the same
    functions the view uses. Nothing is read back from a rendered view.

Key Functions:
    - synthesize_document(): Data + branding -> .docx bytes
    - write_document(): Same, written to a file

Document Structure (exam):
    INSTITUTION (or override), centred, uppercase
    <SUBJECT> EXAMINATION
    Grade: ...  Time: ...  Date: ...      (bottom border)
    Total Marks: N
    INSTRUCTIONS TO CANDIDATES:
      - bullet per instruction
    N. question text (line breaks kept)  [M Marks]
    ______ x answer_line_count(M)
    *** End of Examination ***

Dependencies:
    - python-docx: Document model and serialization
    - PIL: Embedding illustrations

Used By:
    - synthesis.controller: Document export
    - worksheet_studio.cli
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Mm, Pt, RGBColor, Twips
from PIL import Image

from worksheet_studio.core.derived import (
    answer_line_count,
    date_text,
    exam_header_text,
    marks_annotation,
    question_label,
    question_text_lines,
    subject_heading,
    total_marks,
)
from worksheet_studio.core.models import (
    BrandingOptions,
    ExamData,
    GeneratedWorksheetImage,
    WorksheetData,
)
from worksheet_studio.errors import ExportFailure, ImageDecodeFailure
from worksheet_studio.synthesis.images import ImageProvider, decode_image, is_remote_url
from worksheet_studio.synthesis.layout import (
    DocumentData,
    DrawingBlock,
    FillBlankBlock,
    ImageBlock,
    MatchingBlock,
    MathBlock,
    SectionLayout,
    TextBlock,
    column_letter,
    layout_sections,
)

logger = logging.getLogger(__name__)

BASE_FONT = "Times New Roman"
BASE_FONT_PT = 12
PAGE_MARGIN_TWIPS = 1440
ANSWER_LINE = "_" * 74
BLANK_FILL = "__________"
END_MARKER = "*** End of Examination ***"
INSTRUCTIONS_HEADING = "INSTRUCTIONS TO CANDIDATES:"
CONTENT_WIDTH_IN = 6.27  # A4 width less two 1-inch margins


def synthesize_document(
    data: DocumentData,
    branding: Optional[BrandingOptions] = None,
    *,
    images: Optional[ImageProvider] = None,
) -> bytes:
    """
    Produce a .docx byte stream for a document.

    Args:
        data: ExamData, WorksheetData or GeneratedWorksheetImage
        branding: Header override and logo (same value the view used)
        images: Crop provider for worksheet illustrations

    Returns:
        .docx file contents

    Raises:
        ExportFailure: On any serialization fault; nothing is written

    Example:
        >>> blob = synthesize_document(exam, BrandingOptions(header_text_override="Hill School"))
        >>> blob[:2]
        b'PK'
    """
    branding = branding or BrandingOptions()
    try:
        doc = _new_document()
        if isinstance(data, ExamData):
            _write_exam(doc, data, branding)
        elif isinstance(data, WorksheetData):
            _write_worksheet(doc, data, branding, images)
        elif isinstance(data, GeneratedWorksheetImage):
            _write_worksheet_image(doc, data, branding)
        else:
            raise TypeError(f"Cannot export {type(data).__name__}")

        buf = io.BytesIO()
        doc.save(buf)
    except ExportFailure:
        raise
    except Exception as e:
        logger.error(f"Document export failed: {e}")
        raise ExportFailure(f"Failed to serialize document: {e}") from e

    blob = buf.getvalue()
    logger.info(f"Synthesized {type(data).__name__} document ({len(blob)} bytes)")
    return blob


def write_document(
    data: DocumentData,
    output_path: Path,
    branding: Optional[BrandingOptions] = None,
    *,
    images: Optional[ImageProvider] = None,
) -> Path:
    """
    Synthesize a document and write it to disk.

    The file is only created once serialization has fully succeeded.

    Raises:
        ExportFailure: If serialization or the write fails
    """
    blob = synthesize_document(data, branding, images=images)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(blob)
    except OSError as e:
        raise ExportFailure(f"Failed to write {output_path}: {e}") from e
    logger.info(f"Wrote document to {output_path}")
    return output_path


# ─────────────────────────────────────────────────────────────────────────────
# Document setup
# ─────────────────────────────────────────────────────────────────────────────

def _new_document() -> DocxDocument:
    """A4 document, 1-inch margins, Times New Roman 12pt."""
    doc = Document()
    for section in doc.sections:
        section.page_width = Mm(210)
        section.page_height = Mm(297)
        section.top_margin = Twips(PAGE_MARGIN_TWIPS)
        section.bottom_margin = Twips(PAGE_MARGIN_TWIPS)
        section.left_margin = Twips(PAGE_MARGIN_TWIPS)
        section.right_margin = Twips(PAGE_MARGIN_TWIPS)

    normal = doc.styles["Normal"]
    normal.font.name = BASE_FONT
    normal.font.size = Pt(BASE_FONT_PT)
    normal.paragraph_format.line_spacing = 1.15

    for style_name, size in (("Heading 1", 16), ("Heading 2", 14)):
        style = doc.styles[style_name]
        style.font.name = BASE_FONT
        style.font.size = Pt(size)
        style.font.bold = True
        style.font.color.rgb = RGBColor(0, 0, 0)
    return doc


def _bottom_border(paragraph) -> None:
    """Single black rule under a paragraph."""
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "12")
    bottom.set(qn("w:space"), "10")
    bottom.set(qn("w:color"), "000000")
    borders.append(bottom)
    p_pr.append(borders)


def _add_logo(doc: DocxDocument, logo: Optional[Image.Image]) -> None:
    if logo is None:
        return
    para = doc.add_paragraph()
    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    para.add_run().add_picture(_png_stream(logo), height=Inches(1.0))


def _png_stream(image: Image.Image) -> io.BytesIO:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    buf.seek(0)
    return buf


# ─────────────────────────────────────────────────────────────────────────────
# Exam
# ─────────────────────────────────────────────────────────────────────────────

def _write_exam(doc: DocxDocument, exam: ExamData, branding: BrandingOptions) -> None:
    _add_logo(doc, branding.logo_image)

    title = doc.add_heading(exam_header_text(exam, branding).upper(), level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_after = Pt(10)

    subtitle = doc.add_heading(subject_heading(exam).upper(), level=2)
    subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER
    subtitle.paragraph_format.space_after = Pt(20)

    # Grade / Time / Date on one line, spread by tab stops
    meta = doc.add_paragraph()
    tab_stops = meta.paragraph_format.tab_stops
    tab_stops.add_tab_stop(Twips(4500), WD_TAB_ALIGNMENT.CENTER)
    tab_stops.add_tab_stop(Twips(9000), WD_TAB_ALIGNMENT.RIGHT)
    meta.add_run(f"Grade: {exam.grade}").bold = True
    meta.add_run("\t")
    meta.add_run(f"Time: {exam.duration}").bold = True
    meta.add_run("\t")
    meta.add_run(f"Date: {date_text(exam.date)}").bold = True
    _bottom_border(meta)
    meta.paragraph_format.space_after = Pt(10)

    total = doc.add_paragraph()
    total.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    total.add_run(f"Total Marks: {total_marks(exam.questions)}").bold = True
    total.paragraph_format.space_after = Pt(20)

    if exam.instructions:
        heading = doc.add_paragraph()
        heading.add_run(INSTRUCTIONS_HEADING).bold = True
        heading.paragraph_format.space_before = Pt(10)
        heading.paragraph_format.space_after = Pt(5)
        for instruction in exam.instructions:
            item = doc.add_paragraph(instruction, style="List Bullet")
            item.paragraph_format.space_after = Pt(5)
        doc.add_paragraph().paragraph_format.space_after = Pt(10)

    for question in exam.questions:
        para = doc.add_paragraph()
        para.paragraph_format.space_before = Pt(10)
        para.paragraph_format.space_after = Pt(5)
        para.paragraph_format.left_indent = Twips(360)
        para.paragraph_format.first_line_indent = Twips(-360)

        label = question_label(question.number)
        if label:
            para.add_run(f"{label} ").bold = True
        for i, line in enumerate(question_text_lines(question.text)):
            run = para.add_run()
            if i > 0:
                run.add_break()
            run.add_text(line)
        marks_run = para.add_run(f"  {marks_annotation(question.marks)}")
        marks_run.bold = True
        marks_run.italic = True

        for _ in range(answer_line_count(question.marks)):
            doc.add_paragraph(ANSWER_LINE).paragraph_format.space_after = Pt(5)

    end = doc.add_paragraph()
    end.alignment = WD_ALIGN_PARAGRAPH.CENTER
    end.paragraph_format.space_before = Pt(30)
    end.add_run(END_MARKER).italic = True

    logger.debug(f"Exam document: {len(exam.questions)} questions")


# ─────────────────────────────────────────────────────────────────────────────
# Worksheet
# ─────────────────────────────────────────────────────────────────────────────

def _write_worksheet(
    doc: DocxDocument,
    worksheet: WorksheetData,
    branding: BrandingOptions,
    images: Optional[ImageProvider],
) -> None:
    _add_logo(doc, branding.logo_image)
    if branding.header_override:
        header = doc.add_paragraph()
        header.alignment = WD_ALIGN_PARAGRAPH.CENTER
        header.add_run(branding.header_override.upper()).bold = True

    title = doc.add_heading(worksheet.title, level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    tags = [t for t in (
        f"Subject: {worksheet.subject}" if worksheet.subject else "",
        f"Grade: {worksheet.grade_level}" if worksheet.grade_level else "",
    ) if t]
    if tags:
        meta = doc.add_paragraph("   |   ".join(tags))
        meta.alignment = WD_ALIGN_PARAGRAPH.CENTER

    name = doc.add_paragraph("Name: ______________________________")
    _bottom_border(name)

    if worksheet.instructions:
        para = doc.add_paragraph()
        para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        para.add_run(worksheet.instructions).italic = True

    for layout in layout_sections(worksheet.sections, images=images):
        _write_section(doc, layout)


def _write_section(doc: DocxDocument, layout: SectionLayout) -> None:
    if layout.title:
        doc.add_heading(layout.title, level=2)

    block = layout.block
    if isinstance(block, ImageBlock):
        if block.caption:
            doc.add_paragraph().add_run(block.caption).bold = True
        if block.image is not None:
            para = doc.add_paragraph()
            para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            width_in = min(CONTENT_WIDTH_IN, block.image.width / 96)
            para.add_run().add_picture(_png_stream(block.image), width=Inches(width_in))
        else:
            doc.add_paragraph("[Illustration unavailable]").alignment = WD_ALIGN_PARAGRAPH.CENTER
        if block.prompt_note:
            doc.add_paragraph().add_run(block.prompt_note).italic = True
    elif isinstance(block, MatchingBlock):
        table = doc.add_table(rows=block.row_count, cols=3)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        for i, (left, right) in enumerate(zip(block.left, block.right)):
            cells = table.rows[i].cells
            cells[0].text = f"{i + 1}. {left}"
            cells[1].text = "•            •"
            cells[2].text = f"{column_letter(i)}. {right}"
    elif isinstance(block, FillBlankBlock):
        doc.add_paragraph(BLANK_FILL.join(block.fragments))
    elif isinstance(block, DrawingBlock):
        if block.prompt:
            doc.add_paragraph().add_run(block.prompt).italic = True
        table = doc.add_table(rows=1, cols=1)
        table.style = "Table Grid"
        table.rows[0].height = Inches(3)
    elif isinstance(block, MathBlock):
        columns = max(1, block.columns)
        rows = -(-len(block.cells) // columns)
        if rows:
            table = doc.add_table(rows=rows, cols=columns)
            table.style = "Table Grid"
            for i, cell in enumerate(block.cells):
                row, col = divmod(i, columns)
                table.cell(row, col).text = f"{cell.question}\n\nAnswer: ________"
    elif isinstance(block, TextBlock):
        doc.add_paragraph(block.text)


def _write_worksheet_image(
    doc: DocxDocument,
    page: GeneratedWorksheetImage,
    branding: BrandingOptions,
) -> None:
    _add_logo(doc, branding.logo_image)
    if branding.header_override:
        header = doc.add_paragraph()
        header.alignment = WD_ALIGN_PARAGRAPH.CENTER
        header.add_run(branding.header_override.upper()).bold = True

    if is_remote_url(page.image_url):
        raise ExportFailure(f"Remote worksheet image cannot be embedded: {page.image_url[:60]}")
    try:
        picture = decode_image(page.image_url)
    except ImageDecodeFailure as e:
        raise ExportFailure(f"Worksheet image could not be decoded: {e}") from e

    para = doc.add_paragraph()
    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    para.add_run().add_picture(_png_stream(picture), width=Inches(CONTENT_WIDTH_IN))
