"""
Tests for synthesis.output.renderer

Renders real PDFs and reads them back with PyMuPDF.
"""
import fitz
import pytest

from worksheet_studio.core.schemas import parse_worksheet
from worksheet_studio.synthesis.layout import RenderTarget, synthesize_view
from worksheet_studio.synthesis.output import render_to_pdf


def _page_texts(pdf_bytes):
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


def test_render_exam_pdf_text(sample_exam):
    # Arrange
    view = synthesize_view(sample_exam)

    # Act
    pdf = render_to_pdf(view)

    # Assert
    assert pdf[:5] == b"%PDF-"
    texts = _page_texts(pdf)
    assert len(texts) == view.page_count
    assert "Total Marks: 9" in texts[0]
    assert "HILLSIDE HIGH" in texts[0]
    assert f"Page 1 of {view.page_count}" in texts[0]


def test_page_size_is_a4(sample_exam):
    view = synthesize_view(sample_exam)
    with fitz.open(stream=render_to_pdf(view), filetype="pdf") as doc:
        rect = doc[0].rect
    assert rect.width == pytest.approx(595.4, abs=1.0)
    assert rect.height == pytest.approx(842.0, abs=1.0)


def test_output_path_written(sample_exam, tmp_path):
    path = tmp_path / "nested" / "exam.pdf"
    data = render_to_pdf(synthesize_view(sample_exam), path)
    assert path.read_bytes() == data


def test_screen_only_controls_omitted_from_print():
    worksheet = parse_worksheet({"sections": [
        {"id": "pic", "type": "image", "imagePrompt": "A cat", "content": {"text": "Cat"}},
    ]})
    view = synthesize_view(worksheet, on_regenerate=lambda sid, prompt: None)

    printed = "".join(_page_texts(render_to_pdf(view, target=RenderTarget.PRINT)))
    on_screen = "".join(_page_texts(render_to_pdf(view, target=RenderTarget.SCREEN)))

    assert "[Regenerate image]" not in printed
    assert "[Regenerate image]" in on_screen
    assert "Illustration unavailable" in printed


def test_worksheet_pdf_contains_sections(sample_worksheet):
    texts = "".join(_page_texts(render_to_pdf(synthesize_view(sample_worksheet))))

    assert "Plant Life" in texts
    assert "1. Root" in texts
    assert "Created with Worksheet Studio" in texts
