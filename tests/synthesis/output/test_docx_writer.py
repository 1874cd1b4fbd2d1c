"""
Tests for Word document export.

Documents are read back with python-docx.
"""
import io

import pytest
from docx import Document

from worksheet_studio.core.models import GeneratedWorksheetImage
from worksheet_studio.errors import ExportFailure
from worksheet_studio.synthesis.images import SourceImageProvider
from worksheet_studio.synthesis.output import synthesize_document, write_document
from worksheet_studio.synthesis.output.docx_writer import ANSWER_LINE, END_MARKER


def _open(blob):
    return Document(io.BytesIO(blob))


def _texts(doc):
    return [p.text for p in doc.paragraphs]


class TestExamDocument:

    def test_total_marks_matches_questions(self, sample_exam):
        texts = _texts(_open(synthesize_document(sample_exam)))
        assert "Total Marks: 9" in texts

    def test_answer_lines_per_question(self, sample_exam):
        """2 marks -> 2 lines, 3 and 4 marks -> 3 lines."""
        texts = _texts(_open(synthesize_document(sample_exam)))

        runs = []
        count = 0
        for text in texts:
            if text == ANSWER_LINE:
                count += 1
            elif count:
                runs.append(count)
                count = 0
        assert runs == [2, 3, 3]

    def test_title_block_and_override(self, sample_exam, override_branding):
        default = _texts(_open(synthesize_document(sample_exam)))
        branded = _texts(_open(synthesize_document(sample_exam, override_branding)))

        assert default[0] == "HILLSIDE HIGH"
        assert branded[0] == "RIVERSIDE ACADEMY"
        assert "BIOLOGY EXAMINATION" in branded

    def test_question_text_and_marks(self, sample_exam):
        texts = _texts(_open(synthesize_document(sample_exam)))

        q2 = next(t for t in texts if t.startswith("2. "))
        assert "Describe osmosis.\nGive an example." in q2
        assert q2.endswith("[3 Marks]")

    def test_metadata_and_end_marker(self, sample_exam):
        texts = _texts(_open(synthesize_document(sample_exam)))

        assert "Grade: 10\tTime: 1 hour\tDate: ________________" in texts
        assert "INSTRUCTIONS TO CANDIDATES:" in texts
        assert "Write in black ink." in texts
        assert texts[-1] == END_MARKER

    def test_page_setup(self, sample_exam):
        section = _open(synthesize_document(sample_exam)).sections[0]
        assert section.page_width.mm == pytest.approx(210, abs=0.5)
        assert section.page_height.mm == pytest.approx(297, abs=0.5)


class TestWorksheetDocument:

    def test_sections_exported(self, sample_worksheet):
        doc = _open(synthesize_document(sample_worksheet))
        texts = _texts(doc)

        assert "Plant Life" in texts
        assert "Subject: Science   |   Grade: Grade 4" in texts
        assert "A __________ grows from a __________." in texts
        assert "[Illustration unavailable]" in texts

        matching = doc.tables[0]
        assert matching.cell(0, 0).text == "1. Root"
        assert matching.cell(1, 2).text == "B. Makes food"

    def test_crop_embedded_as_picture(self, sample_worksheet, quadrant_image):
        doc = _open(synthesize_document(sample_worksheet, images=SourceImageProvider.from_image(quadrant_image)))
        assert len(doc.inline_shapes) == 1

    def test_header_override(self, sample_worksheet, override_branding):
        texts = _texts(_open(synthesize_document(sample_worksheet, override_branding)))
        assert "RIVERSIDE ACADEMY" in texts


class TestWorksheetImageDocument:

    def test_picture_embedded(self, sample_worksheet_image):
        doc = _open(synthesize_document(sample_worksheet_image))
        assert len(doc.inline_shapes) == 1

    def test_undecodable_image_fails(self):
        with pytest.raises(ExportFailure):
            synthesize_document(GeneratedWorksheetImage(image_url="data:image/png;base64,AAAA"))

    def test_remote_image_fails(self):
        with pytest.raises(ExportFailure):
            synthesize_document(GeneratedWorksheetImage(image_url="https://example.com/page.png"))


def test_unsupported_data_is_export_failure():
    with pytest.raises(ExportFailure):
        synthesize_document({"questions": []})


def test_write_document_creates_file(sample_exam, tmp_path):
    path = write_document(sample_exam, tmp_path / "out" / "exam.docx")
    assert path.exists()
    assert path.read_bytes()[:2] == b"PK"


def test_failed_export_writes_nothing(tmp_path):
    path = tmp_path / "page.docx"
    with pytest.raises(ExportFailure):
        write_document(GeneratedWorksheetImage(image_url="data:image/png;base64,AAAA"), path)
    assert not path.exists()

