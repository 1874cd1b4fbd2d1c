"""
Tests for derived values shared by the view and the document exporter.
"""

import pytest

from worksheet_studio.core.derived import (
    DATE_PLACEHOLDER,
    WORKSHEET_FOOTER,
    answer_line_count,
    date_text,
    exam_footer_text,
    exam_header_text,
    marks_annotation,
    marks_label,
    matching_columns,
    question_label,
    question_text_lines,
    split_fill_blank,
    subject_heading,
    total_marks,
    worksheet_footer_text,
)
from worksheet_studio.core.models import BrandingOptions
from worksheet_studio.core.models.content import MatchPair


@pytest.mark.parametrize("marks,lines", [(0, 2), (1, 2), (2, 2), (3, 3), (12, 3)])
def test_answer_line_count(marks, lines):
    """Questions worth more than two marks get an extra line."""
    assert answer_line_count(marks) == lines


def test_total_marks_sums_questions(sample_exam):
    assert total_marks(sample_exam.questions) == 9
    assert sample_exam.total_marks == 9


def test_total_marks_of_no_questions_is_zero():
    assert total_marks([]) == 0


class TestBrandingOverride:

    def test_header_uses_institution_without_override(self, sample_exam):
        assert exam_header_text(sample_exam, BrandingOptions()) == "Hillside High"

    def test_header_uses_override(self, sample_exam, override_branding):
        assert exam_header_text(sample_exam, override_branding) == "Riverside Academy"

    def test_blank_override_counts_as_unset(self, sample_exam):
        branding = BrandingOptions(header_text_override="   ")
        assert branding.header_override is None
        assert exam_header_text(sample_exam, branding) == "Hillside High"

    def test_exam_footer_page_counter(self):
        assert exam_footer_text(None, 2, 3) == "Page 2 of 3"

    def test_exam_footer_override(self, override_branding):
        assert exam_footer_text(override_branding, 1, 1) == "Riverside Academy"

    def test_worksheet_footer(self, override_branding):
        assert worksheet_footer_text(None) == WORKSHEET_FOOTER
        assert worksheet_footer_text(override_branding) == "Riverside Academy"


def test_subject_heading(sample_exam):
    assert subject_heading(sample_exam) == "Biology Examination"


def test_date_text_placeholder_when_missing():
    assert date_text(None) == DATE_PLACEHOLDER
    assert date_text(" 12 May ") == "12 May"


@pytest.mark.parametrize("number,label", [
    ("1", "1."),
    ("1a", "1a."),
    ("2.", "2."),
    ("3)", "3)"),
    ("", ""),
])
def test_question_label(number, label):
    assert question_label(number) == label


def test_marks_labels():
    assert marks_label(4) == "[4]"
    assert marks_annotation(4) == "[4 Marks]"


def test_question_text_lines_keeps_breaks_and_blank_lines():
    assert question_text_lines("a\r\nb\n\nc") == ("a", "b", "", "c")


class TestSplitFillBlank:

    def test_two_blanks_three_fragments(self):
        fragments, blanks = split_fill_blank("A ___ B ___")
        assert fragments == ("A ", " B ", "")
        assert blanks == 2

    def test_no_blank(self):
        assert split_fill_blank("Nothing here") == (("Nothing here",), 0)

    def test_empty_sentence(self):
        assert split_fill_blank("") == ((), 0)


def test_matching_columns_keep_input_order():
    pairs = [MatchPair("Cat", "Meow"), MatchPair("Dog", "Woof")]
    assert matching_columns(pairs) == (("Cat", "Dog"), ("Meow", "Woof"))
