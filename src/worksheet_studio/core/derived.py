"""
Module: derived

Purpose:
    Derived fields shared by the on-screen/print renderer and the document
    exporter. Both outputs call these functions directly on the data model;
    neither keeps its own copy of a threshold or a text rule.

Key Functions:
    - answer_line_count(marks): Blank answer lines reserved for a question
    - total_marks(questions): Sum of question marks
    - exam_header_text(exam, branding): Institution or branding override
    - date_text(date): Date or blank-line placeholder
    - question_label(number): "1" -> "1."
    - question_text_lines(text): Question text split on literal line breaks
    - split_fill_blank(sentence): Text fragments around ``___`` blanks
    - matching_columns(pairs): Left and right columns of a matching exercise

Dependencies:
    - core.models (TYPE_CHECKING only)

Used By:
    - synthesis.layout.view, synthesis.layout.sections
    - synthesis.output.docx_writer
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from .models import BrandingOptions, ExamData, ExamQuestion, MatchPair

#: Marks above this get the extended answer space.
EXTENDED_ANSWER_THRESHOLD = 2
BASE_ANSWER_LINES = 2
EXTENDED_ANSWER_LINES = 3

#: Literal token marking a blank in fill-blank sentences.
BLANK_TOKEN = "___"

DATE_PLACEHOLDER = "________________"
WORKSHEET_FOOTER = "Created with Worksheet Studio"


def answer_line_count(marks: int) -> int:
    """
    Number of blank answer lines to reserve below a question.

    Args:
        marks: Question marks

    Returns:
        EXTENDED_ANSWER_LINES when marks exceed the threshold,
        otherwise BASE_ANSWER_LINES

    Example:
        >>> [answer_line_count(m) for m in (0, 2, 3, 10)]
        [2, 2, 3, 3]
    """
    if marks > EXTENDED_ANSWER_THRESHOLD:
        return EXTENDED_ANSWER_LINES
    return BASE_ANSWER_LINES


def total_marks(questions: Iterable[ExamQuestion]) -> int:
    """Sum of marks over all questions."""
    return sum(q.marks for q in questions)


def exam_header_text(exam: ExamData, branding: Optional[BrandingOptions] = None) -> str:
    """Title block text: the branding override if set, else the institution."""
    if branding is not None and branding.header_override:
        return branding.header_override
    return exam.institution


def subject_heading(exam: ExamData) -> str:
    """Subheading below the title block."""
    return f"{exam.subject} Examination".strip()


def exam_footer_text(
    branding: Optional[BrandingOptions],
    page_number: int,
    page_count: int,
) -> str:
    """Exam footer: the branding override if set, else the page counter."""
    if branding is not None and branding.header_override:
        return branding.header_override
    return f"Page {page_number} of {page_count}"


def worksheet_footer_text(branding: Optional[BrandingOptions]) -> str:
    """Worksheet footer: the branding override if set, else the product credit."""
    if branding is not None and branding.header_override:
        return branding.header_override
    return WORKSHEET_FOOTER


def date_text(date: Optional[str]) -> str:
    """The exam date, or a blank line to fill in by hand."""
    if date and date.strip():
        return date.strip()
    return DATE_PLACEHOLDER


def question_label(number: str) -> str:
    """
    Display label for a question number.

    Example:
        >>> question_label("1"), question_label("1a)"), question_label("")
        ('1.', '1a)', '')
    """
    number = number.strip()
    if not number or number[-1] in ".):":
        return number
    return f"{number}."


def marks_label(marks: int) -> str:
    """Short marks annotation used beside questions."""
    return f"[{marks}]"


def marks_annotation(marks: int) -> str:
    """Long marks annotation used in the exported document."""
    return f"[{marks} Marks]"


def question_text_lines(text: str) -> Tuple[str, ...]:
    """
    Split question text on literal line breaks.

    Blank lines are kept so paragraph spacing in the source survives.
    """
    return tuple(text.replace("\r\n", "\n").replace("\r", "\n").split("\n"))


def split_fill_blank(sentence: str) -> Tuple[Tuple[str, ...], int]:
    """
    Split a fill-blank sentence into text fragments.

    Args:
        sentence: Sentence containing BLANK_TOKEN occurrences

    Returns:
        (fragments, blank_count) where blank_count is the number of
        token occurrences, i.e. len(fragments) - 1

    Example:
        >>> split_fill_blank("The ___ has ___ legs")
        (('The ', ' has ', ' legs'), 2)
    """
    if not sentence:
        return (), 0
    fragments = tuple(sentence.split(BLANK_TOKEN))
    return fragments, len(fragments) - 1


def matching_columns(pairs: Sequence[MatchPair]) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Left and right columns in input order (never shuffled)."""
    return tuple(p.left for p in pairs), tuple(p.right for p in pairs)
