"""
Module: exam

Purpose:
    Provides ExamQuestion and ExamData - the digitized exam paper.
    Total marks are never stored; they are always calculated from the
    questions through core.derived.total_marks.

Dependencies:
    - dataclasses (std)
    - core.derived (total_marks)

Used By:
    - core.schemas.validator
    - synthesis.layout.view
    - synthesis.output.docx_writer
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class ExamQuestion:
    """
    Single exam question (immutable).

    Attributes:
        id: Stable identifier
        number: Display label ("1", "1a", "II"); not an index
        text: Question text, may contain line breaks
        marks: Non-negative mark value

    Invariants:
        - marks >= 0
    """

    id: str
    number: str
    text: str
    marks: int = 0

    def __post_init__(self) -> None:
        """Validate marks on construction."""
        if self.marks < 0:
            raise ValueError(f"Marks cannot be negative: {self.marks}")


@dataclass(frozen=True, slots=True)
class ExamData:
    """
    Digitized exam paper (immutable).

    Attributes:
        institution: Institution name shown in the title block
        subject: Subject, shown as "<subject> Examination"
        grade: Grade or class
        duration: Time allowed
        date: Optional exam date
        instructions: Ordered instructions to candidates
        questions: Ordered questions; order is authoritative
    """

    institution: str = ""
    subject: str = ""
    grade: str = ""
    duration: str = ""
    date: Optional[str] = None
    instructions: Tuple[str, ...] = ()
    questions: Tuple[ExamQuestion, ...] = ()

    @property
    def total_marks(self) -> int:
        """Sum of question marks (calculated, never stored)."""
        from worksheet_studio.core.derived import total_marks
        return total_marks(self.questions)
