"""
Module: content

Purpose:
    Payload variants for worksheet sections. Each section type carries
    exactly one of these shapes, so the layout engine can dispatch on the
    payload instead of poking at an untyped dictionary.

Key Classes:
    - TextContent, MatchingContent, FillBlankContent
    - DrawingContent, MathContent, ImageContent
    - MatchPair, MathProblem

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.sections
    - core.schemas.validator
    - synthesis.layout.sections
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True, slots=True)
class TextContent:
    """Plain paragraph."""

    text: str = ""


@dataclass(frozen=True, slots=True)
class MatchPair:
    """One left/right pair of a matching exercise."""

    left: str
    right: str


@dataclass(frozen=True, slots=True)
class MatchingContent:
    """Matching exercise; pairs keep the order the generator produced."""

    pairs: Tuple[MatchPair, ...] = ()


@dataclass(frozen=True, slots=True)
class FillBlankContent:
    """Sentence with ``___`` tokens marking the blanks."""

    sentence: str = ""


@dataclass(frozen=True, slots=True)
class DrawingContent:
    """Free drawing area with a prompt."""

    prompt: str = ""


@dataclass(frozen=True, slots=True)
class MathProblem:
    """Single arithmetic prompt such as ``3 + 4``."""

    q: str


@dataclass(frozen=True, slots=True)
class MathContent:
    """Grid of math problems, each answered in an empty box."""

    problems: Tuple[MathProblem, ...] = ()


@dataclass(frozen=True, slots=True)
class ImageContent:
    """
    Illustration section.

    Attributes:
        text: Caption shown above the picture
        prompt: Instruction shown below the picture
    """

    text: Optional[str] = None
    prompt: Optional[str] = None


SectionContent = Union[
    TextContent,
    MatchingContent,
    FillBlankContent,
    DrawingContent,
    MathContent,
    ImageContent,
]
