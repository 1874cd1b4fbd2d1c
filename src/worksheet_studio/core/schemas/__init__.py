"""
Schemas Package

Validation of raw generator responses into core models.
"""

from .validator import (
    parse_response,
    parse_worksheet,
    parse_exam,
    parse_search_results,
    coerce_marks,
    MalformedResponse,
)

__all__ = [
    "parse_response",
    "parse_worksheet",
    "parse_exam",
    "parse_search_results",
    "coerce_marks",
    "MalformedResponse",
]
