"""
Module: synthesis.generation

Purpose:
    Contract for the content-generation collaborator. Generators return
    raw payloads (JSON-shaped mappings or text, image data URLs or base64);
    the controller validates them into the data model.

Key Classes:
    - ContentGenerator: Abstract generator interface
    - StaticContentGenerator: Replays canned payloads (CLI, tests, demos)

Dependencies:
    - synthesis.acquisition: ReferenceImage

Used By:
    - synthesis.controller
    - worksheet_studio.cli
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional, Sequence, Union

from worksheet_studio.errors import GenerationFailure

from .acquisition import ReferenceImage

logger = logging.getLogger(__name__)

RawPayload = Union[Mapping[str, Any], str, bytes]
SearchPayload = Union[Sequence[Mapping[str, Any]], RawPayload]


class ContentGenerator(ABC):
    """
    Abstract interface to the content-generation service.

    Implementations raise GenerationFailure (or any exception, which the
    controller wraps) when a request fails.
    """

    @abstractmethod
    def generate_worksheet(self, prompt: str, reference: Optional[ReferenceImage] = None) -> RawPayload:
        """Structured worksheet payload for a prompt and optional reference."""

    @abstractmethod
    def generate_worksheet_image(self, prompt: str, reference: Optional[ReferenceImage] = None) -> str:
        """A full worksheet page as a data URL or base64 PNG."""

    @abstractmethod
    def generate_exam(self, image: ReferenceImage) -> RawPayload:
        """Structured exam payload transcribed from a photographed paper."""

    @abstractmethod
    def generate_section_image(self, prompt: str) -> str:
        """A single illustration as a data URL or base64 PNG."""

    @abstractmethod
    def search_worksheets(self, query: str) -> SearchPayload:
        """Web resources for a topic: a list of {"title", "uri"} objects."""


class StaticContentGenerator(ContentGenerator):
    """
    Generator that returns fixed payloads.

    Any payload left unset makes its method raise GenerationFailure, the
    same way a real service failure would surface.

    Example:
        >>> gen = StaticContentGenerator(worksheet={"title": "Plants", "sections": []})
        >>> gen.generate_worksheet("plants")["title"]
        'Plants'
    """

    def __init__(
        self,
        *,
        worksheet: Optional[RawPayload] = None,
        worksheet_image: Optional[str] = None,
        exam: Optional[RawPayload] = None,
        section_image: Optional[str] = None,
        search_results: Optional[SearchPayload] = None,
    ) -> None:
        self._worksheet = worksheet
        self._worksheet_image = worksheet_image
        self._exam = exam
        self._section_image = section_image
        self._search_results = search_results
        self.calls: list[tuple[str, str]] = []

    def generate_worksheet(self, prompt: str, reference: Optional[ReferenceImage] = None) -> RawPayload:
        self.calls.append(("worksheet", prompt))
        return self._require(self._worksheet, "worksheet")

    def generate_worksheet_image(self, prompt: str, reference: Optional[ReferenceImage] = None) -> str:
        self.calls.append(("worksheet_image", prompt))
        return self._require(self._worksheet_image, "worksheet image")

    def generate_exam(self, image: ReferenceImage) -> RawPayload:
        self.calls.append(("exam", image.mime_type))
        return self._require(self._exam, "exam")

    def generate_section_image(self, prompt: str) -> str:
        self.calls.append(("section_image", prompt))
        return self._require(self._section_image, "section image")

    def search_worksheets(self, query: str) -> SearchPayload:
        self.calls.append(("search", query))
        return self._require(self._search_results, "search results")

    @staticmethod
    def _require(payload: Any, what: str) -> Any:
        if payload is None:
            logger.debug(f"No canned {what} payload configured")
            raise GenerationFailure(f"No {what} available")
        return payload
