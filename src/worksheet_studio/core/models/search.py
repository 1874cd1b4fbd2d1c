"""
Module: search

Purpose:
    SearchResult - one web resource suggested as worksheet inspiration.
    The user opens the link and brings an image back through the
    reference URL loader.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    """
    A titled link.

    Attributes:
        title: Display title (the URI when the service gave none)
        uri: http(s) address of the resource
    """

    title: str
    uri: str

    def __post_init__(self) -> None:
        if not self.uri:
            raise ValueError("SearchResult needs a uri")
