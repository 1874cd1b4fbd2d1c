"""
Module: errors

Purpose:
    Error taxonomy shared by the synthesis pipeline. Every failure the
    controller can surface to the user derives from StudioError so the
    banner logic can catch one type.

Key Classes:
    - StudioError: Base class
    - MalformedResponse: AI payload missing required structure
    - ImageDecodeFailure: Raster could not be decoded
    - ExportFailure: Document serialization failed
    - NetworkAcquisitionFailure: Reference image URL could not be fetched
    - GenerationFailure: Content generator call failed

Used By:
    - core.schemas.validator
    - synthesis.images, synthesis.output, synthesis.acquisition
    - synthesis.controller
"""

from __future__ import annotations


class StudioError(Exception):
    """Base class for recoverable Worksheet Studio failures."""

    #: Message shown in the error banner.
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str = "", *, user_message: str | None = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message

    def banner_text(self) -> str:
        """Text suitable for the dismissible error banner."""
        return self.user_message


class MalformedResponse(StudioError):
    """Raw generator output does not have the structure of a worksheet or exam."""

    user_message = "The generated content could not be read. Please try again."


class ImageDecodeFailure(StudioError):
    """Image bytes, data URL or file could not be decoded into a raster."""

    user_message = "The image could not be read. Please use a PNG, JPEG or WebP file."


class ExportFailure(StudioError):
    """Document serialization failed; the export action is aborted."""

    user_message = "Failed to generate Word document."


class NetworkAcquisitionFailure(StudioError):
    """Reference image URL was blocked, unreachable or not an image."""

    user_message = (
        "Unable to load image from URL due to security/CORS restrictions. "
        "Please save the image to your device and upload it."
    )


class GenerationFailure(StudioError):
    """The AI content generator failed to produce a result."""

    user_message = "Generation failed. Please try again."
