"""
Module: branding

Purpose:
    BrandingOptions - school branding passed explicitly into every
    synthesis entry point (never held as module state).

Dependencies:
    - PIL.Image (logo type)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class BrandingOptions:
    """
    Read-only display parameters.

    Attributes:
        header_text_override: Replaces the institution name in every
            output when set (blank strings count as unset)
        logo_image: Optional school logo
    """

    header_text_override: Optional[str] = None
    logo_image: Optional[Image.Image] = None

    @property
    def header_override(self) -> Optional[str]:
        """Stripped override text, or None when not set."""
        if self.header_text_override and self.header_text_override.strip():
            return self.header_text_override.strip()
        return None
