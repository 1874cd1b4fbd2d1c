"""
Module: synthesis.layout.sections

Purpose:
    Turn one WorksheetSection into a SectionLayout. Dispatch is explicit
    and ordered: image sections first (type image OR a four-element box),
    then matching, fill-blank, drawing, math, and text as the fallback.

Key Functions:
    - layout_section(): Section -> SectionLayout
    - layout_sections(): Every section of a worksheet, in order

Dependencies:
    - worksheet_studio.core.derived: Shared split/column helpers
    - synthesis.images: Decoding and cropping
    - synthesis.layout.regeneration: Pending markers

Used By:
    - synthesis.layout.view: Worksheet views
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Tuple

from PIL import Image

from worksheet_studio.core.derived import matching_columns, split_fill_blank
from worksheet_studio.core.models import (
    DrawingContent,
    FillBlankContent,
    ImageContent,
    MatchingContent,
    MathContent,
    SectionType,
    TextContent,
    WorksheetSection,
    is_image_section,
)
from worksheet_studio.errors import ImageDecodeFailure, NetworkAcquisitionFailure
from worksheet_studio.synthesis.images import ImageProvider, decode_image, is_remote_url

from .config import LayoutConfig
from .models import (
    DrawingBlock,
    FillBlankBlock,
    ImageBlock,
    MatchingBlock,
    MathBlock,
    MathCell,
    RegenerateControl,
    SectionLayout,
    TextBlock,
)
from .regeneration import RegenerationTracker

logger = logging.getLogger(__name__)

RegenerateCallback = Callable[[str, str], Any]
UrlLoader = Callable[[str], bytes]


def layout_section(
    section: WorksheetSection,
    *,
    config: Optional[LayoutConfig] = None,
    images: Optional[ImageProvider] = None,
    regeneration: Optional[RegenerationTracker] = None,
    on_regenerate: Optional[RegenerateCallback] = None,
    url_loader: Optional[UrlLoader] = None,
) -> SectionLayout:
    """
    Build the layout descriptor for one section.

    Args:
        section: Section to lay out
        config: Layout configuration (fixed region sizes)
        images: Crop provider for the reference image, if there is one
        regeneration: Pending markers for regenerate controls
        on_regenerate: Regeneration hook; controls are only emitted when set
        url_loader: Fetches remote generated-image URLs; without one,
            remote URLs fall back to the crop or placeholder

    Returns:
        SectionLayout for the section
    """
    config = config or LayoutConfig()

    if is_image_section(section):
        block = _image_block(section, images, regeneration, on_regenerate, url_loader)
    elif section.type is SectionType.MATCHING:
        block = _matching_block(section)
    elif section.type is SectionType.FILL_BLANK:
        block = _fill_blank_block(section)
    elif section.type is SectionType.DRAWING:
        prompt = section.content.prompt if isinstance(section.content, DrawingContent) else ""
        block = DrawingBlock(prompt=prompt, height=config.drawing_height)
    elif section.type is SectionType.MATH:
        problems = section.content.problems if isinstance(section.content, MathContent) else ()
        block = MathBlock(
            cells=tuple(MathCell(question=p.q) for p in problems),
            columns=config.math_columns,
        )
    else:
        block = TextBlock(text=_plain_text(section.content))

    logger.debug(f"Section {section.id}: {type(block).__name__}")
    return SectionLayout(section_id=section.id, title=section.title, block=block)


def layout_sections(
    sections: Iterable[WorksheetSection],
    **kwargs: Any,
) -> Tuple[SectionLayout, ...]:
    """Lay out sections in order; keyword arguments go to layout_section."""
    return tuple(layout_section(s, **kwargs) for s in sections)


# ─────────────────────────────────────────────────────────────────────────────
# Variants
# ─────────────────────────────────────────────────────────────────────────────

def _image_block(
    section: WorksheetSection,
    images: Optional[ImageProvider],
    regeneration: Optional[RegenerationTracker],
    on_regenerate: Optional[RegenerateCallback],
    url_loader: Optional[UrlLoader],
) -> ImageBlock:
    """Generated image, then reference crop, then placeholder."""
    if isinstance(section.content, ImageContent):
        caption, note = section.content.text, section.content.prompt
    else:
        caption, note = _plain_text(section.content) or None, None

    control = None
    if section.image_prompt and on_regenerate is not None:
        control = RegenerateControl(
            section_id=section.id,
            prompt=section.image_prompt,
            pending=regeneration.is_pending(section.id) if regeneration else False,
            callback=on_regenerate,
        )

    errors: List[str] = []

    if section.generated_image_url:
        try:
            picture = _load_generated(section.generated_image_url, url_loader)
        except (ImageDecodeFailure, NetworkAcquisitionFailure) as e:
            logger.warning(f"Section {section.id}: generated image unusable: {e}")
            errors.append(str(e))
        else:
            if picture is not None:
                return ImageBlock(
                    source="generated",
                    image=picture,
                    image_url=section.generated_image_url,
                    caption=caption,
                    prompt_note=note,
                    regenerate=control,
                )

    box = section.crop_box
    if images is not None and box is not None:
        try:
            crop = images.get_crop(box)
        except ImageDecodeFailure as e:
            logger.warning(f"Section {section.id}: reference image unusable: {e}")
            errors.append(str(e))
            crop = None
        if crop is not None:
            return ImageBlock(
                source="cropped",
                image=crop,
                caption=caption,
                prompt_note=note,
                regenerate=control,
            )

    return ImageBlock(
        source="placeholder",
        caption=caption,
        prompt_note=note,
        regenerate=control,
        error="; ".join(errors) or None,
    )


def _load_generated(url: str, url_loader: Optional[UrlLoader]) -> Optional[Image.Image]:
    """Decode a generated illustration; None when a remote URL can't be loaded."""
    if is_remote_url(url):
        if url_loader is None:
            logger.debug(f"No loader for remote image {url[:60]}")
            return None
        return decode_image(url_loader(url))
    return decode_image(url)


def _matching_block(section: WorksheetSection) -> MatchingBlock:
    pairs = section.content.pairs if isinstance(section.content, MatchingContent) else ()
    left, right = matching_columns(pairs)
    return MatchingBlock(left=left, right=right)


def _fill_blank_block(section: WorksheetSection) -> FillBlankBlock:
    sentence = section.content.sentence if isinstance(section.content, FillBlankContent) else ""
    fragments, blank_count = split_fill_blank(sentence)
    return FillBlankBlock(fragments=fragments, blank_count=blank_count)


def _plain_text(content: Any) -> str:
    if isinstance(content, TextContent):
        return content.text
    if isinstance(content, ImageContent):
        return content.text or ""
    return ""
