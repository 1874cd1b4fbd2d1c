"""
Module: synthesis.layout.paginator

Purpose:
    Arrange composed items onto pages using space-based placement.
    Only rule: headers and instructions stay with the item after them.

Key Functions:
    - paginate(): Main pagination function
    - footer_top(): Footer position for a render target

Algorithm:
    1. Group each header/instructions item with the item that follows
    2. Place the whole group on the current page if it fits
    3. Otherwise start a new page and place it there
    4. A group taller than an empty page is placed anyway, with a warning

Dependencies:
    - synthesis.layout.models: Composition, Placement, PagePlan
    - synthesis.layout.config: LayoutConfig

Used By:
    - synthesis.layout.view: View synthesis
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .config import LayoutConfig
from .models import (
    Composition,
    ExamHeader,
    InstructionsLayout,
    LayoutItem,
    PagePlan,
    Placement,
    RenderTarget,
    WorksheetHeader,
)

logger = logging.getLogger(__name__)

ComposedItem = Tuple[LayoutItem, Composition]


@dataclass(frozen=True)
class PaginationResult:
    """Pages plus any layout warnings."""
    pages: Tuple[PagePlan, ...]
    warnings: Tuple[str, ...] = field(default=())

    @property
    def page_count(self) -> int:
        return len(self.pages)


def paginate(items: Sequence[ComposedItem], config: LayoutConfig) -> PaginationResult:
    """
    Arrange composed items onto pages using atomic grouping.

    Args:
        items: (item, composition) pairs in reading order
        config: Layout configuration

    Returns:
        PaginationResult; an empty input still yields one empty page so
        every document has a page to carry its footer
    """
    if not items:
        return PaginationResult(pages=(PagePlan(index=0, placements=(), height_used=0),))

    pages: List[PagePlan] = []
    warnings: List[str] = []

    current: List[Placement] = []
    current_y = config.margin_top
    page_bottom = config.content_bottom

    i = 0
    while i < len(items):
        group = _get_atomic_group(i, items)

        spacing = config.block_spacing if current else 0
        placements, group_height = _stack(group, current_y + spacing, config)
        space_left = page_bottom - current_y

        if spacing + group_height > space_left and current:
            pages.append(_page(len(pages), current, current_y, config))
            current = []
            current_y = config.margin_top
            spacing = 0
            placements, group_height = _stack(group, current_y, config)
            space_left = page_bottom - current_y

        if group_height > space_left:
            message = (
                f"Item group overflows page {len(pages)}: "
                f"{group_height}px needed, {space_left}px available"
            )
            logger.warning(message)
            warnings.append(message)

        current.extend(placements)
        current_y += spacing + group_height
        i += len(group)

    if current:
        pages.append(_page(len(pages), current, current_y, config))

    logger.info(f"Paginated {len(items)} items onto {len(pages)} pages")
    return PaginationResult(pages=tuple(pages), warnings=tuple(warnings))


def _stack(
    group: Sequence[ComposedItem],
    top: int,
    config: LayoutConfig,
) -> Tuple[List[Placement], int]:
    """Place a group's items one below another starting at `top`."""
    placements = []
    y = top
    for j, (item, composition) in enumerate(group):
        if j > 0:
            y += config.block_spacing
        placements.append(Placement(item=item, top=y, height=composition.height, ops=composition.ops))
        y += composition.height
    return placements, y - top


def _page(index: int, placements: List[Placement], current_y: int, config: LayoutConfig) -> PagePlan:
    return PagePlan(
        index=index,
        placements=tuple(placements),
        height_used=current_y - config.margin_top,
    )


def _get_atomic_group(start_idx: int, items: Sequence[ComposedItem]) -> List[ComposedItem]:
    """
    Get the next atomic group starting at start_idx.

    A header or instructions block grabs the next item, so a title never
    ends a page on its own. Chains extend: header, instructions, first
    section all travel together.
    """
    group = [items[start_idx]]
    current_idx = start_idx
    while current_idx + 1 < len(items) and _keeps_with_next(items[current_idx][0]):
        group.append(items[current_idx + 1])
        current_idx += 1
    return group


def _keeps_with_next(item: LayoutItem) -> bool:
    return isinstance(item, (WorksheetHeader, ExamHeader, InstructionsLayout))


def footer_top(page: PagePlan, config: LayoutConfig, target: RenderTarget) -> int:
    """
    Y coordinate of the footer band on a page.

    Screen pins the footer to the bottom of every page; print flows it
    directly after the page's last item, never lower than the pinned
    position.
    """
    pinned = config.content_bottom
    if target is RenderTarget.SCREEN or page.is_empty:
        return pinned
    flowed = page.placements[-1].bottom + config.block_spacing
    return min(flowed, pinned)
