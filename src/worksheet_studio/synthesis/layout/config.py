"""
Module: synthesis.layout.config

Purpose:
    Configuration for the page layout engine.
    Defines page dimensions, margins, type sizes and the fixed heights
    of the interactive regions (drawing canvas, answer lines, math boxes).

Key Classes:
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - synthesis.layout.compose: Block heights
    - synthesis.layout.paginator: Page arrangement
    - synthesis.output.renderer / raster: Drawing
"""

from __future__ import annotations

from dataclasses import dataclass


# Standard A4 page dimensions at 200 DPI
DEFAULT_PAGE_WIDTH_PX = 1654
DEFAULT_PAGE_HEIGHT_PX = 2339
DEFAULT_DPI = 200


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    All sizes are pixels at `dpi`. The print renderer converts them to
    points; the raster renderer draws them as-is.

    Attributes:
        page_width: Page width in pixels
        page_height: Page height in pixels
        dpi: Dots per inch for rendering
        margin_top / margin_bottom / margin_left / margin_right: Margins
        footer_height: Band reserved at the page bottom for the footer
        block_spacing: Vertical spacing between sections or questions
        title_spacing: Gap between a section title and its body
        title_font_px / heading_font_px / body_font_px / small_font_px:
            Type sizes
        line_spacing: Line height as a multiple of the font size
        answer_line_gap: Vertical pitch of exam answer lines
        drawing_height: Fixed height of a drawing canvas
        math_columns: Problems per row in a math grid
        math_cell_height: Height of one math problem cell
        matching_row_height: Height of one matching row
        placeholder_height: Height of the image placeholder
        max_image_height: Tallest an illustration may be drawn
        logo_height: Height the branding logo is scaled to

    Example:
        >>> config = LayoutConfig()
        >>> config.available_width
        1414
    """

    # Page dimensions
    page_width: int = DEFAULT_PAGE_WIDTH_PX
    page_height: int = DEFAULT_PAGE_HEIGHT_PX
    dpi: int = DEFAULT_DPI

    # Margins
    margin_top: int = 100
    margin_bottom: int = 100
    margin_left: int = 120
    margin_right: int = 120
    footer_height: int = 60

    # Spacing
    block_spacing: int = 50
    title_spacing: int = 20

    # Type
    title_font_px: int = 64
    heading_font_px: int = 44
    body_font_px: int = 34
    small_font_px: int = 26
    line_spacing: float = 1.4

    # Fixed regions
    answer_line_gap: int = 60
    drawing_height: int = 620
    math_columns: int = 2
    math_cell_height: int = 150
    matching_row_height: int = 130
    placeholder_height: int = 420
    max_image_height: int = 900
    logo_height: int = 180

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive: {self.dpi}")
        if self.available_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.available_height <= 0:
            raise ValueError("Margins and footer exceed page height")
        if self.math_columns < 1:
            raise ValueError(f"math_columns must be at least 1: {self.math_columns}")
        if self.line_spacing < 1.0:
            raise ValueError(f"line_spacing must be >= 1.0: {self.line_spacing}")

    @property
    def available_width(self) -> int:
        """Width available for content (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def available_height(self) -> int:
        """Height available for content (excluding margins and footer band)."""
        return self.page_height - self.margin_top - self.margin_bottom - self.footer_height

    @property
    def content_bottom(self) -> int:
        """Y coordinate where content must stop."""
        return self.page_height - self.margin_bottom - self.footer_height

    def line_height(self, font_px: int) -> int:
        """Line pitch for a font size."""
        return int(round(font_px * self.line_spacing))
