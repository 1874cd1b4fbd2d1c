"""
Unit tests for the paginator.

Items carry fixed-height compositions so page breaks can be computed by
hand. With the config below the content area runs from y=100 to y=840.
"""
import pytest

from worksheet_studio.synthesis.layout import (
    Composition,
    InstructionsLayout,
    LayoutConfig,
    PagePlan,
    RenderTarget,
    SectionLayout,
    TextBlock,
    WorksheetHeader,
    footer_top,
    paginate,
)


@pytest.fixture
def config():
    return LayoutConfig(
        page_height=1000,
        margin_top=100,
        margin_bottom=100,
        footer_height=60,
        block_spacing=20,
    )


@pytest.fixture
def section_factory():
    """Factory for (SectionLayout, Composition) pairs of a given height."""
    def _create(height: int, section_id: str = "s"):
        item = SectionLayout(section_id, None, TextBlock("x"))
        return item, Composition(ops=(), height=height)
    return _create


def _ids(page: PagePlan):
    return [p.item.section_id for p in page.placements if isinstance(p.item, SectionLayout)]


class TestPaginate:

    def test_empty_input_yields_one_empty_page(self, config):
        result = paginate([], config)
        assert result.page_count == 1
        assert result.pages[0].is_empty

    def test_items_stack_with_spacing(self, config, section_factory):
        # Arrange
        items = [section_factory(100, "a"), section_factory(200, "b")]

        # Act
        result = paginate(items, config)

        # Assert
        page = result.pages[0]
        assert [p.top for p in page.placements] == [100, 220]
        assert page.height_used == 320

    def test_item_that_does_not_fit_moves_to_next_page(self, config, section_factory):
        # 400 + 20 + 300 = 720 fits in 740; another 20 + 100 does not
        items = [section_factory(400, "a"), section_factory(300, "b"), section_factory(100, "c")]

        result = paginate(items, config)

        assert result.page_count == 2
        assert _ids(result.pages[0]) == ["a", "b"]
        assert _ids(result.pages[1]) == ["c"]
        assert result.pages[1].placements[0].top == config.margin_top

    def test_exact_fit_stays_on_page(self, config, section_factory):
        items = [section_factory(360, "a"), section_factory(360, "b")]
        assert paginate(items, config).page_count == 1

    def test_header_keeps_with_first_section(self, config, section_factory):
        """A header never ends a page on its own."""
        header = (WorksheetHeader(title="T"), Composition(ops=(), height=100))
        instructions = (InstructionsLayout(("Do it",)), Composition(ops=(), height=100))
        items = [section_factory(500, "a"), header, instructions, section_factory(200, "b")]

        result = paginate(items, config)

        assert result.page_count == 2
        second = result.pages[1]
        assert isinstance(second.placements[0].item, WorksheetHeader)
        assert _ids(second) == ["b"]

    def test_oversized_item_warns_and_is_placed(self, config, section_factory):
        result = paginate([section_factory(100, "a"), section_factory(900, "big")], config)

        assert result.page_count == 2
        assert _ids(result.pages[1]) == ["big"]
        assert len(result.warnings) == 1
        assert "overflows" in result.warnings[0]

    def test_indices_are_sequential(self, config, section_factory):
        items = [section_factory(700, str(i)) for i in range(3)]
        assert [p.index for p in paginate(items, config).pages] == [0, 1, 2]


class TestFooterTop:

    def test_screen_pins_footer(self, config, section_factory):
        page = paginate([section_factory(100)], config).pages[0]
        assert footer_top(page, config, RenderTarget.SCREEN) == config.content_bottom

    def test_print_flows_footer_after_content(self, config, section_factory):
        page = paginate([section_factory(100)], config).pages[0]
        assert footer_top(page, config, RenderTarget.PRINT) == 100 + 100 + config.block_spacing

    def test_print_never_below_pinned_position(self, config, section_factory):
        page = paginate([section_factory(735)], config).pages[0]
        assert footer_top(page, config, RenderTarget.PRINT) == config.content_bottom

    def test_empty_page_uses_pinned_position(self, config):
        page = paginate([], config).pages[0]
        assert footer_top(page, config, RenderTarget.PRINT) == config.content_bottom
