"""
Tests for section layout dispatch.

Every section type maps to exactly one block; image sections fall back
from generated image to reference crop to placeholder.
"""
import pytest

from conftest import png_data_url
from worksheet_studio.core.schemas import parse_worksheet
from worksheet_studio.errors import NetworkAcquisitionFailure
from worksheet_studio.synthesis.images import SourceImageProvider
from worksheet_studio.synthesis.layout import (
    DrawingBlock,
    FillBlankBlock,
    ImageBlock,
    LayoutConfig,
    MatchingBlock,
    MathBlock,
    RegenerationTracker,
    TextBlock,
    layout_section,
    layout_sections,
)


def _section(payload):
    return parse_worksheet({"sections": [payload]}).sections[0]


class TestDispatch:

    def test_each_type_gets_its_block(self, sample_worksheet):
        layouts = layout_sections(sample_worksheet.sections)

        blocks = [type(l.block) for l in layouts]
        assert blocks == [TextBlock, MatchingBlock, FillBlankBlock, DrawingBlock, MathBlock, ImageBlock]

    def test_type_absent_with_full_box_is_image(self):
        layout = layout_section(_section({"id": "x", "boundingBox": [0, 0, 10, 10]}))
        assert isinstance(layout.block, ImageBlock)

    def test_fill_blank_with_three_element_box(self):
        """Declared type survives a short box: 2 blanks, 3 fragments."""
        layout = layout_section(_section({
            "type": "fill-blank",
            "boundingBox": [0, 0, 100],
            "content": {"sentence": "A ___ B ___"},
        }))

        assert isinstance(layout.block, FillBlankBlock)
        assert layout.block.blank_count == 2
        assert len(layout.block.fragments) == 3

    def test_matching_keeps_pair_order(self, sample_worksheet):
        layout = layout_section(sample_worksheet.find_section("match"))
        assert layout.block.left == ("Root", "Leaf")
        assert layout.block.right == ("Absorbs water", "Makes food")
        assert layout.block.row_count == 2

    def test_drawing_and_math_use_config(self, sample_worksheet):
        config = LayoutConfig(drawing_height=400, math_columns=3)

        drawing = layout_section(sample_worksheet.find_section("draw"), config=config)
        math = layout_section(sample_worksheet.find_section("sums"), config=config)

        assert drawing.block.height == 400
        assert math.block.columns == 3
        assert [c.question for c in math.block.cells] == ["2 + 3", "4 x 5", "9 - 1"]

    def test_title_is_carried(self, sample_worksheet):
        layout = layout_section(sample_worksheet.find_section("intro"))
        assert layout.title == "Read"
        assert layout.section_id == "intro"


class TestImageFallback:

    @pytest.fixture
    def image_section(self):
        return _section({
            "id": "pic",
            "type": "image",
            "boundingBox": [0, 0, 500, 500],
            "imagePrompt": "A cat",
            "content": {"text": "Caption", "prompt": "Colour it in."},
        })

    def test_generated_image_wins(self, image_section, quadrant_image):
        section = image_section.with_generated_image(png_data_url((40, 30), "blue"))

        block = layout_section(section, images=SourceImageProvider.from_image(quadrant_image)).block

        assert block.source == "generated"
        assert block.image.size == (40, 30)
        assert block.caption == "Caption"
        assert block.prompt_note == "Colour it in."

    def test_crop_used_without_generated_image(self, image_section, quadrant_image):
        block = layout_section(image_section, images=SourceImageProvider.from_image(quadrant_image)).block

        assert block.source == "cropped"
        assert block.image.size == (200, 100)
        assert block.image.getpixel((5, 5)) == (255, 0, 0)

    def test_placeholder_without_reference(self, image_section):
        block = layout_section(image_section).block
        assert block.is_placeholder
        assert block.error is None

    def test_bad_generated_image_falls_back_to_crop(self, image_section, quadrant_image):
        section = image_section.with_generated_image("data:image/png;base64,AAAA")

        block = layout_section(section, images=SourceImageProvider.from_image(quadrant_image)).block

        assert block.source == "cropped"

    def test_undecodable_reference_gives_placeholder_with_error(self, image_section):
        block = layout_section(image_section, images=SourceImageProvider(b"junk")).block

        assert block.is_placeholder
        assert block.error

    def test_remote_url_needs_loader(self, image_section):
        section = image_section.with_generated_image("https://example.com/cat.png")

        assert layout_section(section).block.is_placeholder

        def failing_loader(url):
            raise NetworkAcquisitionFailure("blocked")

        block = layout_section(section, url_loader=failing_loader).block
        assert block.is_placeholder
        assert "blocked" in block.error


class TestRegenerateControl:

    def test_control_only_with_callback_and_prompt(self):
        section = _section({"id": "pic", "type": "image", "imagePrompt": "A dog"})
        assert layout_section(section).block.regenerate is None

        calls = []
        block = layout_section(section, on_regenerate=lambda sid, p: calls.append((sid, p))).block

        assert block.regenerate.prompt == "A dog"
        assert block.regenerate.pending is False
        block.regenerate.trigger()
        assert calls == [("pic", "A dog")]

    def test_no_control_without_prompt(self):
        section = _section({"id": "pic", "type": "image"})
        block = layout_section(section, on_regenerate=lambda sid, p: None).block
        assert block.regenerate is None

    def test_pending_state_from_tracker(self):
        section = _section({"id": "pic", "type": "image", "imagePrompt": "A dog"})
        tracker = RegenerationTracker()
        tracker.start("pic")

        block = layout_section(section, regeneration=tracker, on_regenerate=lambda sid, p: None).block

        assert block.regenerate.pending is True
