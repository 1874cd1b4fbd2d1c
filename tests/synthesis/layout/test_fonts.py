"""
Tests for font resolution shared by layout, PDF and PNG rendering.
"""
import pytest
from reportlab.pdfbase import pdfmetrics

from worksheet_studio.synthesis.layout import (
    SANS,
    SERIF,
    LayoutConfig,
    MatchingBlock,
    SectionLayout,
    TextBlock,
    TextOp,
    compose_item,
    font_path,
    load_font,
    text_width,
)

LONG_TEXT = (
    "Photosynthesis is the process plants use to turn light, water and carbon "
    "dioxide into glucose and oxygen. It happens mostly in the leaves. "
) * 6


@pytest.fixture
def config():
    return LayoutConfig()


@pytest.mark.parametrize("name", [
    SANS.regular, SANS.bold, SANS.italic, SERIF.regular, SERIF.bold, SERIF.italic,
])
def test_every_face_resolves_and_registers(name):
    path = font_path(name)

    assert path.lower().endswith(".ttf")
    assert pdfmetrics.getFont(name).fontName == name
    assert load_font(name, 20).path == path


def test_text_width_covers_both_renderers():
    for size in (20, 33, 48):
        width = text_width(LONG_TEXT, SANS.regular, size)
        assert width >= load_font(SANS.regular, size).getlength(LONG_TEXT)
        assert width >= pdfmetrics.stringWidth(LONG_TEXT, SANS.regular, size)


@pytest.mark.parametrize("face", [SANS, SERIF])
def test_wrapped_body_text_fits_raster_font(config, face):
    # Arrange
    section = SectionLayout("intro", None, TextBlock(LONG_TEXT))

    # Act
    ops = [op for op in compose_item(section, config, face).ops
           if isinstance(op, TextOp) and op.align == "left"]

    # Assert
    assert len(ops) > 1
    for op in ops:
        assert op.x + load_font(op.font, op.size).getlength(op.text) <= config.available_width


def test_matching_text_stays_inside_boxes(config):
    long_entry = "Absorbs water and minerals from the soil through tiny hairs " * 6
    section = SectionLayout("match", None, MatchingBlock((long_entry,), (long_entry,)))
    column_width = int(config.available_width * 0.4)

    ops = [op for op in compose_item(section, config).ops if isinstance(op, TextOp)]

    left_ops = [op for op in ops if op.x < column_width]
    right_ops = [op for op in ops if op.x >= column_width]
    assert left_ops and right_ops
    assert any(op.text.endswith("...") for op in left_ops)
    for op in left_ops:
        assert op.x + load_font(op.font, op.size).getlength(op.text) <= column_width
    for op in right_ops:
        assert op.x + load_font(op.font, op.size).getlength(op.text) <= config.available_width
