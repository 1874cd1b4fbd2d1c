"""
Tests for Pillow page rendering.
"""
import io

import numpy as np
import pytest
from PIL import Image

from conftest import png_data_url
from worksheet_studio.core.models import GeneratedWorksheetImage
from worksheet_studio.synthesis.layout import LayoutConfig, synthesize_view
from worksheet_studio.synthesis.output import render_pages, render_to_png


@pytest.fixture
def small_config():
    return LayoutConfig(page_width=827, page_height=1170, dpi=100)


def test_render_pages_one_image_per_page(sample_exam, small_config):
    view = synthesize_view(sample_exam, config=small_config)

    pages = render_pages(view)

    assert len(pages) == view.page_count
    assert all(p.size == (827, 1170) for p in pages)


def test_page_has_ink(sample_worksheet):
    (page, *_) = render_pages(synthesize_view(sample_worksheet))
    pixels = np.array(page.convert("L"))
    assert (pixels < 128).sum() > 0


def test_render_to_png_single_page(sample_exam):
    view = synthesize_view(sample_exam)

    data = render_to_png(view, page=0)

    image = Image.open(io.BytesIO(data))
    assert image.format == "PNG"
    assert image.size == (view.config.page_width, view.config.page_height)


def test_render_to_png_stacks_pages(small_config):
    from worksheet_studio.core.models import ExamData, ExamQuestion
    questions = tuple(ExamQuestion(f"q{i}", str(i), "Discuss. " * 30, 6) for i in range(25))
    view = synthesize_view(ExamData(subject="Art", questions=questions), config=small_config)
    assert view.page_count > 1

    image = Image.open(io.BytesIO(render_to_png(view, page=None)))

    assert image.height > small_config.page_height * view.page_count


def test_render_to_png_out_of_range(sample_exam):
    view = synthesize_view(sample_exam)
    with pytest.raises(IndexError):
        render_to_png(view, page=view.page_count)


def test_full_page_image_drawn():
    """A 300x420 page is drawn at 2x, centred below the top margin."""
    page_image = GeneratedWorksheetImage(image_url=png_data_url((300, 420), "blue"))

    (page,) = render_pages(synthesize_view(page_image))

    assert page.getpixel((827, 520)) == (0, 0, 255)
    assert page.getpixel((50, 50)) == (255, 255, 255)
