"""
Tests for the static content generator.
"""
import pytest

from worksheet_studio.errors import GenerationFailure
from worksheet_studio.synthesis import ContentGenerator, ReferenceImage, StaticContentGenerator


def test_returns_canned_payloads_and_records_calls():
    generator = StaticContentGenerator(worksheet={"title": "T"}, section_image="AAAA")

    assert generator.generate_worksheet("plants") == {"title": "T"}
    assert generator.generate_section_image("a cat") == "AAAA"
    assert generator.calls == [("worksheet", "plants"), ("section_image", "a cat")]


def test_missing_payload_raises_generation_failure():
    generator = StaticContentGenerator()
    with pytest.raises(GenerationFailure):
        generator.generate_exam(ReferenceImage(b"x", "image/png"))


def test_generator_interface_is_abstract():
    with pytest.raises(TypeError):
        ContentGenerator()


def test_search_results_are_canned_too():
    links = [{"title": "Leaf shapes", "uri": "https://example.com/leaves"}]
    generator = StaticContentGenerator(search_results=links)

    assert generator.search_worksheets("leaves") == links
    assert generator.calls == [("search", "leaves")]
    with pytest.raises(GenerationFailure):
        StaticContentGenerator().search_worksheets("leaves")
