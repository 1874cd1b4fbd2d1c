"""
Tests for item composition into draw operations.
"""
import pytest
from PIL import Image

from worksheet_studio.synthesis.layout import (
    SERIF,
    ExamHeader,
    FillBlankBlock,
    ImageBlock,
    ImageOp,
    InstructionsLayout,
    LayoutConfig,
    LineOp,
    MatchingBlock,
    QuestionLayout,
    RegenerateControl,
    SectionLayout,
    TextOp,
    WorksheetHeader,
    column_letter,
    compose_footer,
    compose_item,
    text_width,
    wrap_text,
)


@pytest.fixture
def config():
    return LayoutConfig()


def _texts(composition):
    return [op.text for op in composition.ops if isinstance(op, TextOp)]


def _lines(composition):
    return [op for op in composition.ops if isinstance(op, LineOp)]


class TestWrapText:

    def test_lines_fit_width(self):
        text = "The quick brown fox jumps over the lazy dog " * 10
        lines = wrap_text(text, "StudioSans", 30, 500)

        assert len(lines) > 1
        assert all(text_width(line, "StudioSans", 30) <= 500 for line in lines)
        assert " ".join(lines).split() == text.split()

    def test_blank_lines_kept(self):
        assert wrap_text("a\n\nb", "StudioSans", 10, 500) == ("a", "", "b")

    def test_long_word_broken(self):
        lines = wrap_text("x" * 200, "StudioSans", 30, 300)
        assert len(lines) > 1
        assert "".join(lines) == "x" * 200


class TestQuestion:

    @pytest.mark.parametrize("answer_lines", [2, 3])
    def test_answer_lines_drawn(self, config, answer_lines):
        question = QuestionLayout("q1", "1.", ("Explain.",), 3, "[3]", answer_lines)

        composition = compose_item(question, config, SERIF)

        assert len(_lines(composition)) == answer_lines

    def test_label_marks_and_text(self, config):
        question = QuestionLayout("q1", "1.", ("Line one", "Line two"), 4, "[4]", 3)

        texts = _texts(compose_item(question, config, SERIF))

        assert texts[:2] == ["1.", "[4]"]
        assert "Line one" in texts and "Line two" in texts

    def test_serif_face_used(self, config):
        question = QuestionLayout("q1", "1.", ("Hi",), 1, "[1]", 2)
        fonts = {op.font for op in compose_item(question, config, SERIF).ops if isinstance(op, TextOp)}
        assert fonts <= {SERIF.regular, SERIF.bold, SERIF.italic}


def test_exam_header_shows_total_marks(config):
    header = ExamHeader("HILLSIDE HIGH", "Biology Examination", "10", "1 hour", "____", 9)

    texts = _texts(compose_item(header, config))

    assert "Total Marks: 9" in texts
    assert "Grade: 10" in texts
    assert "HILLSIDE HIGH" in texts


def test_worksheet_header_has_name_field(config):
    texts = _texts(compose_item(WorksheetHeader(title="Plants", subject="Science"), config))
    assert "Plants" in texts
    assert "Name:" in texts


def test_worksheet_header_without_name_label(config):
    texts = _texts(compose_item(WorksheetHeader(header_text="Riverside", name_label=None), config))
    assert texts == ["Riverside"]


def test_bulleted_instructions(config):
    composition = compose_item(
        InstructionsLayout(("One", "Two"), heading="Instructions:", bulleted=True), config,
    )
    texts = _texts(composition)
    assert texts.count("•") == 2
    assert texts[0] == "Instructions:"


class TestSectionBlocks:

    def test_fill_blank_draws_one_line_per_blank(self, config):
        section = SectionLayout("s", None, FillBlankBlock(("A ", " B ", ""), 2))

        composition = compose_item(section, config)

        assert len(_lines(composition)) == 2
        assert _texts(composition) == ["A", "B"]

    def test_matching_rows_lettered(self, config):
        section = SectionLayout("s", "Match", MatchingBlock(("Root", "Leaf"), ("Water", "Food")))

        texts = _texts(compose_item(section, config))

        assert texts[0] == "Match"
        assert "1. Root" in texts and "A. Water" in texts
        assert "2. Leaf" in texts and "B. Food" in texts

    def test_placeholder_label(self, config):
        section = SectionLayout("s", None, ImageBlock(source="placeholder"))

        composition = compose_item(section, config)

        assert "Illustration unavailable" in _texts(composition)
        assert composition.height >= config.placeholder_height

    def test_image_scaled_within_width(self, config):
        picture = Image.new("RGB", (4000, 1000))
        section = SectionLayout("s", None, ImageBlock(source="cropped", image=picture))

        op = next(op for op in compose_item(section, config).ops if isinstance(op, ImageOp))

        assert op.width <= config.available_width
        assert op.height <= config.max_image_height

    def test_small_image_upscale_is_capped(self, config):
        section = SectionLayout("s", None, ImageBlock(source="cropped", image=Image.new("RGB", (100, 50))))
        op = next(op for op in compose_item(section, config).ops if isinstance(op, ImageOp))
        assert (op.width, op.height) == (200, 100)

    @pytest.mark.parametrize("pending,label", [(False, "[Regenerate image]"), (True, "[Regenerating...]")])
    def test_regenerate_label_is_screen_only(self, config, pending, label):
        control = RegenerateControl("s", "A cat", pending=pending)
        section = SectionLayout("s", None, ImageBlock(source="placeholder", regenerate=control))

        ops = [op for op in compose_item(section, config).ops if isinstance(op, TextOp) and op.text == label]

        assert len(ops) == 1
        assert ops[0].screen_only


def test_footer_is_centred(config):
    composition = compose_footer("Page 1 of 2", config)
    (op,) = composition.ops
    assert op.align == "center"
    assert composition.height == config.footer_height


@pytest.mark.parametrize("index,letter", [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB")])
def test_column_letter(index, letter):
    assert column_letter(index) == letter


def test_unsupported_item_raises(config):
    with pytest.raises(TypeError):
        compose_item(object(), config)
