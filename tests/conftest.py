import base64
import io
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import worksheet_studio
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from worksheet_studio.core.models import (  # noqa: E402
    BrandingOptions,
    ExamData,
    ExamQuestion,
    GeneratedWorksheetImage,
    WorksheetData,
)
from worksheet_studio.core.schemas import parse_worksheet  # noqa: E402


def png_bytes(size=(200, 100), color="white") -> bytes:
    """Encode a solid image as PNG."""
    buf = io.BytesIO()
    Image.new("RGB", size, color=color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(size=(200, 100), color="white") -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(size, color)).decode("ascii")


# Common test fixtures
@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def quadrant_image():
    """
    400x200 reference scan with four solid quadrants.

    Top-left red, top-right green, bottom-left blue, bottom-right yellow.
    """
    img = Image.new("RGB", (400, 200), color="white")
    img.paste((255, 0, 0), (0, 0, 200, 100))
    img.paste((0, 255, 0), (200, 0, 400, 100))
    img.paste((0, 0, 255), (0, 100, 200, 200))
    img.paste((255, 255, 0), (200, 100, 400, 200))
    return img


@pytest.fixture
def worksheet_payload():
    """Raw generator response covering every section type."""
    return {
        "title": "Plant Life",
        "subject": "Science",
        "gradeLevel": "Grade 4",
        "instructions": "Answer every section.",
        "sections": [
            {"id": "intro", "type": "text", "title": "Read", "content": {"text": "Plants need light."}},
            {
                "id": "match",
                "type": "matching",
                "title": "Match",
                "content": {"pairs": [
                    {"left": "Root", "right": "Absorbs water"},
                    {"left": "Leaf", "right": "Makes food"},
                ]},
            },
            {"id": "blanks", "type": "fill-blank", "content": {"sentence": "A ___ grows from a ___."}},
            {"id": "draw", "type": "drawing", "content": {"prompt": "Draw a flower."}},
            {"id": "sums", "type": "math", "content": {"problems": [{"q": "2 + 3"}, {"q": "4 x 5"}, {"q": "9 - 1"}]}},
            {
                "id": "diagram",
                "type": "image",
                "title": "Diagram",
                "boundingBox": [0, 0, 500, 500],
                "imagePrompt": "A labelled plant diagram",
                "content": {"text": "Label the plant.", "prompt": "Use arrows."},
            },
        ],
    }


@pytest.fixture
def sample_worksheet(worksheet_payload) -> WorksheetData:
    return parse_worksheet(worksheet_payload)


@pytest.fixture
def sample_exam() -> ExamData:
    """Three questions worth 2, 3 and 4 marks (9 in total)."""
    return ExamData(
        institution="Hillside High",
        subject="Biology",
        grade="10",
        duration="1 hour",
        date=None,
        instructions=("Answer all questions.", "Write in black ink."),
        questions=(
            ExamQuestion(id="q1", number="1", text="Name the organelle that makes energy.", marks=2),
            ExamQuestion(id="q2", number="2", text="Describe osmosis.\nGive an example.", marks=3),
            ExamQuestion(id="q3", number="3", text="Explain how enzymes work.", marks=4),
        ),
    )


@pytest.fixture
def sample_worksheet_image() -> GeneratedWorksheetImage:
    return GeneratedWorksheetImage(image_url=png_data_url((300, 420)), prompt="Fractions")


@pytest.fixture
def override_branding() -> BrandingOptions:
    return BrandingOptions(header_text_override="Riverside Academy")
