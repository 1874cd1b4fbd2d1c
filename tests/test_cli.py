"""
Tests for the worksheet-studio command line.
"""
import json

import pytest
from PIL import Image

from worksheet_studio.cli import build_parser, main


@pytest.fixture
def response_file(tmp_path, worksheet_payload):
    path = tmp_path / "response.json"
    path.write_text(json.dumps(worksheet_payload), encoding="utf-8")
    return path


def test_writes_all_formats_by_default(response_file, tmp_path, capsys):
    out = tmp_path / "out"

    assert main([str(response_file), "-o", str(out)]) == 0

    suffixes = sorted(p.suffix for p in out.iterdir())
    assert suffixes == [".docx", ".pdf", ".png"]
    printed = capsys.readouterr().out.split()
    assert len(printed) == 3


def test_exam_docx_only(tmp_path):
    exam = {"subject": "Biology", "questions": [{"text": "Define diffusion.", "marks": 2}]}
    path = tmp_path / "exam.json"
    path.write_text(json.dumps(exam), encoding="utf-8")
    out = tmp_path / "out"

    assert main([str(path), "--docx", "--header", "Riverside Academy", "-o", str(out)]) == 0

    (written,) = out.iterdir()
    assert written.name.startswith("Biology-Exam-")
    assert written.suffix == ".docx"


def test_source_image_used_for_crops(response_file, sample_image, tmp_path):
    out = tmp_path / "out"
    assert main([str(response_file), "--pdf", "--source", str(sample_image), "-o", str(out)]) == 0
    assert len(list(out.glob("*.pdf"))) == 1


def test_unreadable_json_returns_2(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert main([str(path), "-o", str(tmp_path)]) == 2


def test_missing_file_returns_2(tmp_path):
    assert main([str(tmp_path / "missing.json")]) == 2


def test_malformed_response_returns_1(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert main([str(path), "-o", str(tmp_path / "out")]) == 1
    assert not (tmp_path / "out").exists()


def test_bad_source_image_returns_1(response_file, tmp_path):
    bogus = tmp_path / "scan.png"
    bogus.write_text("not an image")
    assert main([str(response_file), "--source", str(bogus), "-o", str(tmp_path / "out")]) == 1


def test_png_is_one_stacked_image(tmp_path):
    questions = [{"text": "Discuss the causes. " * 30, "marks": 6} for _ in range(25)]
    path = tmp_path / "long.json"
    path.write_text(json.dumps({"subject": "History", "questions": questions}), encoding="utf-8")
    out = tmp_path / "out"

    assert main([str(path), "--png", "-o", str(out)]) == 0

    (written,) = out.iterdir()
    with Image.open(written) as image:
        assert image.height > 2 * image.width
    assert "stacked into one PNG" in build_parser().format_help()
