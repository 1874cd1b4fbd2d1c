"""
Worksheet Studio command line.

Renders a saved generator response (worksheet or exam JSON) to Word,
PDF and PNG using the same pipeline as the interactive session.

Usage:
    # All formats into the current directory
    worksheet-studio response.json

    # Exam as Word only, with a school header and logo
    worksheet-studio exam.json --docx --header "Riverside Academy" --logo logo.png

    # Worksheet with illustrations cropped from the reference scan
    worksheet-studio worksheet.json --source scan.jpg --pdf --output-dir out/
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from worksheet_studio import __version__
from worksheet_studio.core.models import BrandingOptions
from worksheet_studio.core.schemas import parse_exam, parse_response, parse_worksheet
from worksheet_studio.errors import StudioError
from worksheet_studio.synthesis import (
    StaticContentGenerator,
    StudioController,
    SynthesisConfig,
)
from worksheet_studio.synthesis.images import decode_image

logger = logging.getLogger(__name__)

PARSERS = {
    "auto": parse_response,
    "worksheet": parse_worksheet,
    "exam": parse_exam,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worksheet-studio",
        description="Render worksheet and exam responses to Word, PDF and PNG",
    )
    parser.add_argument("input", type=Path, help="Generator response JSON file")
    parser.add_argument(
        "--kind", choices=sorted(PARSERS), default="auto",
        help="Document kind (default: detect from the response shape)",
    )
    parser.add_argument("--docx", action="store_true", help="Write a Word document")
    parser.add_argument("--pdf", action="store_true", help="Write a print PDF")
    parser.add_argument("--png", action="store_true", help="Write all pages stacked into one PNG")
    parser.add_argument("--header", help="Header text replacing the institution name")
    parser.add_argument("--logo", type=Path, help="School logo image")
    parser.add_argument("--source", type=Path, help="Reference image for section crops")
    parser.add_argument("--output-dir", "-o", type=Path, default=Path.cwd(), help="Output directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    try:
        raw = json.loads(args.input.read_text(encoding="utf-8"))
        document = PARSERS[args.kind](raw)
        logo = decode_image(args.logo.read_bytes()) if args.logo else None
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input: {e}")
        return 2
    except StudioError as e:
        logger.error(f"{e.banner_text()} ({e})")
        return 1

    branding = BrandingOptions(header_text_override=args.header, logo_image=logo)
    config = SynthesisConfig(output_dir=args.output_dir)
    formats = [f for f in ("docx", "pdf", "png") if getattr(args, f)] or ["docx", "pdf", "png"]

    with StudioController(StaticContentGenerator(), config, branding=branding) as studio:
        if args.source:
            if studio.load_reference_file(args.source) is None:
                logger.error(studio.error)
                return 1
        studio.open_document(document)

        exporters = {
            "docx": studio.export_document,
            "pdf": studio.export_pdf,
            "png": studio.export_image,
        }
        for fmt in formats:
            result = exporters[fmt]()
            if result is None:
                logger.error(studio.error)
                return 1
            print(result.path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
