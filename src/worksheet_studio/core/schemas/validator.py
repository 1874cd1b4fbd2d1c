"""
Response Validation Utilities

Turns raw generator output into WorksheetData / ExamData / SearchResult.

Policy:
- Fail only when the payload is not an object at all (MalformedResponse)
- Everything else is recovered by defaulting so partial worksheets
  still display: missing sequences become empty, missing ids get
  positional fallbacks, unusable marks become 0
- Bounding boxes are not range-checked here; that is a rendering concern
- Unknown fields are ignored
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Mapping, Optional, Tuple, Union

from worksheet_studio.errors import MalformedResponse
from worksheet_studio.core.models import (
    DrawingContent,
    ExamData,
    ExamQuestion,
    FillBlankContent,
    ImageContent,
    MatchingContent,
    MatchPair,
    MathContent,
    MathProblem,
    SearchResult,
    SectionContent,
    SectionType,
    TextContent,
    WorksheetData,
    WorksheetSection,
)

logger = logging.getLogger(__name__)

DEFAULT_WORKSHEET_TITLE = "Untitled Worksheet"

# ```json ... ``` wrapper that chat models like to add
_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n(.*?)\n?\s*```\s*$", re.DOTALL)


RawResponse = Union[str, bytes, Mapping[str, Any]]


# ─────────────────────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────────────────────

def parse_response(raw: RawResponse) -> Union[WorksheetData, ExamData]:
    """
    Parse a payload of either kind.

    Payloads with a ``questions`` field are exams, everything else is
    treated as a worksheet.

    Raises:
        MalformedResponse: If the payload is not a JSON object
    """
    data = _load_payload(raw)
    if "questions" in data:
        return parse_exam(data)
    return parse_worksheet(data)


def parse_worksheet(raw: RawResponse) -> WorksheetData:
    """
    Validate a worksheet payload.

    Args:
        raw: Decoded mapping or JSON text

    Returns:
        WorksheetData with defaults applied

    Raises:
        MalformedResponse: If the payload is not a JSON object
    """
    data = _load_payload(raw)

    raw_sections = _as_list(data.get("sections"), "sections")
    sections = []
    seen_ids: set[str] = set()
    for index, item in enumerate(raw_sections):
        if not isinstance(item, Mapping):
            logger.warning(f"Skipping section {index}: expected object, got {type(item).__name__}")
            continue
        section_id = _unique_id(item.get("id"), f"section-{index + 1}", seen_ids)
        sections.append(_parse_section(item, section_id))

    title = _opt_str(data.get("title"))
    worksheet = WorksheetData(
        title=title or DEFAULT_WORKSHEET_TITLE,
        sections=tuple(sections),
        subject=_opt_str(data.get("subject")),
        grade_level=_opt_str(data.get("gradeLevel", data.get("grade_level"))),
        instructions=_opt_str(data.get("instructions")),
    )
    logger.debug(f"Parsed worksheet {worksheet.title!r} with {len(sections)} sections")
    return worksheet


def parse_exam(raw: RawResponse) -> ExamData:
    """
    Validate an exam payload.

    Args:
        raw: Decoded mapping or JSON text

    Returns:
        ExamData with defaults applied

    Raises:
        MalformedResponse: If the payload is not a JSON object
    """
    data = _load_payload(raw)

    questions = []
    seen_ids: set[str] = set()
    for index, item in enumerate(_as_list(data.get("questions"), "questions")):
        if not isinstance(item, Mapping):
            logger.warning(f"Skipping question {index}: expected object, got {type(item).__name__}")
            continue
        questions.append(ExamQuestion(
            id=_unique_id(item.get("id"), f"q-{index + 1}", seen_ids),
            number=_opt_str(item.get("number")) or str(index + 1),
            text=_str(item.get("text")),
            marks=coerce_marks(item.get("marks")),
        ))

    exam = ExamData(
        institution=_str(data.get("institution")),
        subject=_str(data.get("subject")),
        grade=_str(data.get("grade")),
        duration=_str(data.get("duration")),
        date=_opt_str(data.get("date")),
        instructions=_parse_instructions(data.get("instructions")),
        questions=tuple(questions),
    )
    logger.debug(f"Parsed exam {exam.subject!r} with {len(questions)} questions")
    return exam


def parse_search_results(raw: Any) -> Tuple[SearchResult, ...]:
    """
    Validate a worksheet search response.

    Accepts a list of ``{"title", "uri"}`` objects or an object with a
    ``results`` list. Entries without an http(s) ``uri`` are dropped,
    repeated URIs are kept once and a missing title falls back to the URI.

    Raises:
        MalformedResponse: If the payload is neither a list nor an object
    """
    data = _decode_json(raw)
    if isinstance(data, Mapping):
        items = _as_list(data.get("results"), "results")
    elif isinstance(data, (list, tuple)):
        items = list(data)
    else:
        raise MalformedResponse(f"Expected search results, got {type(data).__name__}")

    results = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, Mapping):
            continue
        uri = _opt_str(item.get("uri", item.get("url")))
        if not uri or not uri.lower().startswith(("http://", "https://")):
            logger.debug(f"Skipping search result without a web address: {item!r}")
            continue
        if uri in seen:
            continue
        seen.add(uri)
        results.append(SearchResult(title=_opt_str(item.get("title")) or uri, uri=uri))
    return tuple(results)


# ─────────────────────────────────────────────────────────────────────────────
# Field coercion
# ─────────────────────────────────────────────────────────────────────────────

def coerce_marks(value: Any) -> int:
    """
    Marks as a non-negative integer.

    Absent, non-numeric, non-finite and negative values become 0.
    Numeric strings are accepted and fractions are truncated.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


def _load_payload(raw: RawResponse) -> Mapping[str, Any]:
    """Decode raw input into a mapping."""
    raw = _decode_json(raw)
    if not isinstance(raw, Mapping):
        raise MalformedResponse(
            f"Expected a JSON object, got {type(raw).__name__}"
        )
    return raw


def _decode_json(raw: Any) -> Any:
    """Decode JSON text or bytes (optionally fenced); other values pass through."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedResponse(f"Response is not UTF-8 text: {e}") from e

    if isinstance(raw, str):
        text = raw.strip()
        fenced = _FENCE_RE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedResponse(f"Response is not valid JSON: {e}") from e
    return raw


def _as_list(value: Any, field: str) -> list:
    """Sequence field as a list; missing or wrong-typed values become empty."""
    if value is None:
        logger.debug(f"Field {field!r} missing, using empty sequence")
        return []
    if not isinstance(value, (list, tuple)):
        logger.warning(f"Field {field!r} is {type(value).__name__}, expected list; ignoring")
        return []
    return list(value)


def _unique_id(candidate: Any, fallback: str, seen: set[str]) -> str:
    """Return a non-empty id not yet in seen (and record it)."""
    base = _opt_str(candidate) or fallback
    result = base
    suffix = 2
    while result in seen:
        result = f"{base}-{suffix}"
        suffix += 1
    if result != base:
        logger.warning(f"Duplicate id {base!r} renamed to {result!r}")
    seen.add(result)
    return result


def _opt_str(value: Any) -> Optional[str]:
    """Stripped string, or None for absent/blank values."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _str(value: Any) -> str:
    """String field with "" as default."""
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def _parse_instructions(value: Any) -> tuple[str, ...]:
    """Instructions as a tuple; a single string becomes one item."""
    if isinstance(value, str):
        return (value.strip(),) if value.strip() else ()
    items = []
    for item in _as_list(value, "instructions"):
        text = _opt_str(item)
        if text:
            items.append(text)
    return tuple(items)


# ─────────────────────────────────────────────────────────────────────────────
# Sections
# ─────────────────────────────────────────────────────────────────────────────

def _parse_section(data: Mapping[str, Any], section_id: str) -> WorksheetSection:
    """Build one section, resolving its type and payload."""
    raw_type = data.get("type")
    declared = SectionType.parse(raw_type)
    if raw_type is not None and declared is None:
        logger.debug(f"Section {section_id}: unknown type {raw_type!r}, using text")

    bounding_box = data.get("boundingBox", data.get("bounding_box"))
    if bounding_box is not None and not isinstance(bounding_box, (list, tuple)):
        logger.warning(f"Section {section_id}: ignoring non-list boundingBox")
        bounding_box = None
    if bounding_box is not None:
        bounding_box = tuple(bounding_box)

    # Image wins over any declared type when a full box is present
    if declared is SectionType.IMAGE or (bounding_box is not None and len(bounding_box) == 4):
        section_type = SectionType.IMAGE
    else:
        section_type = declared or SectionType.TEXT

    raw_content = data.get("content")
    if isinstance(raw_content, str):
        raw_content = {"text": raw_content}
    elif not isinstance(raw_content, Mapping):
        raw_content = {}

    return WorksheetSection(
        id=section_id,
        type=section_type,
        content=_parse_content(section_type, raw_content, section_id),
        title=_opt_str(data.get("title")),
        bounding_box=bounding_box,
        image_prompt=_opt_str(data.get("imagePrompt", data.get("image_prompt"))),
        generated_image_url=_opt_str(
            data.get("generatedImageUrl", data.get("generated_image_url"))
        ),
        declared_type=raw_type if isinstance(raw_type, str) else None,
    )


def _parse_content(
    section_type: SectionType,
    content: Mapping[str, Any],
    section_id: str,
) -> SectionContent:
    """Payload variant for a resolved section type."""
    if section_type is SectionType.IMAGE:
        return ImageContent(
            text=_opt_str(content.get("text")),
            prompt=_opt_str(content.get("prompt")),
        )
    if section_type is SectionType.MATCHING:
        return MatchingContent(pairs=_parse_pairs(content.get("pairs"), section_id))
    if section_type is SectionType.FILL_BLANK:
        return FillBlankContent(sentence=_str(content.get("sentence")))
    if section_type is SectionType.DRAWING:
        return DrawingContent(prompt=_str(content.get("prompt")))
    if section_type is SectionType.MATH:
        return MathContent(problems=_parse_problems(content.get("problems"), section_id))
    return TextContent(text=_str(content.get("text")))


def _parse_pairs(value: Any, section_id: str) -> tuple[MatchPair, ...]:
    """Matching pairs from objects ({left, right}) or two-item lists."""
    pairs = []
    for item in _as_list(value, f"{section_id}.pairs"):
        if isinstance(item, Mapping):
            pairs.append(MatchPair(left=_str(item.get("left")), right=_str(item.get("right"))))
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            pairs.append(MatchPair(left=_str(item[0]), right=_str(item[1])))
        else:
            logger.debug(f"Section {section_id}: skipping malformed pair {item!r}")
    return tuple(pairs)


def _parse_problems(value: Any, section_id: str) -> tuple[MathProblem, ...]:
    """Math problems from objects ({q}) or bare strings/numbers."""
    problems = []
    for item in _as_list(value, f"{section_id}.problems"):
        if isinstance(item, Mapping):
            q = _opt_str(item.get("q", item.get("question")))
        else:
            q = _opt_str(item)
        if q is None:
            logger.debug(f"Section {section_id}: skipping empty problem")
            continue
        problems.append(MathProblem(q=q))
    return tuple(problems)
