"""Coerce raw generation output into canonical idea, roadmap and deck documents.

The pipeline for every schema is the same:

1. ``clean_completion`` drops code fences and stray wrapping quotes.
2. ``extractor.iter_blocks`` finds balanced JSON-like blocks.
3. ``parse_first_block`` strips comments from each block and returns the
   first one that ``json.loads`` accepts. Later blocks are never consulted.
4. A schema-specific converter maps the many field spellings providers use
   onto one canonical shape.

None of these functions raise on malformed input. When nothing usable can
be recovered the result is a parse-failure document carrying the untouched
raw text under ``rawContent`` and ``parseError: True``.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import StrEnum
from typing import Any

from services.ai.extractor import find_block_end, iter_blocks


logger = logging.getLogger(__name__)


class Schema(StrEnum):
    IDEAS = "ideas"
    ROADMAP = "roadmap"
    PITCH_DECK = "pitch_deck"
    ENHANCEMENT = "enhancement"


_FENCE_RE = re.compile(r"```(?:json)?\s*")
_LEADING_QUOTES_RE = re.compile(r"^[\"']+")
_TRAILING_QUOTES_RE = re.compile(r"[\"']+$")

_MISSING = object()


# --------------------------------------------------------------------------- #
# Text pre-pass and block selection
# --------------------------------------------------------------------------- #
def clean_completion(raw: str) -> str:
    """Remove markdown code fences and wrapping quote characters."""
    text = _FENCE_RE.sub("", raw).strip()
    text = _LEADING_QUOTES_RE.sub("", text)
    text = _TRAILING_QUOTES_RE.sub("", text)
    return text.strip()


def strip_comments(block: str) -> str:
    """Drop ``//`` line comments and ``/* */`` block comments outside strings."""
    out: list[str] = []
    i = 0
    n = len(block)
    in_string = False
    while i < n:
        char = block[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < n:
                out.append(block[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue
        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif block.startswith("//", i):
            newline = block.find("\n", i)
            i = n if newline == -1 else newline
        elif block.startswith("/*", i):
            close = block.find("*/", i + 2)
            i = n if close == -1 else close + 2
        else:
            out.append(char)
            i += 1
    return "".join(out).strip()


def parse_first_block(blocks: Iterable[str]) -> Any:
    """Return the first block that parses as JSON, or ``_MISSING``."""
    for index, block in enumerate(blocks, start=1):
        try:
            return json.loads(strip_comments(block))
        except json.JSONDecodeError as exc:
            logger.debug("Block %d failed to parse: %s", index, exc.msg)
        except RecursionError:
            logger.debug("Block %d is nested too deeply to parse", index)
    return _MISSING


def parse_failure(raw: str, **extra: Any) -> dict[str, Any]:
    return {**extra, "rawContent": raw, "parseError": True}


def is_parse_failure(document: Mapping[str, Any]) -> bool:
    return document.get("parseError") is True


# --------------------------------------------------------------------------- #
# Field helpers
# --------------------------------------------------------------------------- #
def pick(
    source: Mapping[str, Any], aliases: Sequence[str], default: Any = None
) -> Any:
    """Return the value of the first alias present in ``source``.

    ``None`` and empty strings count as absent.
    """
    for alias in aliases:
        value = source.get(alias)
        if value is not None and value != "":
            return value
    return default


def as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "; ".join(as_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def as_list(value: Any) -> list[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def as_score(value: Any) -> float | int | None:
    """Numeric score from a number or a label such as ``"8/10"``.

    NaN and infinities are dropped so the document stays valid JSON.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip().split("/")[0].strip()
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() else number
    return None


# --------------------------------------------------------------------------- #
# Ideas
# --------------------------------------------------------------------------- #
IDEA_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("Title", "title"),
    "description": ("Description", "description"),
    "targetMarket": ("Target Market", "targetMarket", "target_market"),
    "uniqueValueProposition": (
        "Unique Value Proposition",
        "uniqueValueProposition",
        "unique_value_proposition",
        "uniqueValue",
    ),
    "potentialChallenges": (
        "Potential Challenges",
        "potentialChallenges",
        "potential_challenges",
        "challenges",
    ),
    "estimatedMarketSize": (
        "Estimated Market Size",
        "estimatedMarketSize",
        "estimated_market_size",
        "marketSize",
    ),
    "innovationScore": (
        "Innovation Score",
        "innovationScore",
        "innovation_score",
        "score",
    ),
}

PARSE_ERROR_IDEA_TITLE = "Parsing Error"


def normalize_idea(raw_idea: Mapping[str, Any]) -> dict[str, Any]:
    idea: dict[str, Any] = {}
    for field, aliases in IDEA_ALIASES.items():
        value = pick(raw_idea, aliases)
        if field == "innovationScore":
            idea[field] = as_score(value)
        elif field == "title":
            idea[field] = as_text(value, "Untitled Idea")
        else:
            idea[field] = as_text(value)
    return idea


def _idea_items(parsed: Any) -> list[Any] | None:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        nested = pick(parsed, ("ideas", "Ideas"))
        if isinstance(nested, list):
            return nested
        if pick(parsed, IDEA_ALIASES["title"]) is not None:
            return [parsed]
    return None


def _close_truncated_array(fragment: str) -> str | None:
    """Cut ``fragment`` after its last complete element and close the array.

    ``fragment`` starts at an opening ``[`` whose match was never found.
    """
    depth = 0
    in_string = False
    escaped = False
    last_cut = -1
    for i, char in enumerate(fragment):
        if escaped:
            escaped = False
            continue
        if in_string:
            if char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "[{":
            depth += 1
        elif char in "]}":
            depth -= 1
            if depth == 1 and char == "}":
                last_cut = i + 1
    if last_cut == -1:
        return None
    return fragment[:last_cut] + "\n]"


def repair_truncated_ideas(text: str) -> list[Any] | None:
    """Recover the complete objects of a cut-off idea array, if possible."""
    start = text.find("[")
    if start == -1 or find_block_end(text, start) != -1:
        return None
    logger.info("Idea array appears truncated, attempting repair")
    candidate = _close_truncated_array(text[start:])
    if candidate is None:
        return None
    try:
        repaired = json.loads(strip_comments(candidate))
    except (json.JSONDecodeError, RecursionError):
        return None
    return repaired if isinstance(repaired, list) else None


def normalize_ideas(raw: str) -> dict[str, Any]:
    """Return ``{"ideas": [...]}`` or an idea-shaped parse failure."""
    text = clean_completion(raw)
    items = _idea_items(parse_first_block(iter_blocks(text)))
    if items is None:
        items = repair_truncated_ideas(text)
    if items is None:
        logger.warning("Could not parse ideas from completion (%d chars)", len(raw))
        placeholder = normalize_idea(
            {
                "title": PARSE_ERROR_IDEA_TITLE,
                "description": (
                    "The AI generated ideas but they could not be parsed. "
                    "Please try generating again."
                ),
            }
        )
        return parse_failure(raw, ideas=[placeholder])
    return {"ideas": [normalize_idea(i) for i in items if isinstance(i, dict)]}


# --------------------------------------------------------------------------- #
# Roadmap
# --------------------------------------------------------------------------- #
ROADMAP_WRAPPERS = ("Project Roadmap", "project_roadmap", "roadmap")
PHASES_ALIASES = ("Phases", "phases")
MILESTONES_ALIASES = ("Milestones", "milestones", "Key Milestones", "key_milestones")

PHASE_TEXT_FIELDS: dict[str, tuple[tuple[str, ...], str]] = {
    "title": (("Title", "title", "Phase", "phase", "name"), "Phase"),
    "duration": (("Duration", "duration", "Duration/Timeline"), "TBD"),
}
PHASE_LIST_FIELDS: dict[str, tuple[str, ...]] = {
    "objectives": ("Key Objectives", "objectives", "key_objectives", "Objectives"),
    "deliverables": (
        "Deliverables/Milestones",
        "deliverables",
        "Deliverables",
        "key_deliverables",
    ),
    "resources": (
        "Required Resources",
        "resources",
        "required_resources",
        "Resources",
    ),
    "successMetrics": ("Success Metrics", "successMetrics", "success_metrics"),
    "risks": ("Potential Risks", "risks", "potential_risks", "Risks"),
}
MILESTONE_FIELDS: dict[str, tuple[tuple[str, ...], str]] = {
    "name": (("Milestone", "milestone", "name", "Name"), "Milestone"),
    "targetDate": (("Target Date", "target_date", "targetDate", "date"), ""),
    "description": (("Description", "description"), ""),
}


def normalize_phase(raw_phase: Any) -> dict[str, Any]:
    if isinstance(raw_phase, str):
        raw_phase = {"title": raw_phase}
    phase: dict[str, Any] = {
        field: as_text(pick(raw_phase, aliases), default)
        for field, (aliases, default) in PHASE_TEXT_FIELDS.items()
    }
    for field, aliases in PHASE_LIST_FIELDS.items():
        phase[field] = as_list(pick(raw_phase, aliases))
    return phase


def normalize_milestone(raw_milestone: Any) -> dict[str, Any]:
    if isinstance(raw_milestone, str):
        raw_milestone = {"name": raw_milestone}
    return {
        field: as_text(pick(raw_milestone, aliases), default)
        for field, (aliases, default) in MILESTONE_FIELDS.items()
    }


def _unwrap_roadmap(parsed: Any) -> Any:
    if isinstance(parsed, dict):
        inner = pick(parsed, ROADMAP_WRAPPERS)
        if isinstance(inner, dict | list):
            return inner
    return parsed


def roadmap_from_parsed(parsed: Any) -> dict[str, Any] | None:
    body = _unwrap_roadmap(parsed)
    if isinstance(body, list):
        body = {"phases": body}
    if not isinstance(body, dict):
        return None

    phases = as_list(pick(body, PHASES_ALIASES))
    milestones = as_list(pick(body, MILESTONES_ALIASES))
    roadmap: dict[str, Any] = {
        "phases": [
            normalize_phase(p) for p in phases if isinstance(p, dict | str)
        ],
        "milestones": [
            normalize_milestone(m) for m in milestones if isinstance(m, dict | str)
        ],
    }
    consumed = set(PHASES_ALIASES) | set(MILESTONES_ALIASES) | {"extras"}
    extras = {k: v for k, v in body.items() if k not in consumed}
    if isinstance(body.get("extras"), dict):
        extras = {**body["extras"], **extras}
    if extras:
        roadmap["extras"] = extras
    return roadmap


def normalize_roadmap(raw: str) -> dict[str, Any]:
    """Return ``{"phases": [...], "milestones": [...]}`` or a parse failure.

    Truncated roadmaps are not repaired; they fail straight to the raw
    content document.
    """
    parsed = parse_first_block(iter_blocks(clean_completion(raw)))
    roadmap = None if parsed is _MISSING else roadmap_from_parsed(parsed)
    if roadmap is None:
        logger.warning("Could not parse roadmap from completion (%d chars)", len(raw))
        return parse_failure(raw)
    return roadmap


# --------------------------------------------------------------------------- #
# Pitch deck
# --------------------------------------------------------------------------- #
# A slide candidate is (slide data, label from a keyed shape or None).
SlideCandidate = tuple[Mapping[str, Any], str | None]


def _is_slide_key(key: str) -> bool:
    return key.startswith("Slide")


def _keyed_slides(container: Mapping[str, Any]) -> list[SlideCandidate]:
    return [
        (value if isinstance(value, dict) else {"content": as_text(value)}, key)
        for key, value in container.items()
        if _is_slide_key(key)
    ]


def _plain_slides(items: Sequence[Any]) -> list[SlideCandidate]:
    return [(item, None) for item in items if isinstance(item, dict)]


def _slide_wrapper(item: Any) -> SlideCandidate | None:
    """Unwrap ``{"Slide 2: Problem": {...}}`` or ``{"Cover Slide": {...}}``.

    The first key containing "Slide" whose value is an object is the label.
    """
    if not isinstance(item, dict):
        return None
    for key, value in item.items():
        if "Slide" in key and isinstance(value, dict):
            return value, key
    return None


def _shape_pitch_deck_array(parsed: Any) -> list[SlideCandidate] | None:
    if isinstance(parsed, dict) and isinstance(parsed.get("pitch_deck"), list):
        return _plain_slides(parsed["pitch_deck"])
    return None


def _shape_slides_array(parsed: Any) -> list[SlideCandidate] | None:
    if not isinstance(parsed, dict):
        return None
    slides = pick(parsed, ("Slides", "slides"))
    if not isinstance(slides, list):
        return None
    candidates: list[SlideCandidate] = []
    for item in slides:
        wrapped = _slide_wrapper(item)
        if wrapped is not None:
            candidates.append(wrapped)
        elif isinstance(item, dict):
            candidates.append((item, None))
    return candidates


def _shape_bare_array(parsed: Any) -> list[SlideCandidate] | None:
    if not isinstance(parsed, list) or not parsed:
        return None
    first = parsed[0]
    if isinstance(first, dict) and any(_is_slide_key(k) for k in first):
        return _keyed_slides(first)
    return _plain_slides(parsed)


def _shape_keyed_object(parsed: Any) -> list[SlideCandidate] | None:
    if isinstance(parsed, dict) and any(_is_slide_key(k) for k in parsed):
        return _keyed_slides(parsed)
    return None


# Tried in order; the first detector that recognises the value wins.
SLIDE_SHAPES: tuple[Callable[[Any], list[SlideCandidate] | None], ...] = (
    _shape_pitch_deck_array,
    _shape_slides_array,
    _shape_bare_array,
    _shape_keyed_object,
)

SLIDE_KEY_POINTS = ("Key Points", "keyPoints", "key_points")
SLIDE_SUPPORTING_DATA = ("Supporting Data", "supportingData", "supporting_data")
SLIDE_VISUAL = (
    "Visual Suggestions",
    "Visual Suggestion",
    "visualSuggestion",
    "visual_suggestions",
    "visual_suggestion",
)


def normalize_slide(
    data: Mapping[str, Any], label: str | None, index: int
) -> dict[str, Any]:
    """Build a canonical slide; ``index`` is 1-based."""
    key_points = pick(data, SLIDE_KEY_POINTS)
    if label is not None:
        title = label
        headline = as_text(pick(data, ("headline", "Headline")), label)
    else:
        title = as_text(pick(data, ("title", "Title")), f"Slide {index}")
        headline = as_text(pick(data, ("headline", "Headline")))
    return {
        "title": title,
        "headline": headline,
        "keyPoints": key_points if isinstance(key_points, list) else [],
        "content": as_text(pick(data, ("content", "Content"))),
        "supportingData": as_text(pick(data, SLIDE_SUPPORTING_DATA)),
        "visualSuggestion": as_text(pick(data, SLIDE_VISUAL)),
        "type": as_text(pick(data, ("type", "Type")), "default"),
    }


def pitch_deck_from_parsed(parsed: Any) -> dict[str, Any] | None:
    for detector in SLIDE_SHAPES:
        candidates = detector(parsed)
        if candidates is not None:
            return {
                "slides": [
                    normalize_slide(data, label, i)
                    for i, (data, label) in enumerate(candidates, start=1)
                ]
            }
    return None


def normalize_pitch_deck(raw: str) -> dict[str, Any]:
    """Return ``{"slides": [...]}`` or a parse failure."""
    parsed = parse_first_block(iter_blocks(clean_completion(raw)))
    deck = None if parsed is _MISSING else pitch_deck_from_parsed(parsed)
    if deck is None:
        logger.warning(
            "Could not parse pitch deck from completion (%d chars)", len(raw)
        )
        return parse_failure(raw)
    return deck


# --------------------------------------------------------------------------- #
# Enhancement
# --------------------------------------------------------------------------- #
def normalize_enhancement(raw: str) -> dict[str, Any]:
    """Return the first JSON object in the completion, unchanged."""
    objects = (b for b in iter_blocks(clean_completion(raw)) if b.startswith("{"))
    parsed = parse_first_block(objects)
    if parsed is _MISSING:
        return parse_failure(raw)
    return parsed


_NORMALIZERS: dict[Schema, Callable[[str], dict[str, Any]]] = {
    Schema.IDEAS: normalize_ideas,
    Schema.ROADMAP: normalize_roadmap,
    Schema.PITCH_DECK: normalize_pitch_deck,
    Schema.ENHANCEMENT: normalize_enhancement,
}


def normalize(raw: str, schema: Schema) -> dict[str, Any]:
    """Normalize a raw completion into the canonical document for ``schema``."""
    return _NORMALIZERS[schema](raw)
