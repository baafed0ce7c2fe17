"""Recover structured paper records from free-text grounded search replies.

The model is asked for a raw JSON array but routinely wraps it in markdown
fences, prefixes it with prose or truncates it. Extraction tries an ordered
chain of candidates and takes the first one that parses as a JSON array;
every element is then rebuilt field by field through total coercion
functions, so a malformed element degrades to defaults instead of failing
the batch.
"""

from __future__ import annotations

import json
import logging
import math
import re
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from models import PaperRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_TITLE = "Unknown Title"
DEFAULT_AUTHOR = "Unknown"
DEFAULT_PUBLISHER = "Web"
DEFAULT_URL = "#"

_JSON_FENCE_RE = re.compile(r"```json[ \t]*\r?\n(.*?)```", re.IGNORECASE | re.DOTALL)
_ANY_FENCE_RE = re.compile(r"```(.*?)```", re.DOTALL)
# Language tag on the opening fence line, e.g. "python\n" or "\n".
_INFO_STRING_RE = re.compile(r"^[\w+.-]*[ \t]*\r?\n")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_COUNT_RE = re.compile(r"\d+", re.ASCII)


def extract_json_fence(text: str) -> str | None:
    """Return the body of the first fenced block tagged ``json``."""
    match = _JSON_FENCE_RE.search(text)
    return match.group(1).strip() if match else None


def extract_any_fence(text: str) -> str | None:
    """Return the body of the first fenced block, without its language tag.

    Only the first block is tried; later fences are not searched.
    """
    match = _ANY_FENCE_RE.search(text)
    if match is None:
        return None
    return _INFO_STRING_RE.sub("", match.group(1), count=1).strip()


def extract_bracket_span(text: str) -> str | None:
    """Return the text between the first ``[`` and the last ``]``."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


EXTRACTORS: tuple[Callable[[str], str | None], ...] = (
    extract_json_fence,
    extract_any_fence,
    extract_bracket_span,
)


def extract_json_array(text: str) -> list[Any] | None:
    """Run the extractor chain and return the first candidate that is a JSON array."""
    for extractor in EXTRACTORS:
        candidate = extractor(text)
        if candidate is None:
            continue
        parsed = _parse_array(candidate)
        if parsed is not None:
            LOGGER.debug("JSON array extracted via %s (%s items)", extractor.__name__, len(parsed))
            return parsed
    return None


def _parse_array(candidate: str) -> list[Any] | None:
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        LOGGER.warning("Failed to parse JSON candidate (%s chars): %s", len(candidate), exc)
        return None
    if not isinstance(parsed, list):
        LOGGER.debug("JSON candidate is a %s, not an array", type(parsed).__name__)
        return None
    return parsed


def coerce_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def coerce_authors(value: Any) -> list[str]:
    """Return a list of non-blank author names, or the placeholder list."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return [DEFAULT_AUTHOR]
    names = [name.strip() for name in value if isinstance(name, str) and name.strip()]
    return names or [DEFAULT_AUTHOR]


def coerce_year(value: Any, fallback: int) -> int:
    """Coerce numbers and leading-integer strings ("2021", "2021a") to a year."""
    if isinstance(value, bool):
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else fallback
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            try:
                return int(match.group(1))
            except ValueError:
                return fallback
    return fallback


def coerce_citations(value: Any) -> int:
    """Coerce a citation count to a non-negative int, defaulting to 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0
    if isinstance(value, str):
        digits = value.strip().replace(",", "")
        if _COUNT_RE.fullmatch(digits):
            try:
                return int(digits)
            except ValueError:
                return 0
    return 0


def coerce_record(item: Any, year_fallback: int) -> PaperRecord:
    """Build a fully defaulted record from one untyped array element."""
    fields: Mapping[str, Any] = item if isinstance(item, Mapping) else {}
    return PaperRecord(
        paper_id=uuid.uuid4().hex,
        title=coerce_text(fields.get("title"), DEFAULT_TITLE),
        authors=coerce_authors(fields.get("authors")),
        year=coerce_year(fields.get("year"), year_fallback),
        citation_count=coerce_citations(fields.get("citations")),
        publisher=coerce_text(fields.get("publisher"), DEFAULT_PUBLISHER),
        url=coerce_text(fields.get("url"), DEFAULT_URL),
    )


def normalize(raw_text: str, year_start: int, year_end: int) -> list[PaperRecord]:
    """Parse a search reply into in-range records, newest first.

    Never raises: a reply without a usable JSON array yields an empty list.
    """
    raw_items = extract_json_array(raw_text) if isinstance(raw_text, str) else None
    if raw_items is None:
        LOGGER.info("No JSON array found in search reply; returning no results")
        return []

    records = [coerce_record(item, year_end) for item in raw_items]
    kept = [record for record in records if year_start <= record.year <= year_end]
    kept.sort(key=lambda record: record.year, reverse=True)

    LOGGER.info(
        "Normalized search reply: parsed=%s kept=%s out_of_range=%s",
        len(records),
        len(kept),
        len(records) - len(kept),
    )
    return kept
