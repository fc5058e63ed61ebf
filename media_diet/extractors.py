"""Helpers that pull single typed values out of loosely typed feed fields.

Every extractor accepts optional raw strings and returns ``None`` when no
candidate yields a usable value.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

YEAR_PATTERN = re.compile(r"(?<!\d)(?:18|19|20)\d{2}(?!\d)")
RATING_SUFFIX_PATTERN = re.compile(r"\s*-\s*[★½]+$")
YEAR_SUFFIX_PATTERN = re.compile(r"(?:\s*\(\s*(?:18|19|20)\d{2}\s*\)|\s*,\s*(?:18|19|20)\d{2})$")
WHITESPACE_PATTERN = re.compile(r"\s+")

# Fills date parts a feed omits, so the same text parses the same way on any day.
DEFAULT_DATE = datetime(2000, 1, 1)

TRUE_FLAGS = {"true", "1", "yes"}
FALSE_FLAGS = {"false", "0", "no"}


def normalize_text(value: Optional[str]) -> str:
    """Collapse whitespace runs and trim."""

    if not value:
        return ""
    return WHITESPACE_PATTERN.sub(" ", value).strip()


def normalize_title(title: Optional[str]) -> str:
    """Strip a trailing rating suffix and then a trailing year suffix.

    The rating glyphs go first since they would otherwise hide the year.
    Both strips repeat until the title is stable, so ``"Oldboy - ★★★★ (2003)"``
    and ``"Oldboy, 2003 - ★★★★"`` both become ``"Oldboy"``.
    """

    cleaned = normalize_text(title)
    while True:
        stripped = RATING_SUFFIX_PATTERN.sub("", cleaned).strip()
        stripped = YEAR_SUFFIX_PATTERN.sub("", stripped).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def extract_year(*candidates: Optional[str]) -> Optional[int]:
    """Return the first 4-digit year found, scanning candidates in order."""

    for candidate in candidates:
        if not candidate:
            continue
        match = YEAR_PATTERN.search(str(candidate))
        if match:
            return int(match.group(0))
    return None


def suffix_year(title: Optional[str]) -> Optional[str]:
    """Return the trailing "(YYYY)" or ", YYYY" of a feed title, ignoring rating glyphs."""

    cleaned = RATING_SUFFIX_PATTERN.sub("", normalize_text(title)).strip()
    match = YEAR_SUFFIX_PATTERN.search(cleaned)
    return match.group(0).strip() if match else None


def _first_url(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, Mapping):
        for key in ("url", "href"):
            found = _first_url(value.get(key))
            if found:
                return found
        return None
    if isinstance(value, (list, tuple)):
        for item in value:
            found = _first_url(item)
            if found:
                return found
    return None


def image_from_description(description: Optional[str]) -> Optional[str]:
    """Return the ``src`` of the first ``<img>`` tag in an HTML blob."""

    if not description:
        return None
    soup = BeautifulSoup(description, "html.parser")
    image = soup.find("img", src=True)
    if image is None:
        return None
    return _first_url(image["src"])


def extract_image_url(*media_fields: Any, description: Optional[str] = None) -> Optional[str]:
    """Pick an image URL from media attachments, then from the description HTML."""

    for field in media_fields:
        found = _first_url(field)
        if found:
            return found
    return image_from_description(description)


def parse_rating(value: Optional[str], integer: bool = False) -> Optional[Union[int, float]]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = float(text)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return int(parsed) if integer else parsed


def parse_flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in TRUE_FLAGS:
        return True
    if text in FALSE_FLAGS:
        return False
    return None


def parse_timestamp(value: Optional[str]) -> Optional[str]:
    """Parse a feed date into a UTC ISO-8601 string with millisecond precision."""

    if not value or not str(value).strip():
        return None
    try:
        parsed = date_parser.parse(str(value), default=DEFAULT_DATE)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
    return parsed.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_identity(source_id: Optional[str], canonical_url: Optional[str], title: Optional[str]) -> str:
    """Pick a record identity: source id, then canonical URL, then title."""

    source_id = normalize_text(source_id)
    if source_id:
        return source_id
    canonical_url = normalize_text(canonical_url)
    if canonical_url:
        return canonical_url
    return normalize_text(title)


__all__ = [
    "extract_image_url",
    "extract_year",
    "image_from_description",
    "normalize_text",
    "normalize_title",
    "parse_flag",
    "parse_rating",
    "parse_timestamp",
    "resolve_identity",
    "suffix_year",
]
