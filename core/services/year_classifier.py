"""Year extraction from free-form catalog dates.

Matchers are tried in order and the first one returning a year wins:

1. a leading ``YYYY-MM-DD`` (ISO dates and timestamps), read without parsing;
2. a bare four-digit year;
3. general date parsing through ``dateutil``.

Anything else classifies as ``"Unknown"`` and is logged as a warning.
`extract_year` never raises.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from datetime import datetime
import re

from dateutil import parser as date_parser
from loguru import logger

from core.models import UNKNOWN_YEAR, CatalogEntry

YearMatcher = Callable[[str], "str | None"]

_ISO_DATE_RE = re.compile(r"^(\d{4})-\d{2}-\d{2}")
_BARE_YEAR_RE = re.compile(r"^\d{4}$")

# Year 1 never occurs in catalog dates; a parse that keeps it found no year.
_NO_YEAR = datetime(1, 1, 1)


def match_iso_date(value: str) -> str | None:
    m = _ISO_DATE_RE.match(value)
    return m.group(1) if m else None


def match_bare_year(value: str) -> str | None:
    return value if _BARE_YEAR_RE.match(value) else None


def match_parsed_date(value: str) -> str | None:
    """Parse `value` with dateutil and return its year, or None."""
    try:
        parsed = date_parser.parse(value, default=_NO_YEAR)
    except (ValueError, OverflowError) as ex:
        logger.debug("Date parse failed for {!r}: {}", value, ex)
        return None
    except Exception as ex:  # pylint: disable=broad-exception-caught
        logger.debug("Unexpected date parser error for {!r}: {}", value, ex)
        return None
    if parsed.year == _NO_YEAR.year:
        return None
    return f"{parsed.year:04d}"


YEAR_MATCHERS: tuple[YearMatcher, ...] = (match_iso_date, match_bare_year, match_parsed_date)


def extract_year(date_string: str | None, matchers: Iterable[YearMatcher] = YEAR_MATCHERS) -> str:
    """Return the 4-digit year of `date_string`, or ``"Unknown"``."""
    if date_string is None:
        return UNKNOWN_YEAR
    value = str(date_string).strip()
    if not value:
        return UNKNOWN_YEAR
    for matcher in matchers:
        year = matcher(value)
        if year:
            return year
    logger.warning("Date {!r} has no recognizable year; classified as {}", value, UNKNOWN_YEAR)
    return UNKNOWN_YEAR


def build_year_index(entries: Iterable[CatalogEntry]) -> dict[str, str]:
    """Map identifier -> year; the first entry seen for an identifier wins."""
    index: dict[str, str] = {}
    for entry in entries:
        if entry.identifier is None or entry.identifier in index:
            continue
        index[entry.identifier] = extract_year(entry.date)
    return index


def count_year_buckets(years: Iterable[str]) -> Counter[str]:
    """Count items per year bucket, ``"Unknown"`` included."""
    return Counter(years)
