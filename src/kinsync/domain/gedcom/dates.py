"""Normalization of interchange date values into sortable partial dates.

Handled shapes (after an optional leading modifier such as ``ABT``):

- ``YYYY``            -> ``YYYY`` (partial)
- ``MMM YYYY``        -> ``YYYY-MM`` (partial)
- ``D MMM YYYY``      -> ``YYYY-MM-DD``
- ``YYYY-MM-DD``      -> unchanged (already canonical)

Anything else is reported as invalid; :func:`normalize_date` never raises.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Final

from kinsync.domain.model import CanonicalDate, DateModifier

INVALID_DATE_FORMAT: Final[str] = "Invalid date format"
INVALID_CALENDAR_DATE: Final[str] = "Date does not exist in the calendar"
UNKNOWN_MONTH: Final[str] = "Unknown month abbreviation"

MONTHS: Final[dict[str, int]] = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

_CANONICAL_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CANONICAL_MONTH = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR = re.compile(r"^\d{4}$")
_DAY = re.compile(r"^\d{1,2}$")


def normalize_date(text: object) -> CanonicalDate:
    """Convert one date value into its canonical partial-date form."""

    if not isinstance(text, str) or not text.strip():
        original = text if isinstance(text, str) else None
        return _invalid(original, INVALID_DATE_FORMAT)

    trimmed = text.strip()
    if _CANONICAL_DAY.match(trimmed):
        return CanonicalDate(original=text, normalized=trimmed, valid=True, partial=False)
    month_match = _CANONICAL_MONTH.match(trimmed)
    if month_match and 1 <= int(month_match.group(2)) <= 12:  # noqa: PLR2004
        return CanonicalDate(original=text, normalized=trimmed, valid=True, partial=True)

    modifier, remainder = _split_modifier(trimmed)
    parts = remainder.split()

    match parts:
        case [year] if _YEAR.match(year):
            return CanonicalDate(
                original=text, normalized=year, valid=True, partial=True, modifier=modifier
            )
        case [month_token, year] if _YEAR.match(year):
            month = MONTHS.get(month_token.upper())
            if month is None:
                return _invalid(text, UNKNOWN_MONTH, modifier)
            return CanonicalDate(
                original=text,
                normalized=f"{year}-{month:02d}",
                valid=True,
                partial=True,
                modifier=modifier,
            )
        case [day_token, month_token, year] if _DAY.match(day_token) and _YEAR.match(year):
            month = MONTHS.get(month_token.upper())
            if month is None:
                return _invalid(text, UNKNOWN_MONTH, modifier)
            calendar_date = _calendar_date(int(year), month, int(day_token))
            if calendar_date is None:
                return _invalid(text, INVALID_CALENDAR_DATE, modifier)
            return CanonicalDate(
                original=text,
                normalized=calendar_date.isoformat(),
                valid=True,
                partial=False,
                modifier=modifier,
            )
        case _:
            return _invalid(text, INVALID_DATE_FORMAT, modifier)


def _split_modifier(trimmed: str) -> tuple[DateModifier | None, str]:
    parts = trimmed.split(maxsplit=1)
    if len(parts) < 2:
        return None, trimmed
    try:
        modifier = DateModifier(parts[0].upper())
    except ValueError:
        return None, trimmed
    return modifier, parts[1]


def _calendar_date(year: int, month: int, day: int) -> date | None:
    """Build the date and make sure it round-trips to the literal components."""

    try:
        candidate = date(year, month, day)
    except ValueError:
        return None
    if (candidate.year, candidate.month, candidate.day) != (year, month, day):
        return None
    return candidate


def _invalid(
    original: str | None, error: str, modifier: DateModifier | None = None
) -> CanonicalDate:
    return CanonicalDate(original=original, valid=False, modifier=modifier, error=error)
