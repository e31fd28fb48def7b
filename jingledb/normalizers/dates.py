"""
Date parsing and normalization utilities.

CSV exports mix several date spellings (``25/12/2023``, ``12/25/2023``,
``2023-12-25``, full ISO timestamps, free text). Every date or datetime
property written to the graph goes through ``normalize_date`` so it is stored
in one canonical UTC form: ``YYYY-MM-DDTHH:mm:ss.sssZ``.
"""

import re
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dateutil_parser

CANONICAL_MIDNIGHT = "T00:00:00.000Z"

ISO_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?[0-9]+)")

# Fields missing from a free-form date are filled from here, never from "now"
PARSE_DEFAULT = datetime(1970, 1, 1)


class DateParseError(ValueError):
    """Raised when a required date cannot be interpreted."""

    kind = "invalid-format"

    def __init__(self, input: Optional[str]):
        super().__init__(f"Invalid date format: {input}")
        self.input = input


def leading_int(segment: str) -> Optional[int]:
    """Value of a string's leading digits (``"5abc"`` -> 5), or None if it has none."""
    match = LEADING_INT_PATTERN.match(segment)
    return int(match.group(1)) if match else None


def _exceeds_month(segment: str) -> bool:
    value = leading_int(segment)
    return value is not None and value > 12


def _from_slash_triple(first: str, second: str, year: str) -> str:
    """
    Assemble a canonical date from ``A/B/C``.

    A first segment above 12 can only be a day and a second segment above 12
    can only be a day. When both are 12 or less the day-first convention wins.
    """
    if _exceeds_month(first):
        day, month = first, second
    elif _exceeds_month(second):
        month, day = first, second
    else:
        day, month = first, second

    return f"{year}-{month.rjust(2, '0')}-{day.rjust(2, '0')}{CANONICAL_MIDNIGHT}"


def _format_utc(moment: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:mm:ss.sssZ``; naive values are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


def normalize_date(value: Optional[str]) -> Optional[str]:
    """
    Convert a date string from a CSV cell to a canonical UTC timestamp.

    Handles DD/MM/YYYY, MM/DD/YYYY, YYYY-MM-DD and ISO formats, then falls
    back to a generic parse.

    Args:
        value: Raw date string (may be None or blank)

    Returns:
        Canonical timestamp string, or None if the value is blank or cannot
        be interpreted. Never raises.
    """
    if value is None:
        return None

    trimmed = str(value).strip()
    if not trimmed:
        return None

    # Already ISO formatted; passed through without re-validation
    if "T" in trimmed or "Z" in trimmed:
        return trimmed

    if "/" in trimmed:
        parts = trimmed.split("/")
        if len(parts) == 3:
            return _from_slash_triple(*parts)

    if ISO_DATE_PATTERN.match(trimmed):
        return f"{trimmed}{CANONICAL_MIDNIGHT}"

    # Digits from other scripts are not dates here even though dateutil reads them
    if any(ch.isdigit() and not ch.isascii() for ch in trimmed):
        return None

    # Shifting to UTC can also overflow near datetime.min/max
    try:
        return _format_utc(dateutil_parser.parse(trimmed, default=PARSE_DEFAULT))
    except (ValueError, OverflowError):
        return None


def normalize_date_required(value: str) -> str:
    """
    Convert a date string to a canonical UTC timestamp, raising if invalid.

    Raises:
        DateParseError: If ``normalize_date`` cannot interpret the value
    """
    iso = normalize_date(value)
    if iso is None:
        raise DateParseError(value)
    return iso
