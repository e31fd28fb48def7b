"""
CSV cell normalization for non-date values.
"""

from typing import Optional

from loguru import logger

from jingledb.normalizers.dates import leading_int

TRUE_VALUES = {"TRUE", "1", "YES"}

# Hour components above this are really minutes ("24:48:00" is 24m48s)
MAX_HOUR = 23


def parse_boolean(value: Optional[str]) -> Optional[bool]:
    """Parse a boolean cell. Blank cells are unknown (None), not False."""
    if value is None or str(value).strip() == "":
        return None
    return str(value).strip().upper() in TRUE_VALUES


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse an integer cell, returning None for blank or non-numeric values."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            return None


def _component(part: str) -> int:
    value = leading_int(part)
    return value if value is not None else 0


def timestamp_to_seconds(value: Optional[str]) -> int:
    """
    Convert a jingle position inside its Fabrica to integer seconds.

    Accepts ``HH:MM:SS`` and ``MM:SS``. Each component is read from its
    leading digits (``"1.5"`` is 1); components without digits count as 0.

    Examples:
        "03:32"    -> 212
        "01:02:31" -> 3751
        "24:48:00" -> 1488  (hours above 23 are read as minutes)
    """
    if value is None or str(value).strip() == "":
        return 0

    parts = str(value).strip().split(":")

    if len(parts) == 3:
        hours, minutes, seconds = (_component(p) for p in parts)
        if hours > MAX_HOUR:
            hours, minutes, seconds = 0, hours, minutes
    elif len(parts) == 2:
        hours = 0
        minutes, seconds = (_component(p) for p in parts)
    else:
        logger.warning(f"Invalid timestamp format: {value}, using 0 seconds")
        return 0

    return hours * 3600 + minutes * 60 + seconds


def seconds_to_timestamp(seconds: Optional[int]) -> str:
    """Render integer seconds as ``H:MM:SS`` (3751 -> ``1:02:31``)."""
    seconds = int(seconds or 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
