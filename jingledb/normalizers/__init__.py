"""
Data normalization utilities.

These modules convert CSV cell values into the representations stored on
graph nodes and relationships.
"""

from .dates import DateParseError, normalize_date, normalize_date_required
from .values import parse_boolean, parse_int, seconds_to_timestamp, timestamp_to_seconds

__all__ = [
    'DateParseError',
    'normalize_date',
    'normalize_date_required',
    'parse_boolean',
    'parse_int',
    'seconds_to_timestamp',
    'timestamp_to_seconds',
]
