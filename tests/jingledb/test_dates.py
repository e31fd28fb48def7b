# SPDX-License-Identifier: MIT
"""Tests for date normalization."""

import re
from datetime import date

import pytest
from hypothesis import given, strategies as st

from jingledb.normalizers.dates import (
    DateParseError,
    normalize_date,
    normalize_date_required,
)

CANONICAL = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}Z$", re.ASCII)

iso_dates = st.dates(min_value=date(1000, 1, 1), max_value=date(9999, 12, 31))

contains_iso_marker = st.tuples(
    st.text(max_size=15), st.sampled_from(["T", "Z"]), st.text(max_size=15)
).map(lambda parts: "".join(parts).strip())

date_like_text = st.one_of(
    iso_dates.map(lambda d: d.isoformat()),
    st.tuples(
        st.integers(1, 31), st.integers(1, 31), st.integers(1000, 9999)
    ).map(lambda t: f"{t[0]}/{t[1]}/{t[2]}"),
    st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=20),
)


class TestBlankInput:
    """Blank values mean no date is known."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_blank_returns_none(self, value):
        assert normalize_date(value) is None

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_required_raises(self, value):
        with pytest.raises(DateParseError):
            normalize_date_required(value)


class TestIsoPassThrough:
    """Values carrying T or Z are returned as-is."""

    def test_full_timestamp_unchanged(self):
        assert normalize_date("2023-06-15T10:00:00Z") == "2023-06-15T10:00:00Z"

    def test_surrounding_whitespace_trimmed(self):
        assert normalize_date("  2023-06-15T10:00:00Z ") == "2023-06-15T10:00:00Z"

    def test_not_revalidated(self):
        """Malformed values with a marker are not checked."""
        assert normalize_date("2023-99-99T99") == "2023-99-99T99"
        assert normalize_date("Zzz") == "Zzz"

    @given(contains_iso_marker)
    def test_marker_values_pass_through(self, value):
        assert normalize_date(value) == value


class TestSlashTriples:
    """DD/MM/YYYY vs MM/DD/YYYY disambiguation."""

    def test_first_segment_above_twelve_is_day(self):
        assert normalize_date("25/12/2023") == "2023-12-25T00:00:00.000Z"

    def test_second_segment_above_twelve_is_day(self):
        assert normalize_date("12/25/2023") == "2023-12-25T00:00:00.000Z"

    def test_ambiguous_defaults_to_day_first(self):
        assert normalize_date("05/06/2023") == "2023-06-05T00:00:00.000Z"

    def test_single_digits_are_padded(self):
        assert normalize_date("5/6/2023") == "2023-06-05T00:00:00.000Z"

    def test_year_used_verbatim(self):
        assert normalize_date("5/6/23") == "23-06-05T00:00:00.000Z"

    def test_no_range_validation(self):
        """An impossible day is written through untouched."""
        assert normalize_date("45/06/2023") == "2023-06-45T00:00:00.000Z"

    def test_non_numeric_segment_is_not_a_day(self):
        assert normalize_date("ab/13/2023") == "2023-ab-13T00:00:00.000Z"

    def test_two_segments_fall_through(self):
        assert normalize_date("not/a-date") is None

    @given(st.integers(13, 31), st.integers(1, 12), st.integers(1000, 9999))
    def test_unambiguous_orders_agree(self, day, month, year):
        expected = f"{year}-{month:02d}-{day:02d}T00:00:00.000Z"
        assert normalize_date(f"{day}/{month}/{year}") == expected
        assert normalize_date(f"{month}/{day}/{year}") == expected

    @given(st.integers(1, 12), st.integers(1, 12), st.integers(1000, 9999))
    def test_ambiguous_always_day_first(self, first, second, year):
        assert normalize_date(f"{first}/{second}/{year}") == f"{year}-{second:02d}-{first:02d}T00:00:00.000Z"


class TestCalendarDates:
    """YYYY-MM-DD gets a midnight UTC time."""

    def test_plain_date(self):
        assert normalize_date("2023-06-15") == "2023-06-15T00:00:00.000Z"

    @given(iso_dates)
    def test_any_calendar_date(self, value):
        text = value.isoformat()
        assert normalize_date(text) == f"{text}T00:00:00.000Z"

    @pytest.mark.parametrize("value", ["\u0662\u0660\u0662\u0663-\u0660\u0666-\u0661\u0665", "\uff12\uff10\uff12\uff13-06-15"])
    def test_non_ascii_digits_rejected(self, value):
        assert normalize_date(value) is None


class TestGenericParse:
    """Fallback parsing of other spellings."""

    def test_month_name(self):
        assert normalize_date("March 5, 2023") == "2023-03-05T00:00:00.000Z"

    def test_time_of_day_kept(self):
        assert normalize_date("2023-06-15 10:30:45") == "2023-06-15T10:30:45.000Z"

    def test_offset_converted_to_utc(self):
        assert normalize_date("2023-06-15 10:30:00 +02:00") == "2023-06-15T08:30:00.000Z"

    def test_milliseconds_kept(self):
        assert normalize_date("2023-06-15 10:30:00.250") == "2023-06-15T10:30:00.250Z"

    def test_output_is_canonical(self):
        assert CANONICAL.match(normalize_date("June 15 2023"))

    @pytest.mark.parametrize("value", ["not-a-date", "hello world", "???"])
    def test_garbage_returns_none(self, value):
        assert normalize_date(value) is None


class TestRequired:
    """normalize_date_required escalates absence to DateParseError."""

    def test_valid_value(self):
        assert normalize_date_required("25/12/2023") == "2023-12-25T00:00:00.000Z"

    def test_error_carries_input(self):
        with pytest.raises(DateParseError) as excinfo:
            normalize_date_required("not-a-date")
        assert excinfo.value.input == "not-a-date"
        assert excinfo.value.kind == "invalid-format"
        assert "not-a-date" in str(excinfo.value)

    def test_is_value_error(self):
        assert issubclass(DateParseError, ValueError)

    @given(date_like_text)
    def test_matches_optional_variant(self, value):
        iso = normalize_date(value)
        if iso is None:
            with pytest.raises(DateParseError):
                normalize_date_required(value)
        else:
            assert normalize_date_required(value) == iso


class TestProperties:
    """Determinism and idempotence."""

    @given(date_like_text)
    def test_idempotent(self, value):
        iso = normalize_date(value)
        if iso is not None:
            assert normalize_date(iso) == iso

    @given(date_like_text)
    def test_deterministic(self, value):
        assert normalize_date(value) == normalize_date(value)

    def test_same_date_same_output(self):
        outputs = {
            normalize_date("25/12/2023"),
            normalize_date("12/25/2023"),
            normalize_date("2023-12-25"),
            normalize_date("December 25, 2023"),
        }
        assert outputs == {"2023-12-25T00:00:00.000Z"}
