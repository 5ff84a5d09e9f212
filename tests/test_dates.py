"""Tests for date pattern rendering used by $dt[...]."""

from __future__ import annotations

from datetime import datetime

import pytest

from snapname.dates import format_default, format_timestamp

TS = datetime(2021, 10, 26, 14, 5, 9, 123000)  # a Tuesday


class TestCustomPatterns:
    @pytest.mark.parametrize(
        "pattern, expected",
        [
            ("yyyy-MM-dd", "2021-10-26"),
            ("yyyyMMdd_HHmmss", "20211026_140509"),
            ("yy", "21"),
            ("M/d", "10/26"),
            ("hh:mm tt", "02:05 PM"),
            ("h t", "2 P"),
            ("HH:mm:ss.fff", "14:05:09.123"),
            ("MMM", "Oct"),
            ("MMMM", "October"),
            ("ddd", "Tue"),
            ("dddd", "Tuesday"),
        ],
    )
    def test_tokens(self, pattern, expected):
        assert format_timestamp(TS, pattern) == expected

    def test_single_digit_fields_unpadded(self):
        ts = datetime(2021, 3, 4, 5, 6, 7)
        assert format_timestamp(ts, "M-d H:m:s") == "3-4 5:6:7"
        assert format_timestamp(ts, "MM-dd HH:mm:ss") == "03-04 05:06:07"

    def test_midnight_is_twelve_on_twelve_hour_clock(self):
        assert format_timestamp(datetime(2021, 1, 1, 0, 30), "h:mm tt") == "12:30 AM"

    def test_trimmed_fraction(self):
        assert format_timestamp(TS, "FFFF") == "123"
        assert format_timestamp(datetime(2021, 1, 1), "FFF") == ""

    def test_quoted_literal(self):
        assert format_timestamp(TS, "'Year' yyyy") == "Year 2021"
        assert format_timestamp(TS, '"d"dd') == "d26"

    def test_backslash_escape(self):
        assert format_timestamp(TS, "\\yyyyy") == "y2021"

    def test_other_characters_are_literal(self):
        assert format_timestamp(TS, "yyyy_[x]") == "2021_[x]"

    def test_empty_pattern(self):
        assert format_timestamp(TS, "") == ""


class TestStandardPatterns:
    def test_sortable(self):
        assert format_timestamp(TS, "s") == "2021-10-26T14:05:09"

    def test_short_date(self):
        assert format_timestamp(TS, "d") == "10/26/2021"

    def test_short_time(self):
        assert format_timestamp(TS, "t") == "14:05"


class TestStrftime:
    def test_percent_pattern_passes_through(self):
        assert format_timestamp(TS, "%Y/%m/%d") == "2021/10/26"


def test_default_is_short_date_and_time():
    assert format_default(TS) == "10/26/2021 14:05"
