from datetime import date, datetime, time

import pytest

from adhub.utils.dates import (
    combine_date_clock,
    format_clock,
    normalize_time_string,
    parse_clock,
    parse_date,
)


class TestParseDate:
    @pytest.mark.parametrize(
        "raw",
        ["2025-09-05", "09/05/2025", "9/5/25", "2025/09/05", "09-05-2025", "2025-09-05T00:00:00.000Z"],
    )
    def test_accepted_formats(self, raw):
        assert parse_date(raw) == date(2025, 9, 5)

    @pytest.mark.parametrize("raw", ["", "   ", "next friday", "2025-13-40", None, 42])
    def test_rejects_unparseable(self, raw):
        assert parse_date(raw) is None

    def test_passes_date_objects_through(self):
        assert parse_date(date(2025, 9, 5)) == date(2025, 9, 5)
        assert parse_date(datetime(2025, 9, 5, 18, 30)) == date(2025, 9, 5)


class TestParseClock:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("19:00", time(19, 0)),
            ("7:00 PM", time(19, 0)),
            ("7:05 pm", time(19, 5)),
            ("7pm", time(19, 0)),
            ("12:00 AM", time(0, 0)),
            ("12:30 PM", time(12, 30)),
            ("6:05 p.m.", time(18, 5)),
            ("08:15:30", time(8, 15, 30)),
        ],
    )
    def test_parses_common_clock_strings(self, raw, expected):
        assert parse_clock(raw) == expected

    @pytest.mark.parametrize("raw", ["7", "25:00", "13:00 PM", "noon", "", None])
    def test_rejects_ambiguous_or_invalid(self, raw):
        assert parse_clock(raw) is None


def test_format_clock_uses_12_hour_time():
    assert format_clock(time(18, 5)) == "6:05 PM"
    assert format_clock(time(0, 0)) == "12:00 AM"
    assert format_clock(datetime(2025, 9, 5, 12, 45)) == "12:45 PM"
    assert format_clock(None) == ""


def test_normalize_time_string():
    assert normalize_time_string("7:00 PM") == "19:00"
    assert normalize_time_string("19:00") == "19:00"
    assert normalize_time_string("TBA") == "TBA"
    assert normalize_time_string("  ") is None
    assert normalize_time_string(None) is None


def test_combine_date_clock():
    assert combine_date_clock(date(2025, 9, 5), "5:30 PM") == datetime(2025, 9, 5, 17, 30)
    assert combine_date_clock(date(2025, 9, 5), "later") is None
