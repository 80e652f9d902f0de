"""Tests for bfcm_report/utils/time_utils.py: windows and peak-minute clocks."""

from __future__ import annotations

from datetime import date

import pytest

from bfcm_report.utils.time_utils import (
    comparison_window,
    parse_peak_minute,
    peak_clock,
    shift_year_back,
    validate_window,
    window_length_days,
)


class TestWindows:
    def test_shift_year_back(self):
        assert shift_year_back(date(2025, 11, 28)) == date(2024, 11, 28)

    def test_leap_day_maps_to_feb_28(self):
        assert shift_year_back(date(2024, 2, 29)) == date(2023, 2, 28)

    def test_comparison_window(self):
        assert comparison_window(date(2025, 11, 28), date(2025, 12, 1)) == (
            date(2024, 11, 28), date(2024, 12, 1),
        )

    def test_window_length_inclusive(self):
        assert window_length_days(date(2025, 11, 28), date(2025, 12, 1)) == 4
        assert window_length_days(date(2025, 11, 28), date(2025, 11, 28)) == 1

    def test_validate_window_at_limit(self):
        validate_window(date(2025, 1, 1), date(2025, 3, 31), 90)

    def test_validate_window_over_limit(self):
        with pytest.raises(ValueError, match="91 days exceeds the maximum of 90"):
            validate_window(date(2025, 1, 1), date(2025, 4, 1), 90)

    def test_validate_window_reversed(self):
        with pytest.raises(ValueError, match="after end_date"):
            validate_window(date(2025, 12, 2), date(2025, 12, 1), 90)


class TestPeakMinute:
    @pytest.mark.parametrize("raw", [
        "2025-11-28T02:14:00",
        "2025-11-28T02:14:00Z",
        "2025-11-28T02:14:00+00:00",
        "2025-11-28 02:14:00 UTC",
    ])
    def test_parse_accepted_forms(self, raw):
        parsed = parse_peak_minute(raw)
        assert parsed is not None
        assert (parsed.hour, parsed.minute) == (2, 14)

    @pytest.mark.parametrize("raw", ["", "yesterday", "2025-13-45T99:00"])
    def test_parse_rejects_garbage(self, raw):
        assert parse_peak_minute(raw) is None

    def test_clock_on_own_offset(self):
        assert peak_clock("2025-11-28T21:30:00-05:00") == (21, 30)

    def test_clock_converted_to_timezone(self):
        # 02:14 UTC is 21:14 the previous evening in New York (EST).
        assert peak_clock("2025-11-28T02:14:00Z", "America/New_York") == (21, 14)

    def test_naive_taken_as_utc_when_converting(self):
        assert peak_clock("2025-11-28T02:14:00", "America/New_York") == (21, 14)

    def test_unparseable_clock(self):
        assert peak_clock("not a time", "UTC") is None
