"""Unit tests for ski_results.display."""

import pytest

from ski_results.display import (
    ABSENT,
    format_time,
    is_finished,
    status_display,
    total_time,
)


# ---------------------------------------------------------------------------
# format_time
# ---------------------------------------------------------------------------

class TestFormatTime:
    def test_none_is_dash(self):
        assert format_time(None) == "-"

    def test_zero(self):
        assert format_time(0) == "0:00.00"

    def test_minute_and_seconds(self):
        assert format_time(65430) == "1:05.43"

    def test_one_hour_keeps_counting_minutes(self):
        assert format_time(3600000) == "60:00.00"

    def test_seconds_padded_to_five_chars(self):
        assert format_time(1000) == "0:01.00"

    def test_two_digit_seconds_not_padded_further(self):
        assert format_time(59990) == "0:59.99"

    def test_minutes_not_zero_padded(self):
        assert format_time(9 * 60000 + 12340) == "9:12.34"

    def test_sub_hundredth_rounds(self):
        assert format_time(1236) == "0:01.24"

    def test_exact_half_rounds_up(self):
        # 0.125 is exactly representable, so the tie goes up
        assert format_time(125) == "0:00.13"

    def test_inexact_half_follows_float_value(self):
        # 1.005 is stored as 1.00499999..., so it rounds down
        assert format_time(1005) == "0:01.00"


# ---------------------------------------------------------------------------
# status_display
# ---------------------------------------------------------------------------

class TestStatusDisplay:
    @pytest.mark.parametrize("status,label", [(1, "DNS"), (2, "DNF"), (3, "DSQ")])
    def test_status_labels(self, status, label):
        assert status_display(status, 65430) == label

    def test_finished_shows_time(self):
        assert status_display(0, 65430) == "1:05.43"

    def test_unknown_code_falls_through_to_time(self):
        assert status_display(7, 65430) == "1:05.43"

    def test_absent_row_is_dash(self):
        assert status_display(None, None) == "-"

    def test_dns_without_time(self):
        assert status_display(1, None) == "DNS"


# ---------------------------------------------------------------------------
# total_time
# ---------------------------------------------------------------------------

class TestTotalTime:
    def test_both_finished(self):
        assert total_time(0, 30000, 0, 31250) == "1:01.25"

    def test_one_dns(self):
        assert total_time(0, 30000, 1, 31250) == ABSENT

    def test_one_heat_missing(self):
        assert total_time(0, 30000, None, None) == ABSENT

    def test_finished_without_time(self):
        assert total_time(0, 30000, 0, None) == ABSENT

    def test_unknown_code_is_not_finished(self):
        assert total_time(0, 30000, 9, 31250) == ABSENT


class TestIsFinished:
    def test_finished(self):
        assert is_finished(0, 1) is True

    def test_zero_time_counts(self):
        assert is_finished(0, 0) is True

    def test_dsq(self):
        assert is_finished(3, 1000) is False
