"""Tests for display formatting helpers."""

from datetime import date, datetime, timezone

import pytest

from tenderdesk.utils.formatting import (
    BidDifference,
    UrgencyLevel,
    calculate_bid_difference,
    calculate_win_rate,
    format_currency,
    format_date,
    format_date_time,
    get_days_until,
    get_urgency_level,
    round_half_up,
)

NOW = datetime(2024, 1, 5, 12, 0, tzinfo=timezone.utc)


class TestCurrency:
    def test_groups_with_non_breaking_space(self):
        assert format_currency(1234.5) == "R\xa01\xa0234,50"

    def test_millions(self):
        assert format_currency(1234567) == "R\xa01\xa0234\xa0567,00"

    def test_negative(self):
        assert format_currency(-50) == "-R\xa050,00"


class TestDates:
    def test_format_date(self):
        assert format_date("2024-01-05T14:30:00Z") == "05 Jan 2024"
        assert format_date(date(2024, 3, 1)) == "01 Mar 2024"

    def test_format_date_time(self):
        assert format_date_time(datetime(2024, 1, 5, 14, 30)) == "05 Jan 2024, 14:30"

    @pytest.mark.parametrize(
        ("due", "days"),
        [
            ("2024-01-05T18:00:00Z", 1),
            ("2024-01-08T12:00:00Z", 3),
            ("2024-01-08T12:00:01Z", 4),
            ("2024-01-04T12:00:00Z", -1),
        ],
    )
    def test_days_until_rounds_up(self, due, days):
        assert get_days_until(due, now=NOW) == days

    def test_naive_now_is_utc(self):
        assert get_days_until("2024-01-06T12:00:00Z", now=NOW.replace(tzinfo=None)) == 1


class TestUrgency:
    @pytest.mark.parametrize(
        ("days", "level"),
        [
            (-2, UrgencyLevel.CRITICAL),
            (1, UrgencyLevel.CRITICAL),
            (2, UrgencyLevel.HIGH),
            (3, UrgencyLevel.HIGH),
            (7, UrgencyLevel.MEDIUM),
            (8, UrgencyLevel.LOW),
        ],
    )
    def test_thresholds(self, days, level):
        assert get_urgency_level(days) == level


class TestBidMaths:
    def test_round_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(2.5) == 3
        assert round_half_up(1.005, 1) == 1.0

    def test_win_rate(self):
        assert calculate_win_rate(0, 0) == 0
        assert calculate_win_rate(1, 8) == 13
        assert calculate_win_rate(2, 3) == 67

    def test_bid_difference(self):
        assert calculate_bid_difference(110_000, 100_000) == BidDifference(amount=10_000, percentage=10.0)

    def test_bid_difference_without_lowest_bid(self):
        assert calculate_bid_difference(500, 0) == BidDifference(amount=500, percentage=0.0)
