"""Tests for pure feature functions."""

from datetime import date, datetime, timezone

from metabalance.tracking.dates import local_today, to_local_date, to_naive_utc, utc_range, week_range, week_start
from metabalance.tracking.features import goal_progress_pct, mean_or_zero, round_half_up


class TestRoundHalfUp:
    def test_ties_go_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_ties_towards_zero(self):
        assert round_half_up(-2.5) == -2

    def test_plain(self):
        assert round_half_up(4.49) == 4
        assert round_half_up(0.0) == 0


class TestMeanOrZero:
    def test_basic(self):
        assert mean_or_zero([2.0, 4.0, 6.0]) == 4.0

    def test_empty(self):
        assert mean_or_zero([]) == 0.0


class TestGoalProgressPct:
    def test_half(self):
        assert goal_progress_pct(1000, 2000) == 50.0

    def test_capped(self):
        assert goal_progress_pct(3000, 2000) == 100.0

    def test_none_and_zero_target(self):
        assert goal_progress_pct(None, 2000) is None
        assert goal_progress_pct(10, 0) is None


class TestDates:
    def test_week_starts_sunday(self):
        # 2026-03-10 is a Tuesday
        assert week_start(date(2026, 3, 10)) == date(2026, 3, 8)
        assert week_start(date(2026, 3, 8)) == date(2026, 3, 8)

    def test_week_range(self):
        assert week_range(date(2026, 3, 14)) == (date(2026, 3, 8), date(2026, 3, 14))

    def test_utc_range_shifts_with_timezone(self):
        start, end = utc_range(date(2026, 1, 15), date(2026, 1, 16), "America/New_York")
        assert start == datetime(2026, 1, 15, 5, 0)
        assert end == datetime(2026, 1, 16, 5, 0)

    def test_to_local_date(self):
        assert to_local_date(datetime(2026, 1, 16, 3, 0), "America/New_York") == date(2026, 1, 15)

    def test_to_naive_utc_passthrough(self):
        naive = datetime(2026, 1, 1, 12, 0)
        assert to_naive_utc(naive) is naive

    def test_local_today_uses_timezone(self):
        now = datetime(2026, 1, 16, 2, 0, tzinfo=timezone.utc)
        assert local_today("America/New_York", now) == date(2026, 1, 15)
        assert local_today("UTC", now) == date(2026, 1, 16)
