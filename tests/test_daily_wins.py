"""Tests for win scores, flag merging and streaks."""

from datetime import date, timedelta

from metabalance.tracking.daily_wins import (
    DailyGoalFlags,
    DailyGoalUpdate,
    DayRecord,
    average_win_score,
    compute_streaks,
    days_logged,
    merge_flags,
    perfect_days,
    streaks_from_records,
    toggle_update,
    weekly_aggregate,
    win_score,
)

ALL_TRUE = DailyGoalFlags(True, True, True, True, True)


def _flags_for(score: int) -> DailyGoalFlags:
    values = [i < score for i in range(5)]
    return DailyGoalFlags(*values)


def _records(scores: list[int], newest: date = date(2026, 3, 14)) -> list[DayRecord]:
    """scores are most-recent-first."""
    return [DayRecord(day=newest - timedelta(days=i), flags=_flags_for(s)) for i, s in enumerate(scores)]


class TestWinScore:
    def test_two_flags(self):
        flags = DailyGoalFlags(meal_logging_complete=True, protein_goal_complete=True)
        assert win_score(flags) == 2

    def test_all_and_none(self):
        assert ALL_TRUE.win_score == 5
        assert DailyGoalFlags().win_score == 0


class TestMergeFlags:
    def test_unset_fields_untouched(self):
        current = DailyGoalFlags(meal_logging_complete=True, protein_goal_complete=True)
        merged = merge_flags(current, DailyGoalUpdate(meal_logging_complete=False))
        assert merged.protein_goal_complete is True
        assert merged.meal_logging_complete is False
        assert merged.win_score == 1

    def test_no_existing_record(self):
        merged = merge_flags(None, DailyGoalUpdate(water_goal_complete=True))
        assert merged == DailyGoalFlags(water_goal_complete=True)


class TestToggle:
    def test_flips_flag(self):
        update = toggle_update(DailyGoalFlags(exercise_goal_complete=True), "exercise")
        assert update == DailyGoalUpdate(exercise_goal_complete=False)

    def test_missing_record_sets_true(self):
        assert toggle_update(None, "water") == DailyGoalUpdate(water_goal_complete=True)

    def test_unknown_goal_is_noop(self):
        assert toggle_update(ALL_TRUE, "sleep") == DailyGoalUpdate()


class TestStreaks:
    def test_example_sequence(self):
        stats = compute_streaks([5, 4, 5, 3, 4, 2, 5])
        assert stats.current_streak == 5
        assert stats.longest_streak == 5

    def test_latest_day_breaks_current(self):
        stats = compute_streaks([2, 3, 3, 3])
        assert stats.current_streak == 0
        assert stats.longest_streak == 3

    def test_longest_older_than_current(self):
        stats = compute_streaks([4, 1, 3, 3, 3, 5])
        assert stats.current_streak == 1
        assert stats.longest_streak == 4

    def test_empty(self):
        stats = compute_streaks([])
        assert (stats.current_streak, stats.longest_streak) == (0, 0)

    def test_perfect_threshold(self):
        stats = compute_streaks([5, 5, 4, 5], threshold=5)
        assert stats.current_streak == 2
        assert stats.longest_streak == 2

    def test_records_sorted_before_counting(self):
        records = list(reversed(_records([5, 4, 5, 3, 4, 2, 5])))
        stats = streaks_from_records(records)
        assert stats.current_streak == 5


class TestAggregates:
    def test_average_example(self):
        assert average_win_score([5, 4, 5, 3, 4, 2, 5]) == 4

    def test_average_rounds_half_up(self):
        assert average_win_score([3, 4]) == 4
        assert average_win_score([]) == 0

    def test_days_logged_counts_meal_flag(self):
        records = [
            DayRecord(date(2026, 3, 1), DailyGoalFlags(meal_logging_complete=True)),
            DayRecord(date(2026, 3, 2), DailyGoalFlags(water_goal_complete=True)),
        ]
        assert days_logged(records) == 1

    def test_perfect_days(self):
        assert perfect_days(_records([5, 4, 5])) == 2

    def test_weekly_aggregate(self):
        agg = weekly_aggregate(_records([5, 4, 5, 3, 4, 2, 5]))
        assert agg.total_days == 7
        assert agg.days_logged == 7
        assert agg.average_win_score == 4
        assert agg.perfect_days == 3
        assert agg.current_streak == 5
        assert agg.longest_streak == 5

    def test_weekly_aggregate_empty(self):
        agg = weekly_aggregate([])
        assert agg.total_days == 0
        assert agg.days_logged == 0
        assert agg.average_win_score == 0
        assert agg.perfect_days == 0
        assert agg.current_streak == 0
        assert agg.longest_streak == 0
