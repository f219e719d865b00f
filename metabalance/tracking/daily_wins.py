"""Daily wins: five habit flags scored 0 to 5, plus streak and weekly stats.

All functions are pure and never raise. Streaks are computed over the
records that are present; a missing date is not detected as a gap, so
callers must supply one record per date.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, fields, replace
from datetime import date

from metabalance.tracking.features import mean_or_zero, round_half_up

QUALIFYING_SCORE = 3
PERFECT_SCORE = 5

GOAL_FIELDS: dict[str, str] = {
    "meal_logging": "meal_logging_complete",
    "protein": "protein_goal_complete",
    "fasting": "fasting_goal_complete",
    "exercise": "exercise_goal_complete",
    "water": "water_goal_complete",
}


@dataclass(frozen=True, slots=True)
class DailyGoalFlags:
    meal_logging_complete: bool = False
    protein_goal_complete: bool = False
    fasting_goal_complete: bool = False
    exercise_goal_complete: bool = False
    water_goal_complete: bool = False

    @property
    def win_score(self) -> int:
        return win_score(self)


@dataclass(frozen=True, slots=True)
class DailyGoalUpdate:
    """Partial write: None leaves the stored flag untouched."""

    meal_logging_complete: bool | None = None
    protein_goal_complete: bool | None = None
    fasting_goal_complete: bool | None = None
    exercise_goal_complete: bool | None = None
    water_goal_complete: bool | None = None


@dataclass(frozen=True, slots=True)
class DayRecord:
    day: date
    flags: DailyGoalFlags

    @property
    def win_score(self) -> int:
        return win_score(self.flags)


@dataclass(frozen=True, slots=True)
class StreakStats:
    current_streak: int = 0
    longest_streak: int = 0


@dataclass(frozen=True, slots=True)
class WeeklyAggregate:
    total_days: int = 0
    days_logged: int = 0
    average_win_score: int = 0
    perfect_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0


def win_score(flags: DailyGoalFlags) -> int:
    return sum(1 for f in fields(flags) if getattr(flags, f.name))


def merge_flags(current: DailyGoalFlags | None, update: DailyGoalUpdate) -> DailyGoalFlags:
    """Apply only the fields the update sets; the score follows the full result."""
    base = current or DailyGoalFlags()
    changes = {f.name: getattr(update, f.name) for f in fields(update) if getattr(update, f.name) is not None}
    return replace(base, **changes)


def toggle_update(current: DailyGoalFlags | None, goal_id: str) -> DailyGoalUpdate:
    """Build the update that flips one flag. Unknown ids give an empty update."""
    field_name = GOAL_FIELDS.get(goal_id)
    if field_name is None:
        return DailyGoalUpdate()
    base = current or DailyGoalFlags()
    return DailyGoalUpdate(**{field_name: not getattr(base, field_name)})


def compute_streaks(scores: Sequence[int], threshold: int = QUALIFYING_SCORE) -> StreakStats:
    """Scores are most-recent-first.

    current_streak: qualifying run starting at scores[0] (0 if it does not qualify).
    longest_streak: longest qualifying run anywhere.
    """
    current = 0
    longest = 0
    run = 0
    current_closed = False
    for score in scores:
        if score >= threshold:
            run += 1
            longest = max(longest, run)
        else:
            if not current_closed:
                current = run
                current_closed = True
            run = 0
    if not current_closed:
        current = run
    return StreakStats(current_streak=current, longest_streak=longest)


def sort_recent_first(records: Iterable[DayRecord]) -> list[DayRecord]:
    return sorted(records, key=lambda r: r.day, reverse=True)


def streaks_from_records(records: Iterable[DayRecord], threshold: int = QUALIFYING_SCORE) -> StreakStats:
    ordered = sort_recent_first(records)
    return compute_streaks([r.win_score for r in ordered], threshold)


def average_win_score(scores: Sequence[int]) -> int:
    return round_half_up(mean_or_zero([float(s) for s in scores]))


def days_logged(records: Iterable[DayRecord]) -> int:
    return sum(1 for r in records if r.flags.meal_logging_complete)


def perfect_days(records: Iterable[DayRecord]) -> int:
    return sum(1 for r in records if r.win_score >= PERFECT_SCORE)


def weekly_aggregate(records: Iterable[DayRecord]) -> WeeklyAggregate:
    ordered = sort_recent_first(records)
    if not ordered:
        return WeeklyAggregate()
    scores = [r.win_score for r in ordered]
    streaks = compute_streaks(scores)
    return WeeklyAggregate(
        total_days=len(ordered),
        days_logged=days_logged(ordered),
        average_win_score=average_win_score(scores),
        perfect_days=perfect_days(ordered),
        current_streak=streaks.current_streak,
        longest_streak=streaks.longest_streak,
    )
