"""Small numeric helpers shared by the tracking core. None of them raise."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards +inf (2.5 → 3, -2.5 → -2)."""
    return int(math.floor(value + 0.5))


def mean_or_zero(values: list[float]) -> float:
    """Arithmetic mean, 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def goal_progress_pct(value: float | None, target_value: float) -> float | None:
    """Progress toward a daily intake target (0–100, capped).

    Returns None if value is None or the target is zero.
    """
    if value is None or target_value == 0.0:
        return None
    return max(0.0, min(100.0, (value / target_value) * 100.0))
