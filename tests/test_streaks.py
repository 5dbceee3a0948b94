"""Tests for streak transitions."""

from datetime import date

from nutrition_ledger.domain.profiles import StreakState
from nutrition_ledger.services.streaks import advance_streak

DAY = date(2024, 3, 1)


def test_first_log_starts_streak() -> None:
    assert advance_streak(StreakState(0, None), DAY) == StreakState(1, DAY)


def test_same_day_is_noop() -> None:
    assert advance_streak(StreakState(4, DAY), DAY) is None


def test_next_day_extends_streak() -> None:
    next_day = date(2024, 3, 2)
    assert advance_streak(StreakState(4, DAY), next_day) == StreakState(5, next_day)


def test_gap_resets_streak() -> None:
    later = date(2024, 3, 4)
    assert advance_streak(StreakState(4, DAY), later) == StreakState(1, later)


def test_backdated_log_is_noop() -> None:
    assert advance_streak(StreakState(4, DAY), date(2024, 2, 28)) is None


def test_month_boundary_counts_as_consecutive() -> None:
    state = StreakState(2, date(2024, 2, 29))
    assert advance_streak(state, DAY) == StreakState(3, DAY)
