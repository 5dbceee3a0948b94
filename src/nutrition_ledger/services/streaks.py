"""Logging streak transitions."""

from datetime import date

from nutrition_ledger.domain.dates import days_between
from nutrition_ledger.domain.profiles import StreakState


def advance_streak(state: StreakState, log_date: date) -> StreakState | None:
    """Return the streak after logging on log_date, or None when unchanged.

    Logging again on the last counted day, or on any earlier day, leaves the
    streak alone. The next calendar day extends it; a later day restarts it.
    """
    if state.last_log_date is None:
        return StreakState(streak=1, last_log_date=log_date)

    gap = days_between(state.last_log_date, log_date)
    if gap <= 0:
        return None
    if gap == 1:
        return StreakState(streak=state.streak + 1, last_log_date=log_date)
    return StreakState(streak=1, last_log_date=log_date)
