"""Daily progress against targets and period summaries."""

from dataclasses import dataclass
from datetime import date, timedelta

from nutrition_ledger.domain.dates import format_date_key, parse_date_key, today_key
from nutrition_ledger.domain.errors import InvalidInput
from nutrition_ledger.domain.macros import MacroAmounts, MacroTargets
from nutrition_ledger.services.ledger import DailyMacroLedger
from nutrition_ledger.services.profiles import ProfileService

MAX_SUMMARY_DAYS = 366


@dataclass(frozen=True)
class DailyTotals:
    """Totals consumed on one day."""

    day: str
    calories: float
    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class DailyProgress:
    """Consumed totals for a day compared with the user's targets."""

    day: str
    consumed: MacroAmounts
    targets: MacroTargets | None
    remaining: MacroAmounts | None
    calorie_percent: float
    streak: int


@dataclass
class PeriodSummary:
    """Per-day totals and daily averages over a date range."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein: float
    avg_carbs: float
    avg_fats: float


@dataclass
class ProgressService:
    """Service combining ledger totals, targets and streaks."""

    ledger: DailyMacroLedger
    profiles: ProfileService

    async def get_daily_progress(
        self, user_id: str, day: str | date | None = None
    ) -> DailyProgress:
        """Return a day's consumption against the user's targets."""
        record = await self.ledger.get_record(user_id, day)
        consumed = record.totals if record else MacroAmounts.zero()
        day_key = record.date if record else _day_key(self.ledger, day)
        targets = await self.profiles.get_target_macros(user_id)
        streak = await self.ledger.get_streak(user_id)
        remaining = None
        percent = 0.0
        if targets is not None:
            remaining = MacroAmounts(
                calories=targets.calories,
                protein=targets.protein,
                carbs=targets.carbs,
                fats=targets.fats,
            ).minus_clamped(consumed)
            if targets.calories > 0:
                percent = min(100.0, consumed.calories / targets.calories * 100)
        return DailyProgress(
            day=day_key,
            consumed=consumed,
            targets=targets,
            remaining=remaining,
            calorie_percent=percent,
            streak=streak.streak,
        )

    async def get_period_summary(
        self, user_id: str, start: str | date, end: str | date
    ) -> PeriodSummary:
        """Return zero-filled daily totals and averages for a date range.

        Ranges longer than MAX_SUMMARY_DAYS are rejected.
        """
        start_day = _as_date(start, "start")
        days = (_as_date(end, "end") - start_day).days + 1
        if days > MAX_SUMMARY_DAYS:
            raise InvalidInput("end", f"range must not exceed {MAX_SUMMARY_DAYS} days")
        records = await self.ledger.get_records_range(user_id, start, end)
        by_day = {record.date: record.totals for record in records}

        daily: list[DailyTotals] = []
        totals = MacroAmounts.zero()
        for offset in range(days):
            key = format_date_key(start_day + timedelta(days=offset))
            amounts = by_day.get(key, MacroAmounts.zero())
            daily.append(
                DailyTotals(
                    day=key,
                    calories=amounts.calories,
                    protein=amounts.protein,
                    carbs=amounts.carbs,
                    fats=amounts.fats,
                )
            )
            totals = totals.plus(amounts)

        total_days = max(len(daily), 1)
        return PeriodSummary(
            daily=daily,
            avg_calories=totals.calories / total_days,
            avg_protein=totals.protein / total_days,
            avg_carbs=totals.carbs / total_days,
            avg_fats=totals.fats / total_days,
        )


def _as_date(value: str | date, field: str) -> date:
    if isinstance(value, date):
        return value
    return parse_date_key(value, field=field)


def _day_key(ledger: DailyMacroLedger, day: str | date | None) -> str:
    if day is None:
        return today_key(ledger.timezone_name)
    return format_date_key(_as_date(day, "date"))
