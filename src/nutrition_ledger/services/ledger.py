"""Per-user daily macro ledger.

Totals for a day are only ever changed through ``add_to_record`` and
``subtract_from_record``; an edit of a logged food is a subtract of its old
macros followed by an add of the new ones. Every write stores all four macro
fields at once.

Each mutation is a read followed by a write against the store with no
locking, so callers must await one mutation per (user, date) before issuing
the next.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime

from nutrition_ledger.domain.dates import (
    format_date_key,
    parse_date_key,
    today_key,
)
from nutrition_ledger.domain.errors import (
    InvalidInput,
    StreakUpdateFailed,
)
from nutrition_ledger.domain.macros import DailyMacroRecord, MacroAmounts
from nutrition_ledger.domain.profiles import StreakState
from nutrition_ledger.services.store import (
    DAILY_LOGS_COLLECTION,
    PROFILE_COLLECTION,
    PROFILE_KEY,
    DocumentKey,
    DocumentStore,
)
from nutrition_ledger.services.streaks import advance_streak

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class DailyMacroLedger:
    """Service that maintains daily macro totals and the logging streak."""

    store: DocumentStore
    clock: Callable[[], datetime] = _utc_now
    timezone_name: str | None = None

    async def get_record(
        self, user_id: str, day: str | date | None = None
    ) -> DailyMacroRecord | None:
        """Return the record for a day, or None when nothing was logged."""
        date_key = self.resolve_date_key(day)
        doc = await self.store.get(self._record_key(user_id, date_key))
        if doc is None:
            return None
        return DailyMacroRecord.from_document(date_key, doc)

    async def get_totals(
        self, user_id: str, day: str | date | None = None
    ) -> MacroAmounts:
        """Return the totals for a day, zero when no record exists."""
        record = await self.get_record(user_id, day)
        return record.totals if record else MacroAmounts.zero()

    async def add_to_record(
        self, user_id: str, delta: MacroAmounts, day: str | date | None = None
    ) -> DailyMacroRecord:
        """Add a logged food's macros to the day's totals.

        Every call is a separate increment. The streak is updated afterwards;
        a streak failure is logged and does not fail the add.
        """
        delta.validate_delta()
        date_key = self.resolve_date_key(day)
        record = await self._apply(
            user_id, date_key, lambda totals: totals.plus(delta)
        )
        _logger.info(
            "Ledger add: user=%s date=%s delta=%s", user_id, date_key, delta
        )
        # The totals are already written; nothing after this point may fail the add.
        try:
            await self.update_streak(user_id, date_key)
        except Exception:
            _logger.exception(
                "Streak update failed: user=%s date=%s", user_id, date_key
            )
        return record

    async def subtract_from_record(
        self, user_id: str, delta: MacroAmounts, day: str | date | None = None
    ) -> DailyMacroRecord:
        """Remove a food's macros from the day's totals, flooring each at zero."""
        delta.validate_delta()
        date_key = self.resolve_date_key(day)
        record = await self._apply(
            user_id, date_key, lambda totals: totals.minus_clamped(delta)
        )
        _logger.info(
            "Ledger subtract: user=%s date=%s delta=%s", user_id, date_key, delta
        )
        return record

    async def edit_entry(
        self,
        user_id: str,
        old: MacroAmounts,
        new: MacroAmounts,
        day: str | date | None = None,
    ) -> DailyMacroRecord:
        """Replace a logged food's macros as a subtract followed by an add."""
        old.validate_delta()
        new.validate_delta()
        date_key = self.resolve_date_key(day)
        await self.subtract_from_record(user_id, old, date_key)
        return await self.add_to_record(user_id, new, date_key)

    async def get_records_range(
        self, user_id: str, start: str | date, end: str | date
    ) -> list[DailyMacroRecord]:
        """Return the stored records between two dates inclusive, oldest first."""
        start_key = self.resolve_date_key(start, field="start")
        end_key = self.resolve_date_key(end, field="end")
        if start_key > end_key:
            raise InvalidInput("start", "must not be after end")
        docs = await self.store.list_range(
            user_id, DAILY_LOGS_COLLECTION, start_key, end_key
        )
        records = [
            DailyMacroRecord.from_document(str(doc.get("date", "")), doc)
            for doc in docs
        ]
        return sorted(records, key=lambda record: record.date)

    async def update_streak(self, user_id: str, day: str | date) -> StreakState:
        """Advance the profile streak for a log on the given day."""
        date_key = self.resolve_date_key(day)
        log_date = parse_date_key(date_key)
        profile_key = DocumentKey(user_id, PROFILE_COLLECTION, PROFILE_KEY)
        try:
            profile = await self.store.get(profile_key) or {}
            current = _streak_from_profile(profile)
            advanced = advance_streak(current, log_date)
            if advanced is None:
                return current
            await self.store.set(
                profile_key,
                {
                    "streak": advanced.streak,
                    "lastMealLogDate": date_key,
                    "updatedAt": self.clock().isoformat(),
                },
                merge=True,
            )
        except InvalidInput:
            raise
        except Exception as exc:
            raise StreakUpdateFailed(
                f"Could not update streak for {user_id} on {date_key}"
            ) from exc
        _logger.info(
            "Streak updated: user=%s date=%s streak=%s",
            user_id,
            date_key,
            advanced.streak,
        )
        return advanced

    async def get_streak(self, user_id: str) -> StreakState:
        """Return the stored streak for a user."""
        profile = await self.store.get(
            DocumentKey(user_id, PROFILE_COLLECTION, PROFILE_KEY)
        )
        return _streak_from_profile(profile or {})

    async def _apply(
        self,
        user_id: str,
        date_key: str,
        change: Callable[[MacroAmounts], MacroAmounts],
    ) -> DailyMacroRecord:
        key = self._record_key(user_id, date_key)
        existing = await self.store.get(key)
        current = MacroAmounts.from_document(existing)
        updated = change(current)
        now = self.clock().isoformat()
        created_at = existing.get("createdAt") if existing else None
        doc = {
            "date": date_key,
            **updated.to_document(),
            "createdAt": created_at or now,
            "updatedAt": now,
        }
        await self.store.set(key, doc, merge=True)
        return DailyMacroRecord.from_document(date_key, doc)

    def resolve_date_key(self, day: str | date | None, field: str = "date") -> str:
        """Normalize a day to its YYYY-MM-DD key, defaulting to today."""
        if day is None:
            return today_key(self.timezone_name)
        if isinstance(day, date):
            return format_date_key(day)
        return format_date_key(parse_date_key(day, field=field))

    @staticmethod
    def _record_key(user_id: str, date_key: str) -> DocumentKey:
        return DocumentKey(user_id, DAILY_LOGS_COLLECTION, date_key)


def _streak_from_profile(profile: dict[str, object]) -> StreakState:
    raw_streak = profile.get("streak")
    streak = int(raw_streak) if isinstance(raw_streak, int | float) else 0
    raw_date = profile.get("lastMealLogDate")
    last_log_date = None
    if isinstance(raw_date, str) and raw_date:
        try:
            last_log_date = parse_date_key(raw_date, field="lastMealLogDate")
        except InvalidInput:
            _logger.warning("Ignoring malformed lastMealLogDate: %r", raw_date)
    return StreakState(streak=max(streak, 0), last_log_date=last_log_date)
