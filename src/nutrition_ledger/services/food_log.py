"""Food log service.

Each logged food is stored as its own document in the ``food_logs``
collection, keyed by entry id. Creating, editing and deleting an entry also
moves the day's totals through the ledger, so a day's record equals the sum
of its remaining entries. The entry document is written first; when the
ledger call then fails, the entry change is rolled back before the error
propagates.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime
from uuid import uuid4

from nutrition_ledger.domain.errors import InvalidInput, StoreUnavailable
from nutrition_ledger.domain.food_log import DEFAULT_PORTION, MEAL_TYPES, FoodLogEntry
from nutrition_ledger.domain.macros import DailyMacroRecord, MacroAmounts
from nutrition_ledger.services.ledger import DailyMacroLedger
from nutrition_ledger.services.store import (
    FOOD_LOGS_COLLECTION,
    DocumentKey,
    DocumentStore,
)

_logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _new_entry_id() -> str:
    return str(uuid4())


@dataclass
class FoodLogService:
    """Service that records individual foods and keeps daily totals in step."""

    store: DocumentStore
    ledger: DailyMacroLedger
    clock: Callable[[], datetime] = _utc_now
    id_factory: Callable[[], str] = _new_entry_id

    async def create_entry(
        self,
        user_id: str,
        meal: str,
        food_name: str,
        macros: MacroAmounts,
        day: str | date | None = None,
        food_id: str | None = None,
        portion: str | None = None,
        logged_at: datetime | None = None,
    ) -> FoodLogEntry:
        """Log a food and add its macros to the day's totals."""
        macros.validate_delta()
        now = self.clock()
        entry = FoodLogEntry(
            id=self.id_factory(),
            date=self.ledger.resolve_date_key(day),
            meal=_validate_meal(meal),
            food_name=_validate_food_name(food_name),
            macros=macros,
            food_id=food_id,
            portion=portion or DEFAULT_PORTION,
            created_at=logged_at or now,
            updated_at=now,
        )
        key = self._entry_key(user_id, entry.id)
        await self.store.set(key, entry.to_document(), merge=False)
        try:
            await self.ledger.add_to_record(user_id, macros, entry.date)
        except Exception:
            await self._rollback(key, None)
            raise
        _logger.info(
            "Food logged: user=%s entry=%s date=%s meal=%s",
            user_id,
            entry.id,
            entry.date,
            entry.meal,
        )
        return entry

    async def get_entry(self, user_id: str, entry_id: str) -> FoodLogEntry | None:
        doc = await self.store.get(self._entry_key(user_id, entry_id))
        if doc is None:
            return None
        return FoodLogEntry.from_document(doc)

    async def list_entries(
        self, user_id: str, day: str | date | None = None
    ) -> list[FoodLogEntry]:
        """Return the day's entries, newest first."""
        date_key = self.ledger.resolve_date_key(day)
        docs = await self.store.list_matching(
            user_id, FOOD_LOGS_COLLECTION, "date", date_key
        )
        entries = [FoodLogEntry.from_document(doc) for doc in docs]
        return sorted(
            entries,
            key=lambda entry: (entry.created_at or _OLDEST, entry.id),
            reverse=True,
        )

    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        macros: MacroAmounts,
        meal: str | None = None,
        food_name: str | None = None,
        portion: str | None = None,
    ) -> FoodLogEntry | None:
        """Change an entry, moving the day's totals from its old to new macros."""
        macros.validate_delta()
        current = await self.get_entry(user_id, entry_id)
        if current is None:
            return None
        updated = replace(
            current,
            macros=macros,
            meal=_validate_meal(meal) if meal is not None else current.meal,
            food_name=_validate_food_name(food_name)
            if food_name is not None
            else current.food_name,
            portion=portion or current.portion,
            updated_at=self.clock(),
        )
        key = self._entry_key(user_id, entry_id)
        await self.store.set(key, updated.to_document(), merge=False)
        try:
            await self.ledger.edit_entry(
                user_id, current.macros, updated.macros, current.date
            )
        except Exception:
            await self._rollback(key, current)
            raise
        _logger.info("Food log updated: user=%s entry=%s", user_id, entry_id)
        return updated

    async def delete_entry(
        self, user_id: str, entry_id: str
    ) -> DailyMacroRecord | None:
        """Remove an entry and subtract its stored macros from the day.

        Returns the day's record after the subtraction, or None when the entry
        does not exist.
        """
        entry = await self.get_entry(user_id, entry_id)
        if entry is None:
            return None
        key = self._entry_key(user_id, entry_id)
        await self.store.delete(key)
        try:
            record = await self.ledger.subtract_from_record(
                user_id, entry.macros, entry.date
            )
        except Exception:
            await self._rollback(key, entry)
            raise
        _logger.info(
            "Food log deleted: user=%s entry=%s date=%s",
            user_id,
            entry_id,
            entry.date,
        )
        return record

    async def _rollback(self, key: DocumentKey, previous: FoodLogEntry | None) -> None:
        try:
            if previous is None:
                await self.store.delete(key)
            else:
                await self.store.set(key, previous.to_document(), merge=False)
        except StoreUnavailable:
            _logger.exception("Food log rollback failed: key=%s", key)

    @staticmethod
    def _entry_key(user_id: str, entry_id: str) -> DocumentKey:
        return DocumentKey(user_id, FOOD_LOGS_COLLECTION, entry_id)


def _validate_meal(meal: str) -> str:
    normalized = meal.strip().lower()
    if normalized not in MEAL_TYPES:
        raise InvalidInput("meal", f"must be one of {', '.join(MEAL_TYPES)}")
    return normalized


def _validate_food_name(food_name: str) -> str:
    name = food_name.strip()
    if not name:
        raise InvalidInput("food_name", "must not be empty")
    return name
