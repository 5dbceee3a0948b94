"""Tests for the food log service."""

import asyncio

import pytest

from nutrition_ledger.domain.errors import InvalidInput, StoreUnavailable
from nutrition_ledger.domain.macros import MacroAmounts
from nutrition_ledger.services.food_log import FoodLogService
from nutrition_ledger.services.ledger import DailyMacroLedger
from nutrition_ledger.services.store import (
    DAILY_LOGS_COLLECTION,
    FOOD_LOGS_COLLECTION,
    DocumentKey,
)
from tests.conftest import FakeClock, FlakyDocumentStore

USER = "user-1"
DAY = "2024-03-01"
OATS = MacroAmounts(calories=300, protein=10, carbs=54, fats=5)
CHICKEN = MacroAmounts(calories=450, protein=60, carbs=0, fats=20)
APPLE = MacroAmounts(calories=95, protein=0.5, carbs=25, fats=0.5)


def _log(
    service: FoodLogService, meal: str, name: str, macros: MacroAmounts
) -> str:
    entry = asyncio.run(service.create_entry(USER, meal, name, macros, DAY))
    return entry.id


def test_create_entry_stores_it_and_adds_to_totals(
    food_log_service: FoodLogService,
    ledger: DailyMacroLedger,
    store: FlakyDocumentStore,
) -> None:
    entry = asyncio.run(
        food_log_service.create_entry(
            USER, "Breakfast", " Oats ", OATS, DAY, food_id="food-7"
        )
    )

    assert entry.id == "entry-1"
    assert entry.meal == "breakfast"
    assert entry.food_name == "Oats"
    assert entry.portion == "1 serving"
    stored = store.documents[DocumentKey(USER, FOOD_LOGS_COLLECTION, "entry-1")]
    assert stored["foodId"] == "food-7"
    assert stored["calories"] == 300
    assert asyncio.run(ledger.get_totals(USER, DAY)) == OATS
    assert asyncio.run(ledger.get_streak(USER)).streak == 1


def test_list_entries_newest_first_for_one_day(
    food_log_service: FoodLogService, clock: FakeClock
) -> None:
    first = _log(food_log_service, "breakfast", "Oats", OATS)
    clock.advance(hours=5)
    second = _log(food_log_service, "lunch", "Chicken", CHICKEN)
    asyncio.run(
        food_log_service.create_entry(USER, "snack", "Apple", APPLE, "2024-03-02")
    )

    entries = asyncio.run(food_log_service.list_entries(USER, DAY))

    assert [entry.id for entry in entries] == [second, first]


def test_delete_leaves_totals_equal_to_remaining_entries(
    food_log_service: FoodLogService, ledger: DailyMacroLedger
) -> None:
    _log(food_log_service, "breakfast", "Oats", OATS)
    chicken = _log(food_log_service, "lunch", "Chicken", CHICKEN)
    _log(food_log_service, "snack", "Apple", APPLE)

    record = asyncio.run(food_log_service.delete_entry(USER, chicken))

    remaining = asyncio.run(food_log_service.list_entries(USER, DAY))
    expected = MacroAmounts.zero()
    for entry in remaining:
        expected = expected.plus(entry.macros)
    assert record is not None
    assert record.totals == expected
    assert asyncio.run(ledger.get_totals(USER, DAY)) == expected
    assert chicken not in [entry.id for entry in remaining]


def test_delete_missing_entry_returns_none(
    food_log_service: FoodLogService, ledger: DailyMacroLedger
) -> None:
    _log(food_log_service, "breakfast", "Oats", OATS)

    assert asyncio.run(food_log_service.delete_entry(USER, "missing")) is None
    assert asyncio.run(ledger.get_totals(USER, DAY)) == OATS


def test_update_entry_moves_totals(
    food_log_service: FoodLogService, ledger: DailyMacroLedger
) -> None:
    _log(food_log_service, "breakfast", "Oats", OATS)
    chicken = _log(food_log_service, "lunch", "Chicken", CHICKEN)
    half = MacroAmounts(calories=225, protein=30, carbs=0, fats=10)

    updated = asyncio.run(
        food_log_service.update_entry(USER, chicken, half, portion="half plate")
    )

    assert updated is not None
    assert updated.meal == "lunch"
    assert updated.portion == "half plate"
    assert asyncio.run(ledger.get_totals(USER, DAY)) == OATS.plus(half)


def test_update_missing_entry_returns_none(food_log_service: FoodLogService) -> None:
    assert asyncio.run(food_log_service.update_entry(USER, "missing", OATS)) is None


def test_unknown_meal_is_rejected(
    food_log_service: FoodLogService, store: FlakyDocumentStore
) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        asyncio.run(food_log_service.create_entry(USER, "brunch", "Eggs", OATS, DAY))

    assert excinfo.value.field == "meal"
    assert store.documents == {}


def test_blank_food_name_is_rejected(food_log_service: FoodLogService) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        asyncio.run(food_log_service.create_entry(USER, "lunch", "  ", OATS, DAY))

    assert excinfo.value.field == "food_name"


def test_failed_ledger_add_removes_the_entry(
    food_log_service: FoodLogService, store: FlakyDocumentStore
) -> None:
    store.fail_get.add(DAILY_LOGS_COLLECTION)

    with pytest.raises(StoreUnavailable):
        asyncio.run(
            food_log_service.create_entry(USER, "lunch", "Chicken", CHICKEN, DAY)
        )

    assert asyncio.run(food_log_service.list_entries(USER, DAY)) == []


def test_failed_ledger_subtract_restores_the_entry(
    food_log_service: FoodLogService, store: FlakyDocumentStore
) -> None:
    chicken = _log(food_log_service, "lunch", "Chicken", CHICKEN)
    store.fail_get.add(DAILY_LOGS_COLLECTION)

    with pytest.raises(StoreUnavailable):
        asyncio.run(food_log_service.delete_entry(USER, chicken))

    restored = asyncio.run(food_log_service.get_entry(USER, chicken))
    assert restored is not None
    assert restored.macros == CHICKEN
