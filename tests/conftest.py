"""Shared test fixtures."""

import itertools
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer, build_container
from nutrition_ledger.domain.errors import StoreUnavailable
from nutrition_ledger.domain.profiles import BiometricProfile
from nutrition_ledger.services.food_log import FoodLogService
from nutrition_ledger.services.ledger import DailyMacroLedger
from nutrition_ledger.services.profiles import ProfileService
from nutrition_ledger.services.store import DocumentKey, InMemoryDocumentStore


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class FlakyDocumentStore(InMemoryDocumentStore):
    """In-memory store that fails reads or writes for chosen collections."""

    fail_get: set[str] = field(default_factory=set)
    fail_set: set[str] = field(default_factory=set)
    set_errors: dict[str, Exception] = field(default_factory=dict)
    set_calls: list[DocumentKey] = field(default_factory=list)
    get_calls: list[DocumentKey] = field(default_factory=list)

    async def get(self, key: DocumentKey) -> dict[str, object] | None:
        self.get_calls.append(key)
        if key.collection in self.fail_get:
            raise StoreUnavailable(f"get failed for {key.collection}")
        return await super().get(key)

    async def set(
        self, key: DocumentKey, fields: Mapping[str, object], merge: bool = True
    ) -> None:
        self.set_calls.append(key)
        if key.collection in self.fail_set:
            raise StoreUnavailable(f"set failed for {key.collection}")
        if key.collection in self.set_errors:
            raise self.set_errors[key.collection]
        await super().set(key, fields, merge=merge)


def male_profile(**overrides: object) -> BiometricProfile:
    values: dict[str, object] = {
        "age": 30,
        "sex": "male",
        "height": 180,
        "height_unit": "cm",
        "weight": 80,
        "weight_unit": "kg",
        "activity_level": "moderate",
        "goal": "lose",
        "goal_intensity": "moderate",
    }
    values.update(overrides)
    return BiometricProfile(**values)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_token="api-token",
        store_backend="memory",
        timezone="UTC",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FlakyDocumentStore:
    return FlakyDocumentStore()


@pytest.fixture
def ledger(store: FlakyDocumentStore, clock: FakeClock) -> DailyMacroLedger:
    return DailyMacroLedger(store=store, clock=clock, timezone_name="UTC")


@pytest.fixture
def profile_service(store: FlakyDocumentStore, clock: FakeClock) -> ProfileService:
    return ProfileService(store=store, clock=clock)


@pytest.fixture
def food_log_service(
    store: FlakyDocumentStore, ledger: DailyMacroLedger, clock: FakeClock
) -> FoodLogService:
    ids = (f"entry-{n}" for n in itertools.count(1))
    return FoodLogService(
        store=store, ledger=ledger, clock=clock, id_factory=lambda: next(ids)
    )


@pytest.fixture
def container(settings: Settings, store: FlakyDocumentStore) -> AppContainer:
    return build_container(settings, store=store)
