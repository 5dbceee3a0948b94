"""Macro totals, daily records and targets."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from nutrition_ledger.domain.errors import InvalidInput

MACRO_FIELDS = ("calories", "protein", "carbs", "fats")


@dataclass(frozen=True)
class MacroAmounts:
    """Calories (kcal) with protein, carbs and fats (grams)."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0

    @classmethod
    def zero(cls) -> "MacroAmounts":
        return cls()

    @classmethod
    def from_document(cls, doc: Mapping[str, object] | None) -> "MacroAmounts":
        """Read macro fields from a stored document; absent fields read as 0."""
        if not doc:
            return cls()
        return cls(**{name: _to_float(doc.get(name)) for name in MACRO_FIELDS})

    def to_document(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in MACRO_FIELDS}

    def plus(self, other: "MacroAmounts") -> "MacroAmounts":
        return MacroAmounts(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fats=self.fats + other.fats,
        )

    def minus_clamped(self, other: "MacroAmounts") -> "MacroAmounts":
        """Subtract field by field, flooring each field at zero independently."""
        return MacroAmounts(
            calories=max(0.0, self.calories - other.calories),
            protein=max(0.0, self.protein - other.protein),
            carbs=max(0.0, self.carbs - other.carbs),
            fats=max(0.0, self.fats - other.fats),
        )

    def validate_delta(self) -> "MacroAmounts":
        """Ensure every field is a finite, non-negative number."""
        for name in MACRO_FIELDS:
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidInput(name, "must be a non-negative number")
        return self


@dataclass(frozen=True)
class DailyMacroRecord:
    """Running macro totals for one user on one calendar day."""

    date: str
    calories: float
    protein: float
    carbs: float
    fats: float
    created_at: datetime | None
    updated_at: datetime | None

    @property
    def totals(self) -> MacroAmounts:
        return MacroAmounts(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )

    @classmethod
    def from_document(
        cls, date_key: str, doc: Mapping[str, object]
    ) -> "DailyMacroRecord":
        totals = MacroAmounts.from_document(doc)
        return cls(
            date=str(doc.get("date") or date_key),
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fats=totals.fats,
            created_at=parse_timestamp(doc.get("createdAt")),
            updated_at=parse_timestamp(doc.get("updatedAt")),
        )


@dataclass(frozen=True)
class ManualMacros:
    """Macro grams supplied directly by the user."""

    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class MacroTargets:
    """Daily calorie and macro targets."""

    calories: int
    protein: float
    carbs: float
    fats: float
    base_tdee: int | None = None

    def to_document(self) -> dict[str, float]:
        doc: dict[str, float] = {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }
        if self.base_tdee is not None:
            doc["baseTDEE"] = self.base_tdee
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> "MacroTargets":
        base_tdee = doc.get("baseTDEE")
        return cls(
            calories=int(_to_float(doc.get("calories"))),
            protein=_to_float(doc.get("protein")),
            carbs=_to_float(doc.get("carbs")),
            fats=_to_float(doc.get("fats")),
            base_tdee=int(base_tdee) if isinstance(base_tdee, int | float) else None,
        )


def parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0
