"""Individually logged foods."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from nutrition_ledger.domain.macros import MacroAmounts, parse_timestamp

MEAL_TYPES = ("breakfast", "lunch", "dinner", "snack")
DEFAULT_PORTION = "1 serving"


@dataclass(frozen=True)
class FoodLogEntry:
    """One food logged against a meal on a calendar day."""

    id: str
    date: str
    meal: str
    food_name: str
    macros: MacroAmounts
    food_id: str | None = None
    portion: str = DEFAULT_PORTION
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_document(self) -> dict[str, object]:
        return {
            "id": self.id,
            "date": self.date,
            "meal": self.meal,
            "foodId": self.food_id,
            "foodName": self.food_name,
            **self.macros.to_document(),
            "portion": self.portion,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, object]) -> "FoodLogEntry":
        food_id = doc.get("foodId")
        return cls(
            id=str(doc.get("id") or ""),
            date=str(doc.get("date") or ""),
            meal=str(doc.get("meal") or ""),
            food_name=str(doc.get("foodName") or ""),
            macros=MacroAmounts.from_document(doc),
            food_id=str(food_id) if food_id else None,
            portion=str(doc.get("portion") or DEFAULT_PORTION),
            created_at=parse_timestamp(doc.get("createdAt")),
            updated_at=parse_timestamp(doc.get("updatedAt")),
        )
