"""Request and response models for the HTTP API."""

from typing import Literal

from pydantic import BaseModel, Field

from nutrition_ledger.domain.macros import MacroAmounts, MacroTargets, ManualMacros
from nutrition_ledger.domain.profiles import BiometricProfile, OnboardingData


class MacroDeltaIn(BaseModel):
    """Macros of a single logged food; omitted fields count as zero."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fats: float = Field(default=0.0, ge=0)

    def to_domain(self) -> MacroAmounts:
        return MacroAmounts(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


class EditEntryIn(BaseModel):
    """Old and new macros of an edited food entry."""

    old: MacroDeltaIn
    new: MacroDeltaIn


class BiometricsIn(BaseModel):
    """Inputs for automatic target calculation.

    Values are range-checked by the calculator so errors name the field.
    """

    age: int
    sex: str
    height: float
    height_unit: str = "cm"
    weight: float
    weight_unit: str = "kg"
    activity_level: str
    goal: str
    goal_intensity: str = "moderate"

    def to_domain(self) -> BiometricProfile:
        return BiometricProfile(
            age=self.age,
            sex=self.sex,
            height=self.height,
            height_unit=self.height_unit,
            weight=self.weight,
            weight_unit=self.weight_unit,
            activity_level=self.activity_level,
            goal=self.goal,
            goal_intensity=self.goal_intensity,
        )


class ManualMacrosIn(BaseModel):
    protein: float
    carbs: float
    fats: float

    def to_domain(self) -> ManualMacros:
        return ManualMacros(protein=self.protein, carbs=self.carbs, fats=self.fats)


class OnboardingIn(BaseModel):
    """Onboarding answers submitted by the client."""

    name: str
    biometrics: BiometricsIn
    macros_setup: Literal["auto", "manual"] = "auto"
    custom_macros: ManualMacrosIn | None = None
    diet_preference: str | None = None
    allergies: list[str] = Field(default_factory=list)
    purpose: str | None = None

    def to_domain(self) -> OnboardingData:
        return OnboardingData(
            name=self.name,
            biometrics=self.biometrics.to_domain(),
            macros_setup=self.macros_setup,
            custom_macros=self.custom_macros.to_domain()
            if self.custom_macros
            else None,
            diet_preference=self.diet_preference,
            allergies=list(self.allergies),
            purpose=self.purpose,
        )


def targets_payload(targets: MacroTargets | None) -> dict[str, object] | None:
    if targets is None:
        return None
    return targets.to_document()


class FoodLogEntryIn(MacroDeltaIn):
    """A food logged against a meal."""

    meal: str
    food_name: str
    food_id: str | None = None
    portion: str | None = None
    date: str | None = None


class FoodLogUpdateIn(MacroDeltaIn):
    """New macros for an entry; other fields are kept when omitted."""

    meal: str | None = None
    food_name: str | None = None
    portion: str | None = None
