"""Domain models for user profiles and onboarding."""

from dataclasses import dataclass, field
from datetime import date, datetime

from nutrition_ledger.domain.macros import MacroTargets, ManualMacros


@dataclass(frozen=True)
class BiometricProfile:
    """Inputs for the automatic macro target calculation.

    When ``height_unit`` is ``"ft"`` the height is expressed in total inches
    (71 for 5'11").
    """

    age: int
    sex: str
    height: float
    height_unit: str
    weight: float
    weight_unit: str
    activity_level: str
    goal: str
    goal_intensity: str


@dataclass(frozen=True)
class OnboardingData:
    """Answers collected during onboarding."""

    name: str
    biometrics: BiometricProfile
    macros_setup: str = "auto"
    custom_macros: ManualMacros | None = None
    diet_preference: str | None = None
    allergies: list[str] = field(default_factory=list)
    purpose: str | None = None


@dataclass(frozen=True)
class StreakState:
    """Consecutive-day logging streak and the last day it counted."""

    streak: int
    last_log_date: date | None


@dataclass(frozen=True)
class UserProfile:
    """Read view of a user's profile document."""

    onboarding_completed: bool
    onboarding_data: dict[str, object] | None
    target_macros: MacroTargets | None
    streak: int
    last_meal_log_date: str | None
    created_at: datetime | None
    updated_at: datetime | None
    last_login_at: datetime | None
