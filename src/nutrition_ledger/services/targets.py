"""Daily calorie and macro target calculation.

Targets come from the Mifflin-St Jeor equation:

    BMR = 10 * weight_kg + 6.25 * height_cm - 5 * age + s(sex)

scaled by an activity multiplier to obtain the maintenance level (TDEE), then
shifted by a fixed kcal/day amount for the user's goal and intensity. Macro
grams follow a fixed split: protein per kg of bodyweight, fat as a share of
calories, carbs from whatever remains.
"""

import math

from nutrition_ledger.domain.errors import InvalidInput
from nutrition_ledger.domain.macros import MacroTargets, ManualMacros
from nutrition_ledger.domain.profiles import BiometricProfile

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "lightly": 1.375,
    "moderate": 1.55,
    "very": 1.725,
}

# "other" uses the mean of the male and female constants.
SEX_OFFSETS: dict[str, float] = {
    "male": 5.0,
    "female": -161.0,
    "other": -78.0,
}

GOAL_CALORIE_ADJUSTMENTS: dict[str, dict[str, int]] = {
    "lose": {"mild": -250, "moderate": -500, "aggressive": -750},
    "maintain": {"mild": 0, "moderate": 0, "aggressive": 0},
    "build": {"mild": 200, "moderate": 350, "aggressive": 500},
}

# Lower bound on the target while losing weight.
MINIMUM_CALORIES: dict[str, int] = {
    "male": 1500,
    "female": 1200,
    "other": 1200,
}

MACRO_SPLIT: dict[str, float] = {
    "protein_g_per_kg": 2.0,
    "fat_calorie_share": 0.25,
}

CALORIES_PER_GRAM: dict[str, int] = {
    "protein": 4,
    "carbs": 4,
    "fats": 9,
}

AGE_RANGE = (13, 120)
HEIGHT_RANGES: dict[str, tuple[float, float]] = {
    "cm": (100.0, 250.0),
    "ft": (48.0, 95.0),
}
WEIGHT_RANGES: dict[str, tuple[float, float]] = {
    "kg": (20.0, 250.0),
    "lbs": (45.0, 550.0),
}

CM_PER_INCH = 2.54
KG_PER_LB = 0.453592


def calculate_macro_targets(profile: BiometricProfile) -> MacroTargets:
    """Compute daily targets from a biometric profile."""
    _validate_profile(profile)
    height_cm = _height_to_cm(profile.height, profile.height_unit)
    weight_kg = _weight_to_kg(profile.weight, profile.weight_unit)

    bmr = calculate_bmr(weight_kg, height_cm, profile.age, profile.sex)
    tdee = bmr * ACTIVITY_MULTIPLIERS[profile.activity_level]
    calories = _target_calories(
        tdee, profile.goal, profile.goal_intensity, profile.sex
    )
    protein, carbs, fats = _split_macros(calories, weight_kg)
    return MacroTargets(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        base_tdee=round_half_up(tdee),
    )


def calculate_manual_macros(macros: ManualMacros) -> MacroTargets:
    """Build targets from user-chosen macro grams; calories are derived."""
    for name in ("protein", "carbs", "fats"):
        value = getattr(macros, name)
        if not _is_number(value) or not math.isfinite(value) or value < 0:
            raise InvalidInput(name, "must be a non-negative number")
    return MacroTargets(
        calories=calories_from_macros(macros.protein, macros.carbs, macros.fats),
        protein=macros.protein,
        carbs=macros.carbs,
        fats=macros.fats,
    )


def calories_from_macros(protein: float, carbs: float, fats: float) -> int:
    """Return protein*4 + carbs*4 + fats*9 rounded to the nearest kcal."""
    return round_half_up(
        protein * CALORIES_PER_GRAM["protein"]
        + carbs * CALORIES_PER_GRAM["carbs"]
        + fats * CALORIES_PER_GRAM["fats"]
    )


def calculate_bmr(weight_kg: float, height_cm: float, age: int, sex: str) -> float:
    """Mifflin-St Jeor basal metabolic rate in kcal/day."""
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + SEX_OFFSETS[sex]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _target_calories(tdee: float, goal: str, intensity: str, sex: str) -> int:
    calories = round_half_up(tdee + GOAL_CALORIE_ADJUSTMENTS[goal][intensity])
    if goal == "lose":
        return max(MINIMUM_CALORIES[sex], calories)
    return calories


def _split_macros(calories: int, weight_kg: float) -> tuple[int, int, int]:
    protein = round_half_up(weight_kg * MACRO_SPLIT["protein_g_per_kg"])
    fat_calories = round_half_up(calories * MACRO_SPLIT["fat_calorie_share"])
    fats = round_half_up(fat_calories / CALORIES_PER_GRAM["fats"])
    carb_calories = (
        calories
        - protein * CALORIES_PER_GRAM["protein"]
        - fats * CALORIES_PER_GRAM["fats"]
    )
    carbs = max(0, round_half_up(carb_calories / CALORIES_PER_GRAM["carbs"]))
    return protein, carbs, fats


def _height_to_cm(height: float, unit: str) -> float:
    if unit == "cm":
        return float(height)
    return height * CM_PER_INCH


def _weight_to_kg(weight: float, unit: str) -> float:
    if unit == "kg":
        return float(weight)
    return weight * KG_PER_LB


def _validate_profile(profile: BiometricProfile) -> None:
    _require_choice("sex", profile.sex, SEX_OFFSETS)
    _require_choice("height_unit", profile.height_unit, HEIGHT_RANGES)
    _require_choice("weight_unit", profile.weight_unit, WEIGHT_RANGES)
    _require_choice("activity_level", profile.activity_level, ACTIVITY_MULTIPLIERS)
    _require_choice("goal", profile.goal, GOAL_CALORIE_ADJUSTMENTS)
    _require_choice(
        "goal_intensity", profile.goal_intensity, GOAL_CALORIE_ADJUSTMENTS["lose"]
    )
    if not isinstance(profile.age, int) or isinstance(profile.age, bool):
        raise InvalidInput("age", "must be a whole number of years")
    _require_range("age", profile.age, AGE_RANGE)
    _require_range("height", profile.height, HEIGHT_RANGES[profile.height_unit])
    _require_range("weight", profile.weight, WEIGHT_RANGES[profile.weight_unit])


def _require_choice(field: str, value: object, choices: dict[str, object]) -> None:
    if not isinstance(value, str) or value not in choices:
        allowed = ", ".join(choices)
        raise InvalidInput(field, f"must be one of {allowed}; got {value!r}")


def _require_range(field: str, value: object, bounds: tuple[float, float]) -> None:
    low, high = bounds
    if not _is_number(value) or not math.isfinite(value):
        raise InvalidInput(field, "must be a number")
    if not low <= value <= high:
        raise InvalidInput(field, f"must be between {low:g} and {high:g}")


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)
