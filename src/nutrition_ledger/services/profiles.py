"""User profile and onboarding service."""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from nutrition_ledger.domain.errors import InvalidInput, StoreUnavailable
from nutrition_ledger.domain.macros import MacroTargets, parse_timestamp
from nutrition_ledger.domain.profiles import OnboardingData, UserProfile
from nutrition_ledger.services.store import (
    PROFILE_COLLECTION,
    PROFILE_KEY,
    DocumentKey,
    DocumentStore,
)
from nutrition_ledger.services.targets import (
    calculate_macro_targets,
    calculate_manual_macros,
)

_logger = logging.getLogger(__name__)

MACROS_SETUP_MODES = ("auto", "manual")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ProfileService:
    """Service for the per-user profile document."""

    store: DocumentStore
    clock: Callable[[], datetime] = _utc_now
    mirror_legacy_target_macros: bool = True

    async def initialize_user(self, user_id: str) -> bool:
        """Create the profile document for a new user.

        Returns False when the profile already exists.
        """
        key = self._key(user_id)
        if await self.store.get(key) is not None:
            return False
        now = self.clock().isoformat()
        await self.store.set(
            key,
            {
                "onboardingCompleted": False,
                "streak": 0,
                "createdAt": now,
                "updatedAt": now,
                "lastLoginAt": now,
            },
            merge=False,
        )
        _logger.info("Profile initialized: user=%s", user_id)
        return True

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Return the user's profile, if present."""
        doc = await self.store.get(self._key(user_id))
        if doc is None:
            return None
        return _parse_profile(doc)

    async def has_completed_onboarding(self, user_id: str) -> bool:
        profile = await self.get_profile(user_id)
        return bool(profile and profile.onboarding_completed)

    async def save_onboarding(
        self, user_id: str, data: OnboardingData
    ) -> MacroTargets | None:
        """Persist onboarding answers and the targets derived from them."""
        targets = _targets_for(data)
        key = self._key(user_id)
        existing = await self.store.get(key)
        now = self.clock().isoformat()
        update: dict[str, object] = {
            "onboardingCompleted": True,
            "onboardingData": _onboarding_document(data),
            "updatedAt": now,
            "createdAt": (existing or {}).get("createdAt") or now,
        }
        if targets is not None:
            update["userSettings"] = {"macros": targets.to_document()}
            if self.mirror_legacy_target_macros:
                update["targetMacros"] = targets.to_document()
        await self.store.set(key, update, merge=True)
        _logger.info("Onboarding saved: user=%s targets=%s", user_id, targets)
        return targets

    async def get_target_macros(self, user_id: str) -> MacroTargets | None:
        """Return the user's targets from userSettings.macros or targetMacros."""
        profile = await self.get_profile(user_id)
        return profile.target_macros if profile else None

    async def reset_onboarding(self, user_id: str) -> None:
        """Clear onboarding answers and targets so onboarding runs again."""
        await self.store.set(
            self._key(user_id),
            {
                "onboardingCompleted": False,
                "onboardingData": None,
                "targetMacros": None,
                "userSettings": {"macros": None},
                "updatedAt": self.clock().isoformat(),
            },
            merge=True,
        )
        _logger.info("Onboarding reset: user=%s", user_id)

    async def touch_last_login(self, user_id: str) -> None:
        """Record a login; failures are logged and ignored."""
        try:
            await self.store.set(
                self._key(user_id),
                {"lastLoginAt": self.clock().isoformat()},
                merge=True,
            )
        except StoreUnavailable:
            _logger.warning("Failed to update last login: user=%s", user_id)

    @staticmethod
    def _key(user_id: str) -> DocumentKey:
        return DocumentKey(user_id, PROFILE_COLLECTION, PROFILE_KEY)


def _targets_for(data: OnboardingData) -> MacroTargets | None:
    if data.macros_setup not in MACROS_SETUP_MODES:
        allowed = ", ".join(MACROS_SETUP_MODES)
        raise InvalidInput("macros_setup", f"must be one of {allowed}")
    if not data.name.strip():
        raise InvalidInput("name", "must not be empty")
    if data.macros_setup == "auto":
        return calculate_macro_targets(data.biometrics)
    if data.custom_macros is not None:
        return calculate_manual_macros(data.custom_macros)
    return None


def _onboarding_document(data: OnboardingData) -> dict[str, object]:
    biometrics = data.biometrics
    doc: dict[str, object] = {
        "name": data.name.strip(),
        "age": biometrics.age,
        "sex": biometrics.sex,
        "height": biometrics.height,
        "heightUnit": biometrics.height_unit,
        "weight": biometrics.weight,
        "weightUnit": biometrics.weight_unit,
        "activityLevel": biometrics.activity_level,
        "goal": biometrics.goal,
        "goalIntensity": biometrics.goal_intensity,
        "macrosSetup": data.macros_setup,
        "allergies": list(data.allergies),
    }
    if data.diet_preference:
        doc["dietPreference"] = data.diet_preference
    if data.purpose:
        doc["purpose"] = data.purpose
    if data.custom_macros is not None:
        doc["customMacros"] = asdict(data.custom_macros)
    return doc


def _parse_profile(doc: dict[str, object]) -> UserProfile:
    settings = doc.get("userSettings")
    macros = settings.get("macros") if isinstance(settings, dict) else None
    if not isinstance(macros, dict):
        legacy = doc.get("targetMacros")
        macros = legacy if isinstance(legacy, dict) else None
    raw_streak = doc.get("streak")
    onboarding_data = doc.get("onboardingData")
    last_log = doc.get("lastMealLogDate")
    return UserProfile(
        onboarding_completed=bool(doc.get("onboardingCompleted", False)),
        onboarding_data=onboarding_data if isinstance(onboarding_data, dict) else None,
        target_macros=MacroTargets.from_document(macros) if macros else None,
        streak=int(raw_streak) if isinstance(raw_streak, int | float) else 0,
        last_meal_log_date=last_log if isinstance(last_log, str) else None,
        created_at=parse_timestamp(doc.get("createdAt")),
        updated_at=parse_timestamp(doc.get("updatedAt")),
        last_login_at=parse_timestamp(doc.get("lastLoginAt")),
    )
