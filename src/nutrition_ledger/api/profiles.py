"""Profile, onboarding and target calculation endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrition_ledger.api.auth import require_api_token
from nutrition_ledger.api.schemas import (
    BiometricsIn,
    ManualMacrosIn,
    OnboardingIn,
    targets_payload,
)
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.services.targets import (
    calculate_macro_targets,
    calculate_manual_macros,
)

router = APIRouter(tags=["profiles"], dependencies=[Depends(require_api_token)])


@router.post("/targets/auto")
async def preview_auto_targets(body: BiometricsIn) -> dict[str, object]:
    """Calculate targets from biometrics without saving them."""
    return calculate_macro_targets(body.to_domain()).to_document()


@router.post("/targets/manual")
async def preview_manual_targets(body: ManualMacrosIn) -> dict[str, object]:
    """Derive calories from user-chosen macros without saving them."""
    return calculate_manual_macros(body.to_domain()).to_document()


@router.post("/users/{user_id}/init")
async def initialize_user(user_id: str, request: Request) -> dict[str, object]:
    """Create the user's profile if it does not exist yet."""
    container: AppContainer = request.app.state.container
    created = await container.profile_service.initialize_user(user_id)
    return {"created": created}


@router.post("/users/{user_id}/onboarding")
async def save_onboarding(
    user_id: str, body: OnboardingIn, request: Request
) -> dict[str, object]:
    """Save onboarding answers and the targets derived from them."""
    container: AppContainer = request.app.state.container
    targets = await container.profile_service.save_onboarding(
        user_id, body.to_domain()
    )
    return {"onboardingCompleted": True, "targets": targets_payload(targets)}


@router.delete("/users/{user_id}/onboarding")
async def reset_onboarding(user_id: str, request: Request) -> dict[str, str]:
    """Clear onboarding so it runs again."""
    container: AppContainer = request.app.state.container
    await container.profile_service.reset_onboarding(user_id)
    return {"status": "ok"}


@router.get("/users/{user_id}/profile")
async def get_profile(user_id: str, request: Request) -> dict[str, object]:
    """Return the user's profile."""
    container: AppContainer = request.app.state.container
    profile = await container.profile_service.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {
        "onboardingCompleted": profile.onboarding_completed,
        "onboardingData": profile.onboarding_data,
        "targets": targets_payload(profile.target_macros),
        "streak": profile.streak,
        "lastMealLogDate": profile.last_meal_log_date,
        "createdAt": profile.created_at,
        "updatedAt": profile.updated_at,
        "lastLoginAt": profile.last_login_at,
    }


@router.get("/users/{user_id}/onboarding")
async def onboarding_status(user_id: str, request: Request) -> dict[str, bool]:
    """Return whether the user has finished onboarding."""
    container: AppContainer = request.app.state.container
    completed = await container.profile_service.has_completed_onboarding(user_id)
    return {"completed": completed}


@router.post("/users/{user_id}/login")
async def record_login(user_id: str, request: Request) -> dict[str, str]:
    """Record the user's latest login."""
    container: AppContainer = request.app.state.container
    await container.profile_service.touch_last_login(user_id)
    return {"status": "ok"}
