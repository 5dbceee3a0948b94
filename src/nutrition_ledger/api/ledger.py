"""Daily ledger endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from nutrition_ledger.api.auth import require_api_token
from nutrition_ledger.api.schemas import EditEntryIn, MacroDeltaIn, targets_payload
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.macros import DailyMacroRecord, MacroAmounts
from nutrition_ledger.services.progress import DailyProgress

router = APIRouter(
    prefix="/users/{user_id}",
    tags=["ledger"],
    dependencies=[Depends(require_api_token)],
)


@router.get("/daily-logs")
async def list_daily_logs(
    user_id: str, start: str, end: str, request: Request
) -> dict[str, object]:
    """Return stored daily records in a date range, oldest first."""
    container: AppContainer = request.app.state.container
    records = await container.ledger.get_records_range(user_id, start, end)
    return {"records": [record_payload(record) for record in records]}


@router.get("/daily-logs/{day}")
async def get_daily_log(user_id: str, day: str, request: Request) -> dict[str, object]:
    """Return a day's totals; days without a record report zeros."""
    container: AppContainer = request.app.state.container
    record = await container.ledger.get_record(user_id, day)
    if record is None:
        return {"date": day, "exists": False, **MacroAmounts.zero().to_document()}
    return {"exists": True, **record_payload(record)}


@router.post("/daily-logs/{day}/add")
async def add_to_daily_log(
    user_id: str, day: str, delta: MacroDeltaIn, request: Request
) -> dict[str, object]:
    """Add a logged food's macros to the day."""
    container: AppContainer = request.app.state.container
    record = await container.ledger.add_to_record(user_id, delta.to_domain(), day)
    return record_payload(record)


@router.post("/daily-logs/{day}/subtract")
async def subtract_from_daily_log(
    user_id: str, day: str, delta: MacroDeltaIn, request: Request
) -> dict[str, object]:
    """Remove a food's macros from the day."""
    container: AppContainer = request.app.state.container
    record = await container.ledger.subtract_from_record(
        user_id, delta.to_domain(), day
    )
    return record_payload(record)


@router.post("/daily-logs/{day}/edit")
async def edit_daily_log_entry(
    user_id: str, day: str, body: EditEntryIn, request: Request
) -> dict[str, object]:
    """Swap a logged food's old macros for new ones."""
    container: AppContainer = request.app.state.container
    record = await container.ledger.edit_entry(
        user_id, body.old.to_domain(), body.new.to_domain(), day
    )
    return record_payload(record)


@router.get("/progress/{day}")
async def daily_progress(user_id: str, day: str, request: Request) -> dict[str, object]:
    """Return the day's consumption against the user's targets."""
    container: AppContainer = request.app.state.container
    progress = await container.progress_service.get_daily_progress(user_id, day)
    return _progress_payload(progress)


@router.get("/summary")
async def period_summary(
    user_id: str, start: str, end: str, request: Request
) -> dict[str, object]:
    """Return zero-filled daily totals and averages for a range."""
    container: AppContainer = request.app.state.container
    summary = await container.progress_service.get_period_summary(
        user_id, start, end
    )
    return asdict(summary)


def record_payload(record: DailyMacroRecord) -> dict[str, object]:
    return {
        "date": record.date,
        "calories": record.calories,
        "protein": record.protein,
        "carbs": record.carbs,
        "fats": record.fats,
        "createdAt": record.created_at,
        "updatedAt": record.updated_at,
    }


def _progress_payload(progress: DailyProgress) -> dict[str, object]:
    return {
        "date": progress.day,
        "consumed": progress.consumed.to_document(),
        "targets": targets_payload(progress.targets),
        "remaining": progress.remaining.to_document() if progress.remaining else None,
        "caloriePercent": progress.calorie_percent,
        "streak": progress.streak,
    }
