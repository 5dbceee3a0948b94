"""Food log endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from nutrition_ledger.api.auth import require_api_token
from nutrition_ledger.api.ledger import record_payload
from nutrition_ledger.api.schemas import FoodLogEntryIn, FoodLogUpdateIn
from nutrition_ledger.containers import AppContainer

router = APIRouter(
    prefix="/users/{user_id}/food-logs",
    tags=["food-log"],
    dependencies=[Depends(require_api_token)],
)


@router.post("")
async def create_food_log_entry(
    user_id: str, body: FoodLogEntryIn, request: Request
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    entry = await container.food_log_service.create_entry(
        user_id,
        meal=body.meal,
        food_name=body.food_name,
        macros=body.to_domain(),
        day=body.date,
        food_id=body.food_id,
        portion=body.portion,
    )
    return entry.to_document()


@router.get("")
async def list_food_log_entries(
    user_id: str, request: Request, date: str | None = None
) -> dict[str, object]:
    """Return a day's entries, newest first."""
    container: AppContainer = request.app.state.container
    entries = await container.food_log_service.list_entries(user_id, date)
    return {"entries": [entry.to_document() for entry in entries]}


@router.patch("/{entry_id}")
async def update_food_log_entry(
    user_id: str, entry_id: str, body: FoodLogUpdateIn, request: Request
) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    entry = await container.food_log_service.update_entry(
        user_id,
        entry_id,
        macros=body.to_domain(),
        meal=body.meal,
        food_name=body.food_name,
        portion=body.portion,
    )
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return entry.to_document()


@router.delete("/{entry_id}")
async def delete_food_log_entry(
    user_id: str, entry_id: str, request: Request
) -> dict[str, object]:
    """Delete an entry and return the day's totals afterwards."""
    container: AppContainer = request.app.state.container
    record = await container.food_log_service.delete_entry(user_id, entry_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return record_payload(record)
