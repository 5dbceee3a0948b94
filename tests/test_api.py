"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from nutrition_ledger.api.app import create_app
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.services.store import DAILY_LOGS_COLLECTION
from tests.conftest import FlakyDocumentStore

HEADERS = {"X-Api-Token": "api-token"}
FOOD = {"calories": 500, "protein": 40, "carbs": 50, "fats": 20}
BIOMETRICS = {
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


def test_health_needs_no_token(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_requests_without_token_are_rejected(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/users/u1/daily-logs/2024-03-01")

    assert response.status_code == 401


def test_add_and_subtract_daily_log(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    added = client.post(
        "/users/u1/daily-logs/2024-03-01/add", json=FOOD, headers=HEADERS
    )
    subtracted = client.post(
        "/users/u1/daily-logs/2024-03-01/subtract",
        json={"calories": 200},
        headers=HEADERS,
    )
    fetched = client.get("/users/u1/daily-logs/2024-03-01", headers=HEADERS)

    assert added.status_code == 200
    assert added.json()["calories"] == 500
    assert subtracted.json()["calories"] == 300
    assert subtracted.json()["protein"] == 40
    assert fetched.json()["exists"] is True
    assert fetched.json()["calories"] == 300


def test_missing_daily_log_reports_zeros(
    container: AppContainer, store: FlakyDocumentStore
) -> None:
    client = TestClient(create_app(container))

    response = client.get("/users/u1/daily-logs/2024-03-01", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "date": "2024-03-01",
        "exists": False,
        "calories": 0.0,
        "protein": 0.0,
        "carbs": 0.0,
        "fats": 0.0,
    }
    daily_reads = [
        key for key in store.get_calls if key.collection == DAILY_LOGS_COLLECTION
    ]
    assert len(daily_reads) == 1


def test_edit_entry_endpoint(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    client.post("/users/u1/daily-logs/2024-03-01/add", json=FOOD, headers=HEADERS)

    response = client.post(
        "/users/u1/daily-logs/2024-03-01/edit",
        json={"old": FOOD, "new": {"calories": 100, "protein": 10}},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["calories"] == 100
    assert response.json()["carbs"] == 0


def test_invalid_date_returns_field_error(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/users/u1/daily-logs/yesterday/add", json=FOOD, headers=HEADERS
    )

    assert response.status_code == 422
    assert response.json()["field"] == "date"


def test_store_failure_returns_503(
    container: AppContainer, store: FlakyDocumentStore
) -> None:
    store.fail_get.add(DAILY_LOGS_COLLECTION)
    client = TestClient(create_app(container))

    response = client.post(
        "/users/u1/daily-logs/2024-03-01/add", json=FOOD, headers=HEADERS
    )

    assert response.status_code == 503


def test_range_and_summary_endpoints(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    for day in ("2024-03-03", "2024-03-01"):
        client.post(f"/users/u1/daily-logs/{day}/add", json=FOOD, headers=HEADERS)

    records = client.get(
        "/users/u1/daily-logs",
        params={"start": "2024-03-01", "end": "2024-03-03"},
        headers=HEADERS,
    )
    summary = client.get(
        "/users/u1/summary",
        params={"start": "2024-03-01", "end": "2024-03-03"},
        headers=HEADERS,
    )

    assert [r["date"] for r in records.json()["records"]] == [
        "2024-03-01",
        "2024-03-03",
    ]
    assert len(summary.json()["daily"]) == 3
    assert summary.json()["avg_calories"] == 1000 / 3


def test_auto_targets_preview(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/targets/auto", json=BIOMETRICS, headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "calories": 2259,
        "protein": 160,
        "carbs": 263,
        "fats": 63,
        "baseTDEE": 2759,
    }


def test_auto_targets_reject_unknown_activity(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets/auto",
        json={**BIOMETRICS, "activity_level": "athlete"},
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert response.json()["field"] == "activity_level"


def test_manual_targets_preview(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/targets/manual",
        json={"protein": 150, "carbs": 200, "fats": 70},
        headers=HEADERS,
    )

    assert response.json()["calories"] == 2030


def test_onboarding_profile_and_progress_flow(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    init = client.post("/users/u1/init", headers=HEADERS)
    saved = client.post(
        "/users/u1/onboarding",
        json={"name": "Sam", "biometrics": BIOMETRICS},
        headers=HEADERS,
    )
    client.post("/users/u1/daily-logs/2024-03-01/add", json=FOOD, headers=HEADERS)
    client.post("/users/u1/login", headers=HEADERS)
    profile = client.get("/users/u1/profile", headers=HEADERS)
    status = client.get("/users/u1/onboarding", headers=HEADERS)
    progress = client.get("/users/u1/progress/2024-03-01", headers=HEADERS)

    assert init.json() == {"created": True}
    assert saved.json()["targets"]["calories"] == 2259
    assert profile.json()["streak"] == 1
    assert profile.json()["lastMealLogDate"] == "2024-03-01"
    assert status.json() == {"completed": True}
    assert progress.json()["remaining"]["calories"] == 1759


def test_reset_onboarding_endpoint(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    client.post(
        "/users/u1/onboarding",
        json={"name": "Sam", "biometrics": BIOMETRICS},
        headers=HEADERS,
    )

    client.delete("/users/u1/onboarding", headers=HEADERS)
    profile = client.get("/users/u1/profile", headers=HEADERS)

    assert profile.json()["onboardingCompleted"] is False
    assert profile.json()["targets"] is None


def test_missing_profile_returns_404(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/users/nobody/profile", headers=HEADERS)

    assert response.status_code == 404


def test_food_log_endpoints(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    breakfast = client.post(
        "/users/u1/food-logs",
        json={"meal": "breakfast", "food_name": "Oats", "date": "2024-03-01", **FOOD},
        headers=HEADERS,
    )
    lunch = client.post(
        "/users/u1/food-logs",
        json={"meal": "lunch", "food_name": "Soup", "date": "2024-03-01", **FOOD},
        headers=HEADERS,
    )
    lunch_id = lunch.json()["id"]

    patched = client.patch(
        f"/users/u1/food-logs/{lunch_id}",
        json={"calories": 200, "protein": 10},
        headers=HEADERS,
    )
    deleted = client.delete(f"/users/u1/food-logs/{lunch_id}", headers=HEADERS)
    listed = client.get(
        "/users/u1/food-logs", params={"date": "2024-03-01"}, headers=HEADERS
    )

    assert breakfast.status_code == 200
    assert breakfast.json()["meal"] == "breakfast"
    assert patched.json()["calories"] == 200
    assert deleted.json()["calories"] == 500
    assert [entry["id"] for entry in listed.json()["entries"]] == [
        breakfast.json()["id"]
    ]


def test_food_log_rejects_unknown_meal(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/users/u1/food-logs",
        json={"meal": "brunch", "food_name": "Eggs", **FOOD},
        headers=HEADERS,
    )

    assert response.status_code == 422
    assert response.json()["field"] == "meal"


def test_missing_food_log_entry_returns_404(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.delete("/users/u1/food-logs/nope", headers=HEADERS)

    assert response.status_code == 404
