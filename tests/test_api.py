"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from pantry_lens.api.app import create_app
from pantry_lens.containers import AppContainer
from tests.conftest import FakeNutritionClient, FakeRecipeClient

PROFILE = {
    "gender": "male",
    "age_years": 30,
    "weight_kg": 75,
    "height_cm": 180,
    "activity_multiplier": 1.55,
    "goal_offset_kcal": -500,
}


def _client(container: AppContainer, with_profile: bool = True) -> TestClient:
    client = TestClient(create_app(container))
    if with_profile:
        assert client.put("/profile", json=PROFILE).status_code == 200
    return client


def test_health(container: AppContainer) -> None:
    client = _client(container, with_profile=False)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upstream_health(container: AppContainer) -> None:
    client = _client(container, with_profile=False)

    response = client.get("/health/upstreams")

    assert response.status_code == 200
    assert response.json() == {
        "detector": True,
        "recipe_search": True,
        "nutrition_lookup": True,
        "all_working": True,
    }


def test_profile_missing_is_conflict(container: AppContainer) -> None:
    client = _client(container, with_profile=False)

    response = client.get("/profile")

    assert response.status_code == 409
    assert response.json()["error"] == "profile_not_configured"


def test_put_and_patch_profile(container: AppContainer) -> None:
    client = _client(container, with_profile=False)

    created = client.put("/profile", json=PROFILE)
    patched = client.patch("/profile", json={"goal_offset_kcal": 300})

    assert created.json()["daily_calorie_target"] == 2269
    assert created.json()["diet_hint"] == "low-calorie"
    assert patched.status_code == 200
    assert patched.json()["daily_calorie_target"] == 3069
    assert patched.json()["diet_hint"] == "high-protein"
    assert client.get("/profile").json()["goal_offset_kcal"] == 300


def test_invalid_profile_is_unprocessable(container: AppContainer) -> None:
    client = _client(container, with_profile=False)

    response = client.put("/profile", json={**PROFILE, "activity_multiplier": 1.3})

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_profile"


def test_analysis_from_image_body(container: AppContainer) -> None:
    client = _client(container)

    response = client.post(
        "/analysis", content=b"\xff\xd8\xffimage", headers={"content-type": "image/jpeg"}
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["name"] for item in body["ingredients"]] == [
        "Tomato",
        "Chicken",
        "Onion",
    ]
    assert [recipe["id"] for recipe in body["recipes"]] == [1, 2, 5]
    assert body["recipes"][0]["nutrition"]["calories"] == 600
    assert body["message"] == "Found 3 ingredients and 3 recipes!"


def test_analysis_requires_body(container: AppContainer) -> None:
    client = _client(container)

    assert client.post("/analysis", content=b"").status_code == 400


def test_match_with_no_usable_ingredients(container: AppContainer) -> None:
    client = _client(container)

    response = client.post("/recipes/match", json={"ingredients": ["food"]})

    assert response.status_code == 422
    assert response.json()["error"] == "detection_empty"


def test_match_with_no_candidates(
    container: AppContainer, recipe_client: FakeRecipeClient
) -> None:
    client = _client(container)
    recipe_client.search_results = []

    response = client.post("/recipes/match", json={"ingredients": ["tomato"]})

    assert response.status_code == 404
    assert response.json()["error"] == "no_candidates"


def test_search_outage_is_bad_gateway(
    container: AppContainer, recipe_client: FakeRecipeClient
) -> None:
    client = _client(container)
    recipe_client.search_error = RuntimeError("connection reset")

    response = client.post("/recipes/match", json={"ingredients": ["tomato"]})

    assert response.status_code == 502
    assert response.json()["provider"] == "recipe-search"


def test_recommendations_and_details(container: AppContainer) -> None:
    client = _client(container)

    recommendations = client.get("/recipes/recommendations")
    details = client.get("/recipes/42")

    assert recommendations.status_code == 200
    assert recommendations.json()["recipes"][0]["id"] == 7
    assert details.status_code == 200
    assert details.json()["summary"] == "A quick weeknight dinner."
    assert details.json()["instructions"][0] == {"number": 1, "step": "Sear the chicken."}


def test_log_meal_and_read_today(container: AppContainer) -> None:
    client = _client(container)

    logged = client.post("/meals", json={"name": "chicken breast", "servings": "lots"})
    today = client.get("/ledger/today")

    assert logged.status_code == 200
    assert logged.json()["meal"]["servings"] == 1.0
    assert logged.json()["day_totals"]["calories"] == 165
    assert today.json()["totals"]["calories"] == 165
    assert today.json()["remaining_calories"] == 2104
    assert today.json()["meals"][0]["name"] == "chicken breast"


def test_log_meal_rejects_zero_servings(
    container: AppContainer, nutrition_client: FakeNutritionClient
) -> None:
    client = _client(container)

    response = client.post("/meals", json={"name": "chicken breast", "servings": 0})

    assert response.status_code == 422
    assert response.json()["error"] == "invalid_servings"
    assert nutrition_client.queries == []


def test_unknown_food_is_not_found(
    container: AppContainer, nutrition_client: FakeNutritionClient
) -> None:
    client = _client(container)
    nutrition_client.payload = {"foods": []}

    response = client.post("/meals", json={"name": "xyzzy"})

    assert response.status_code == 404
    assert response.json()["error"] == "food_not_found"


def test_ledger_for_unseen_day_and_week(container: AppContainer) -> None:
    client = _client(container)

    day = client.get("/ledger/2026-01-01")
    week = client.get("/ledger/week")

    assert day.status_code == 200
    assert day.json()["totals"]["calories"] == 0
    assert day.json()["meals"] == []
    assert week.status_code == 200
    assert len(week.json()["daily"]) == 7


def test_food_lookup_suggest_and_analyze(container: AppContainer) -> None:
    client = _client(container)

    lookup = client.get("/foods/lookup", params={"query": "chicken breast", "amount": 2})
    suggest = client.get("/foods/suggest", params={"query": "apple"})
    analyzed = client.post(
        "/meals/analyze", json={"description": "chicken breast with rice"}
    )

    assert lookup.json()["serving"] == "1 breast"
    assert suggest.json()["foods"][0] == "apple"
    assert analyzed.json()["totals"]["calories"] == 165
    assert container.ledger.meals_for(container.ledger.today()) == []


def test_clear_all_requires_admin_token(container: AppContainer) -> None:
    client = _client(container)
    client.post("/meals", json={"name": "chicken breast"})

    denied = client.delete("/data")
    wrong = client.delete("/data", headers={"X-Admin-Token": "nope"})
    cleared = client.delete("/data", headers={"X-Admin-Token": "admin-token"})

    assert denied.status_code == 401
    assert wrong.status_code == 401
    assert cleared.status_code == 200
    assert client.get("/ledger/today").json()["totals"]["calories"] == 0
    assert client.get("/profile").status_code == 409
