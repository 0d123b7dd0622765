"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from pantry_lens.config import Settings
from pantry_lens.containers import AppContainer
from pantry_lens.domain.profile import ActivityLevel, Gender, Goal, ProfileInputs
from pantry_lens.services.analysis import AnalysisOrchestrator
from pantry_lens.services.cache import InMemoryCache
from pantry_lens.services.goals import GoalCalculator
from pantry_lens.services.ingredients import IngredientNormalizer
from pantry_lens.services.ledger import NutritionLedger
from pantry_lens.services.meals import MealResolver, NaturalNutritionClient
from pantry_lens.services.profiles import ProfileService
from pantry_lens.services.recipes import (
    RecipeCatalogService,
    RecipeClient,
    RecipeMatcher,
)
from pantry_lens.services.status import UpstreamStatusService
from pantry_lens.services.storage import InMemoryKeyValueStore
from pantry_lens.services.vision import (
    GoogleVisionClient,
    GoogleVisionDetector,
    VisionClient,
)


def sample_inputs(**overrides: object) -> ProfileInputs:
    """Male, 30y, 75 kg, 180 cm, moderate activity, losing weight (2269 kcal)."""
    values: dict[str, object] = {
        "gender": Gender.MALE,
        "age_years": 30,
        "weight_kg": 75,
        "height_cm": 180,
        "activity_multiplier": ActivityLevel.MODERATE.value,
        "goal_offset_kcal": Goal.LOSE.value,
    }
    values.update(overrides)
    return ProfileInputs(**values)  # type: ignore[arg-type]


def search_hit(
    recipe_id: int, used: int = 3, missed: int = 1, title: str | None = None
) -> dict[str, object]:
    """Raw `findByIngredients` entry."""
    return {
        "id": recipe_id,
        "title": title or f"Recipe {recipe_id}",
        "image": f"https://img.example/{recipe_id}.jpg",
        "usedIngredientCount": used,
        "missedIngredientCount": missed,
        "usedIngredients": [{"name": "tomato"}],
        "missedIngredients": [{"name": "garlic"}],
    }


def nutrition_widget(calories: object) -> dict[str, object]:
    """Raw `nutritionWidget.json` body."""
    return {"calories": calories, "protein": "30g", "carbs": "40g", "fat": "12g"}


@dataclass
class FakeRecipeClient(RecipeClient):
    """Fake recipe client with in-memory responses."""

    search_results: list[dict[str, object]] = field(
        default_factory=lambda: [search_hit(recipe_id) for recipe_id in range(1, 6)]
    )
    widgets: dict[int, dict[str, object]] = field(
        default_factory=lambda: {
            1: nutrition_widget(600),
            2: nutrition_widget("700"),
            3: nutrition_widget(1200),
            4: nutrition_widget("450 kcal"),
            5: nutrition_widget(800),
        }
    )
    failing_ids: set[int] = field(default_factory=set)
    slow_ids: set[int] = field(default_factory=set)
    search_error: Exception | None = None
    widget_delay_seconds: float = 0.0
    information_payload: dict[str, object] = field(
        default_factory=lambda: {
            "id": 42,
            "title": "Tomato Basil Chicken",
            "image": "https://img.example/42.jpg",
            "readyInMinutes": 25,
            "servings": 2,
            "summary": "A <b>quick</b> weeknight <a href='#'>dinner</a>.",
            "extendedIngredients": [
                {
                    "name": "chicken breast",
                    "amount": 2,
                    "unit": "pieces",
                    "original": "2 chicken breasts",
                }
            ],
            "analyzedInstructions": [
                {
                    "steps": [
                        {"number": 1, "step": "Sear the chicken."},
                        {"number": 2, "step": "Add tomatoes."},
                    ]
                }
            ],
            "nutrition": {
                "nutrients": [
                    {"name": "Calories", "amount": 512.4},
                    {"name": "Protein", "amount": 45},
                    {"name": "Carbohydrates", "amount": 20},
                    {"name": "Fat", "amount": 18},
                ]
            },
        }
    )
    complex_payload: dict[str, object] = field(
        default_factory=lambda: {
            "results": [
                {
                    "id": 7,
                    "title": "Zucchini Noodles",
                    "readyInMinutes": 15,
                    "servings": 1,
                    "nutrition": {"nutrients": [{"name": "Calories", "amount": 320}]},
                }
            ]
        }
    )
    random_payload: dict[str, object] = field(
        default_factory=lambda: {"recipes": [{"id": 1}]}
    )
    search_calls: list[dict[str, object]] = field(default_factory=list)
    widget_calls: list[int] = field(default_factory=list)
    information_calls: list[int] = field(default_factory=list)
    complex_calls: list[dict[str, object]] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    async def find_by_ingredients(
        self,
        ingredients: list[str],
        *,
        number: int,
        ranking: int,
        diet: str | None = None,
    ) -> list[dict[str, object]]:
        self.search_calls.append(
            {
                "ingredients": list(ingredients),
                "number": number,
                "ranking": ranking,
                "diet": diet,
            }
        )
        if self.search_error is not None:
            raise self.search_error
        return self.search_results

    async def get_nutrition_widget(self, recipe_id: int) -> dict[str, object]:
        self.widget_calls.append(recipe_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.widget_delay_seconds)
            if recipe_id in self.slow_ids:
                await asyncio.sleep(1)
            if recipe_id in self.failing_ids:
                raise RuntimeError(f"widget {recipe_id} failed")
            return self.widgets[recipe_id]
        finally:
            self.in_flight -= 1

    async def get_information(self, recipe_id: int) -> dict[str, object]:
        self.information_calls.append(recipe_id)
        return {**self.information_payload, "id": recipe_id}

    async def complex_search(
        self, query: str, *, number: int, max_calories: int | None = None
    ) -> dict[str, object]:
        self.complex_calls.append(
            {"query": query, "number": number, "max_calories": max_calories}
        )
        return self.complex_payload

    async def random_recipes(self, number: int = 1) -> dict[str, object]:
        return self.random_payload

    async def close(self) -> None:
        return None


@dataclass
class FakeNutritionClient(NaturalNutritionClient):
    """Fake natural-language nutrition client."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [
                {
                    "food_name": "chicken breast",
                    "serving_qty": 1,
                    "serving_unit": "breast",
                    "nf_calories": 165.4,
                    "nf_protein": 31.02,
                    "nf_total_carbohydrate": 0,
                    "nf_total_fat": 3.57,
                }
            ]
        }
    )
    suggestions: dict[str, object] = field(
        default_factory=lambda: {
            "common": [{"food_name": "apple"}, {"food_name": "apple pie"}],
            "branded": [{"food_name": "Apple Juice, Brand X"}],
        }
    )
    error: Exception | None = None
    queries: list[str] = field(default_factory=list)

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.payload

    async def search_instant(self, query: str) -> dict[str, object]:
        if self.error is not None:
            raise self.error
        return self.suggestions

    async def close(self) -> None:
        return None


@dataclass
class FakeGoogleVisionClient(GoogleVisionClient):
    """Fake Google Vision client returning a fixed annotate response."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "responses": [
                {
                    "labelAnnotations": [
                        {"description": "Food", "score": 0.99},
                        {"description": "tomato", "score": 0.95},
                        {"description": "Chicken", "score": 0.88},
                        {"description": "Basil", "score": 0.55},
                    ],
                    "localizedObjectAnnotations": [
                        {"name": "Tomato", "score": 0.9},
                        {"name": "Onion", "score": 0.7},
                    ],
                }
            ]
        }
    )
    error: Exception | None = None
    requests: list[dict[str, object]] = field(default_factory=list)

    async def annotate(self, payload: dict[str, object]) -> dict[str, object]:
        self.requests.append(payload)
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeVisionClient(VisionClient):
    """Fake LLM vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "labels": [
                {"name": "egg", "score": 0.92},
                {"name": "spinach", "score": 0.81},
            ]
        }
    )
    last_call: dict[str, object] | None = None

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.last_call = {
            "model": model,
            "reasoning_effort": reasoning_effort,
            "store": store,
            "image_data_url": image_data_url,
            "schema": schema,
        }
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        spoonacular_api_key="spoonacular-key",
        nutritionix_app_id="nutritionix-app",
        nutritionix_api_key="nutritionix-key",
        google_vision_api_key="vision-key",
        admin_token="admin-token",
        storage_backend="memory",
        detector_provider="google",
        retry_delay_seconds=0,
    )


@pytest.fixture
def recipe_client() -> FakeRecipeClient:
    return FakeRecipeClient()


@pytest.fixture
def nutrition_client() -> FakeNutritionClient:
    return FakeNutritionClient()


@pytest.fixture
def vision_client() -> FakeGoogleVisionClient:
    return FakeGoogleVisionClient()


@pytest.fixture
def container(
    settings: Settings,
    recipe_client: FakeRecipeClient,
    nutrition_client: FakeNutritionClient,
    vision_client: FakeGoogleVisionClient,
) -> AppContainer:
    store = InMemoryKeyValueStore()
    cache = InMemoryCache()
    detector = GoogleVisionDetector(client=vision_client)
    profile_service = ProfileService(store=store, calculator=GoalCalculator())
    ledger = NutritionLedger(store=store, timezone_name=settings.timezone)
    meal_resolver = MealResolver(client=nutrition_client, retry_delay_seconds=0)
    orchestrator = AnalysisOrchestrator(
        detector=detector,
        normalizer=IngredientNormalizer(),
        matcher=RecipeMatcher(
            client=recipe_client, cache=cache, retry_delay_seconds=0
        ),
        resolver=meal_resolver,
        ledger=ledger,
        profiles=profile_service,
        match_timeout_seconds=settings.match_timeout_seconds,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        profile_service=profile_service,
        ledger=ledger,
        recipe_catalog=RecipeCatalogService(client=recipe_client, cache=cache),
        meal_resolver=meal_resolver,
        orchestrator=orchestrator,
        status_service=UpstreamStatusService(
            detector=detector,
            recipe_client=recipe_client,
            nutrition_client=nutrition_client,
        ),
        close_resources=close_resources,
    )
