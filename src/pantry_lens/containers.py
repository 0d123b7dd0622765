"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pantry_lens.adapters.google_vision_client import HttpxGoogleVisionClient
from pantry_lens.adapters.nutritionix_client import HttpxNutritionixClient
from pantry_lens.adapters.openai_vision_client import OpenAIVisionClient
from pantry_lens.adapters.spoonacular_client import HttpxSpoonacularClient
from pantry_lens.adapters.supabase_kv_store import SupabaseKeyValueStore
from pantry_lens.config import Settings, require
from pantry_lens.services.analysis import AnalysisOrchestrator
from pantry_lens.services.cache import InMemoryCache
from pantry_lens.services.goals import GoalCalculator
from pantry_lens.services.ingredients import IngredientNormalizer
from pantry_lens.services.ledger import NutritionLedger
from pantry_lens.services.meals import MealResolver
from pantry_lens.services.profiles import ProfileService
from pantry_lens.services.recipes import RecipeCatalogService, RecipeMatcher
from pantry_lens.services.status import UpstreamStatusService
from pantry_lens.services.storage import InMemoryKeyValueStore, KeyValueStore
from pantry_lens.services.vision import (
    GoogleVisionDetector,
    LabelDetector,
    OpenAIVisionDetector,
)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    profile_service: ProfileService
    ledger: NutritionLedger
    recipe_catalog: RecipeCatalogService
    meal_resolver: MealResolver
    orchestrator: AnalysisOrchestrator
    status_service: UpstreamStatusService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = _build_store(resolved_settings)
    cache = InMemoryCache()
    timeout = resolved_settings.http_timeout_seconds

    recipe_client = HttpxSpoonacularClient.create(
        api_key=resolved_settings.spoonacular_api_key,
        base_url=resolved_settings.spoonacular_base_url,
        timeout_seconds=timeout,
    )
    nutrition_client = HttpxNutritionixClient.create(
        app_id=resolved_settings.nutritionix_app_id,
        api_key=resolved_settings.nutritionix_api_key,
        base_url=resolved_settings.nutritionix_base_url,
        timeout_seconds=timeout,
    )
    detector, close_detector = _build_detector(resolved_settings)

    profile_service = ProfileService(store=store, calculator=GoalCalculator())
    ledger = NutritionLedger(store=store, timezone_name=resolved_settings.timezone)
    matcher = RecipeMatcher(
        client=recipe_client,
        cache=cache,
        enrichment_concurrency=resolved_settings.enrichment_concurrency,
        enrichment_timeout_seconds=timeout,
        retry_attempts=resolved_settings.retry_attempts,
        retry_delay_seconds=resolved_settings.retry_delay_seconds,
    )
    meal_resolver = MealResolver(
        client=nutrition_client,
        scales_by_quantity=resolved_settings.nutrition_lookup_scales_servings,
        retry_attempts=resolved_settings.retry_attempts,
        retry_delay_seconds=resolved_settings.retry_delay_seconds,
    )
    orchestrator = AnalysisOrchestrator(
        detector=detector,
        normalizer=IngredientNormalizer(),
        matcher=matcher,
        resolver=meal_resolver,
        ledger=ledger,
        profiles=profile_service,
        match_timeout_seconds=resolved_settings.match_timeout_seconds,
    )

    async def close_resources() -> None:
        await recipe_client.close()
        await nutrition_client.close()
        await close_detector()

    return AppContainer(
        settings=resolved_settings,
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


def _build_store(settings: Settings) -> KeyValueStore:
    if settings.storage_backend == "supabase":
        client = create_client(
            require(settings.supabase_url, "supabase_url"),
            require(settings.supabase_service_key, "supabase_service_key"),
        )
        return SupabaseKeyValueStore(client, table_name=settings.supabase_kv_table)
    return InMemoryKeyValueStore()


def _build_detector(
    settings: Settings,
) -> tuple[LabelDetector, Callable[[], Awaitable[None]]]:
    if settings.detector_provider == "openai":
        openai_client = OpenAIVisionClient.create(
            require(settings.openai_api_key, "openai_api_key")
        )
        detector: LabelDetector = OpenAIVisionDetector(
            client=openai_client,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        )
        return detector, openai_client.close
    vision_client = HttpxGoogleVisionClient.create(
        api_key=require(settings.google_vision_api_key, "google_vision_api_key"),
        url=settings.google_vision_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    return GoogleVisionDetector(client=vision_client), vision_client.close
