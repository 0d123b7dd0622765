"""Recipe matching against detected ingredients and the calorie goal."""

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from pantry_lens.domain.errors import DetectionEmpty, NoCandidates, UpstreamUnavailable
from pantry_lens.domain.ingredients import DetectedIngredient
from pantry_lens.domain.nutrition import NutritionFacts
from pantry_lens.domain.profile import DietHint, Goal
from pantry_lens.domain.recipes import (
    EnrichmentOutcome,
    PartialEnrichmentFailure,
    RecipeCandidate,
    RecipeDetails,
    RecipeIngredient,
    RecipeStep,
    RecipeSummary,
    SpoonacularComplexSearch,
    SpoonacularNutritionWidget,
    SpoonacularRecipeInformation,
    SpoonacularSearchHit,
)
from pantry_lens.services.cache import Cache
from pantry_lens.services.upstream import call_with_retry

SEARCH_PROVIDER = "recipe-search"
MAX_CANDIDATES = 10
ENRICHMENT_LIMIT = 5
MEALS_PER_DAY = 3
CALORIE_TOLERANCE = 300
# Spoonacular ranking mode 2: maximize used ingredients.
RANKING_MAXIMIZE_USED = 2

_HTML_TAG = re.compile(r"<[^>]*>")

_logger = logging.getLogger(__name__)


class RecipeClient(Protocol):
    """Interface for recipe search and nutrition lookups."""

    async def find_by_ingredients(
        self,
        ingredients: list[str],
        *,
        number: int,
        ranking: int,
        diet: str | None = None,
    ) -> list[dict[str, object]]:
        """Return raw candidates ranked by the provider."""

    async def get_nutrition_widget(self, recipe_id: int) -> dict[str, object]:
        """Return raw per-serving nutrition for a recipe."""

    async def get_information(self, recipe_id: int) -> dict[str, object]:
        """Return the raw full recipe including nutrition."""

    async def complex_search(
        self, query: str, *, number: int, max_calories: int | None = None
    ) -> dict[str, object]:
        """Return raw keyword search results."""

    async def random_recipes(self, number: int = 1) -> dict[str, object]:
        """Return raw random recipes."""


@dataclass
class RecipeMatcher:
    """Finds recipes for detected ingredients and ranks them for a calorie goal.

    The candidate search is the only call whose failure aborts a match. The
    per-candidate nutrition lookups run concurrently and each failure is
    absorbed into that candidate's slot, so one bad response never costs the
    other candidates.
    """

    client: RecipeClient
    cache: Cache
    max_candidates: int = MAX_CANDIDATES
    enrichment_limit: int = ENRICHMENT_LIMIT
    enrichment_concurrency: int = ENRICHMENT_LIMIT
    enrichment_timeout_seconds: float = 15.0
    calorie_tolerance: int = CALORIE_TOLERANCE
    meals_per_day: int = MEALS_PER_DAY
    nutrition_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def match(
        self,
        ingredients: Sequence[DetectedIngredient],
        daily_calorie_target: int,
        diet_hint: DietHint | None = None,
    ) -> list[RecipeCandidate]:
        """Return enriched candidates inside the per-meal calorie window.

        Falls back to every enriched candidate when none fits the window.
        """
        if not ingredients:
            raise DetectionEmpty()
        hits = await self._search([item.name for item in ingredients], diet_hint)
        if not hits:
            raise NoCandidates()

        selected = hits[: self.enrichment_limit]
        outcomes = await self.enrich(selected)
        candidates = [
            _build_candidate(hit, outcome)
            for hit, outcome in zip(selected, outcomes, strict=True)
        ]
        in_window = filter_by_calorie_window(
            candidates,
            daily_calorie_target,
            meals_per_day=self.meals_per_day,
            tolerance=self.calorie_tolerance,
        )
        _logger.info(
            "Recipe match: ingredients=%s candidates=%s enriched=%s in_window=%s",
            len(ingredients),
            len(hits),
            len(candidates),
            len(in_window),
        )
        return in_window or candidates

    async def enrich(
        self, hits: Sequence[SpoonacularSearchHit]
    ) -> list[EnrichmentOutcome]:
        """Look up nutrition for each hit concurrently, one slot per hit."""
        slots: list[EnrichmentOutcome | None] = [None] * len(hits)
        semaphore = asyncio.Semaphore(self.enrichment_concurrency)

        async def fill(index: int, recipe_id: int) -> None:
            async with semaphore:
                slots[index] = await self._enrich_one(recipe_id)

        await asyncio.gather(
            *(fill(index, hit.id) for index, hit in enumerate(hits))
        )
        return [
            slot
            if slot is not None
            else EnrichmentOutcome(
                recipe_id=hit.id,
                failure=PartialEnrichmentFailure(hit.id, "no result"),
            )
            for slot, hit in zip(slots, hits, strict=True)
        ]

    async def _search(
        self, names: list[str], diet_hint: DietHint | None
    ) -> list[SpoonacularSearchHit]:
        try:
            raw = await call_with_retry(
                lambda: self.client.find_by_ingredients(
                    names,
                    number=self.max_candidates,
                    ranking=RANKING_MAXIMIZE_USED,
                    diet=diet_hint.value if diet_hint else None,
                ),
                action="find_by_ingredients",
                retry_attempts=self.retry_attempts,
                retry_delay_seconds=self.retry_delay_seconds,
            )
        except Exception as exc:
            raise UpstreamUnavailable(SEARCH_PROVIDER, str(exc)) from exc
        if not isinstance(raw, list):
            raise UpstreamUnavailable(SEARCH_PROVIDER, "malformed response")
        hits: list[SpoonacularSearchHit] = []
        for entry in raw[: self.max_candidates]:
            try:
                hits.append(SpoonacularSearchHit.model_validate(entry))
            except ValidationError as exc:
                _logger.warning("Skipping malformed recipe candidate: %s", exc)
        return hits

    async def _enrich_one(self, recipe_id: int) -> EnrichmentOutcome:
        cache_key = f"recipe:nutrition:{recipe_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionFacts):
            return EnrichmentOutcome(recipe_id=recipe_id, nutrition=cached)
        try:
            raw = await asyncio.wait_for(
                self.client.get_nutrition_widget(recipe_id),
                timeout=self.enrichment_timeout_seconds,
            )
            facts = SpoonacularNutritionWidget.model_validate(raw).to_facts()
        except Exception as exc:
            failure = PartialEnrichmentFailure(
                recipe_id=recipe_id, reason=f"{type(exc).__name__}: {exc}"
            )
            _logger.warning(
                "Nutrition enrichment failed for recipe %s: %s",
                recipe_id,
                failure.reason,
            )
            return EnrichmentOutcome(recipe_id=recipe_id, failure=failure)
        self.cache.set(cache_key, facts, ttl_seconds=self.nutrition_ttl_seconds)
        return EnrichmentOutcome(recipe_id=recipe_id, nutrition=facts)


@dataclass
class RecipeCatalogService:
    """Recipe details and goal-based keyword recommendations."""

    client: RecipeClient
    cache: Cache
    details_ttl_seconds: int = 86400
    max_results: int = MAX_CANDIDATES
    calorie_tolerance: int = CALORIE_TOLERANCE
    meals_per_day: int = MEALS_PER_DAY

    async def get_recipe_details(self, recipe_id: int) -> RecipeDetails:
        """Return the full recipe with ingredients, steps and nutrition."""
        cache_key = f"recipe:details:{recipe_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, RecipeDetails):
            return cached
        try:
            raw = await self.client.get_information(recipe_id)
            info = SpoonacularRecipeInformation.model_validate(raw)
        except Exception as exc:
            raise UpstreamUnavailable(SEARCH_PROVIDER, str(exc)) from exc
        steps = info.analyzedInstructions[0].steps if info.analyzedInstructions else []
        details = RecipeDetails(
            id=info.id,
            title=info.title,
            image_ref=info.image,
            ready_in_minutes=info.readyInMinutes,
            servings=info.servings,
            summary=strip_html(info.summary or ""),
            ingredients=[
                RecipeIngredient(
                    name=item.name,
                    amount=item.amount,
                    unit=item.unit,
                    original=item.original,
                )
                for item in info.extendedIngredients
            ],
            instructions=[RecipeStep(number=step.number, step=step.step) for step in steps],
            nutrition=info.nutrition_facts(),
        )
        self.cache.set(cache_key, details, ttl_seconds=self.details_ttl_seconds)
        return details

    async def recommend(
        self, goal_offset_kcal: int, daily_calorie_target: int
    ) -> list[RecipeSummary]:
        """Return keyword recommendations capped at the per-meal calorie ceiling."""
        per_meal = round(daily_calorie_target / self.meals_per_day)
        try:
            raw = await self.client.complex_search(
                recommendation_query(goal_offset_kcal),
                number=self.max_results,
                max_calories=per_meal + self.calorie_tolerance,
            )
            results = SpoonacularComplexSearch.model_validate(raw).results
        except Exception as exc:
            raise UpstreamUnavailable(SEARCH_PROVIDER, str(exc)) from exc
        return [
            RecipeSummary(
                id=item.id,
                title=item.title,
                image_ref=item.image,
                ready_in_minutes=item.readyInMinutes,
                servings=item.servings,
                nutrition=item.nutrition_facts(),
            )
            for item in results[: self.max_results]
        ]


def match_percent(used: int, missed: int) -> int:
    """Share of the recipe's ingredients covered by the detected set."""
    used = max(used, 0)
    missed = max(missed, 0)
    total = used + missed
    if total == 0:
        return 0
    return min(max(round(100 * used / total), 0), 100)


def filter_by_calorie_window(
    candidates: Sequence[RecipeCandidate],
    daily_calorie_target: int,
    *,
    meals_per_day: int = MEALS_PER_DAY,
    tolerance: int = CALORIE_TOLERANCE,
) -> list[RecipeCandidate]:
    """Keep candidates within tolerance of the per-meal target, bounds inclusive."""
    per_meal = daily_calorie_target / meals_per_day
    lower = per_meal - tolerance
    upper = per_meal + tolerance
    return [
        candidate
        for candidate in candidates
        if lower <= candidate.nutrition.calories <= upper
    ]


def recommendation_query(goal_offset_kcal: int) -> str:
    """Keyword query for the goal behind a calorie offset."""
    if goal_offset_kcal == Goal.LOSE:
        return "healthy low calorie"
    if goal_offset_kcal == Goal.GAIN:
        return "high protein muscle building"
    return "balanced healthy meal"


def strip_html(text: str) -> str:
    """Remove markup tags from provider summaries."""
    return _HTML_TAG.sub("", text)


def _build_candidate(
    hit: SpoonacularSearchHit, outcome: EnrichmentOutcome
) -> RecipeCandidate:
    if outcome.succeeded and outcome.nutrition is not None:
        nutrition = outcome.nutrition
        percent = match_percent(hit.usedIngredientCount, hit.missedIngredientCount)
    else:
        nutrition = NutritionFacts.zero()
        percent = 0
    return RecipeCandidate(
        id=hit.id,
        title=hit.title,
        image_ref=hit.image,
        used_ingredient_count=hit.usedIngredientCount,
        missed_ingredient_count=hit.missedIngredientCount,
        nutrition=nutrition,
        match_percent=percent,
        used_ingredients=[item.name for item in hit.usedIngredients],
        missed_ingredients=[item.name for item in hit.missedIngredients],
    )
