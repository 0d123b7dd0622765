"""Use-case coordination for scanning ingredients and logging meals."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from pantry_lens.domain.errors import UpstreamUnavailable
from pantry_lens.domain.ingredients import DetectedIngredient
from pantry_lens.domain.meals import MealRecord
from pantry_lens.domain.nutrition import NutritionFacts
from pantry_lens.domain.profile import Profile
from pantry_lens.domain.recipes import RecipeCandidate
from pantry_lens.domain.vision import RawLabel
from pantry_lens.services.ingredients import IngredientNormalizer
from pantry_lens.services.ledger import NutritionLedger, sum_nutrition
from pantry_lens.services.meals import MealResolver
from pantry_lens.services.profiles import ProfileService
from pantry_lens.services.recipes import SEARCH_PROVIDER, RecipeMatcher
from pantry_lens.services.vision import LabelDetector

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Ingredients found in an image and the recipes matched to them."""

    ingredients: list[DetectedIngredient]
    recipes: list[RecipeCandidate]

    @property
    def message(self) -> str:
        return (
            f"Found {len(self.ingredients)} ingredients "
            f"and {len(self.recipes)} recipes!"
        )


@dataclass(frozen=True)
class DailySummary:
    """A day's ledger totals against the calorie target."""

    day: date
    totals: NutritionFacts
    meals: list[MealRecord]
    daily_calorie_target: int | None

    @property
    def remaining_calories(self) -> int | None:
        if self.daily_calorie_target is None:
            return None
        return self.daily_calorie_target - self.totals.calories


@dataclass
class AnalysisOrchestrator:
    """Composes detection → normalization → matching, and resolution → ledger."""

    detector: LabelDetector
    normalizer: IngredientNormalizer
    matcher: RecipeMatcher
    resolver: MealResolver
    ledger: NutritionLedger
    profiles: ProfileService
    match_timeout_seconds: float | None = 30.0

    async def analyze_image(self, image_bytes: bytes) -> AnalysisResult:
        """Detect ingredients in an image and match recipes for the profile."""
        profile = self.profiles.require_profile()
        detection = await self.detector.detect(image_bytes)
        ingredients = self.normalizer.normalize(detection.all_labels())
        _logger.info(
            "Detected ingredients: %s", ", ".join(item.name for item in ingredients)
        )
        recipes = await self._match(ingredients, profile)
        return AnalysisResult(ingredients=ingredients, recipes=recipes)

    async def match_ingredients(self, names: Sequence[str]) -> AnalysisResult:
        """Match recipes for manually entered ingredient names."""
        profile = self.profiles.require_profile()
        ingredients = self.normalizer.normalize(
            [RawLabel(name=name, score=1.0) for name in names]
        )
        recipes = await self._match(ingredients, profile)
        return AnalysisResult(ingredients=ingredients, recipes=recipes)

    async def log_meal(
        self, meal_name: str, servings: object = 1
    ) -> tuple[MealRecord, NutritionFacts]:
        """Resolve a meal, append it to its day and return the day's totals."""
        record = await self.resolver.resolve(meal_name, servings)
        day = self.ledger.day_of(record)
        await asyncio.to_thread(self.ledger.append, day, record)
        return record, self.ledger.daily_totals(day)

    def daily_summary(self, day: date | None = None) -> DailySummary:
        """Return totals, meals and remaining calories for a day."""
        resolved_day = day or self.ledger.today()
        profile = self.profiles.get_profile()
        meals = self.ledger.meals_for(resolved_day)
        return DailySummary(
            day=resolved_day,
            totals=sum_nutrition(meals),
            meals=meals,
            daily_calorie_target=profile.daily_calorie_target if profile else None,
        )

    def clear_all(self) -> None:
        """Wipe the ledger and the profile."""
        self.ledger.clear_all()

    async def _match(
        self, ingredients: list[DetectedIngredient], profile: Profile
    ) -> list[RecipeCandidate]:
        try:
            return await asyncio.wait_for(
                self.matcher.match(
                    ingredients, profile.daily_calorie_target, profile.diet_hint
                ),
                timeout=self.match_timeout_seconds,
            )
        except TimeoutError as exc:
            raise UpstreamUnavailable(SEARCH_PROVIDER, "match timed out") from exc
