"""Free-text meal resolution into ledger-ready nutrition records."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from pantry_lens.domain.errors import FoodNotFound, InvalidServings, UpstreamUnavailable
from pantry_lens.domain.meals import (
    FoodLookup,
    MealAnalysis,
    MealRecord,
    NutritionixFood,
    NutritionixResponse,
)
from pantry_lens.domain.nutrition import NutritionFacts
from pantry_lens.services.upstream import call_with_retry

if TYPE_CHECKING:
    from collections.abc import Callable

LOOKUP_PROVIDER = "nutrition-lookup"

_logger = logging.getLogger(__name__)


class NaturalNutritionClient(Protocol):
    """Interface for natural-language nutrition lookups."""

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Return raw nutrition data for a quantity + food phrase."""

    async def search_instant(self, query: str) -> dict[str, object]:
        """Return raw food name suggestions."""


@dataclass
class MealResolver:
    """Resolves a meal name and serving count into a MealRecord.

    When `scales_by_quantity` is true the provider has already applied the
    quantity in the query phrase and values are used as returned; otherwise
    they are per-unit and multiplied by the serving count once here.
    """

    client: NaturalNutritionClient
    scales_by_quantity: bool = True
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    clock: "Callable[[], datetime] | None" = None

    async def resolve(self, meal_name: str, servings: object) -> MealRecord:
        """Look up the meal once and return a record scaled by servings."""
        quantity = coerce_servings(servings)
        name = meal_name.strip()
        if not name:
            raise FoodNotFound(meal_name)
        phrase = quantity_phrase(name, quantity)
        food = await self._first_food(phrase)
        nutrition = food.to_facts()
        if not self.scales_by_quantity:
            nutrition = nutrition.scaled(quantity)
        _logger.info(
            "Meal resolved: query=%r match=%r calories=%s",
            phrase,
            food.food_name,
            nutrition.calories,
        )
        return MealRecord(
            name=food.food_name or name,
            nutrition=nutrition,
            servings=quantity,
            timestamp=self._now().isoformat(),
        )

    async def lookup(self, food_name: str, amount: object = 1) -> FoodLookup:
        """Return nutrition for a phrase without logging it."""
        quantity = coerce_servings(amount)
        food = await self._first_food(quantity_phrase(food_name.strip(), quantity))
        return _to_lookup(food)

    async def analyze_description(self, description: str) -> MealAnalysis:
        """Break a multi-food description into foods and rounded totals."""
        foods = await self._foods(description)
        if not foods:
            raise FoodNotFound(description)
        lookups = [_to_lookup(food) for food in foods]
        totals = NutritionFacts(
            calories=round(sum(food.nf_calories for food in foods)),
            protein_g=float(round(sum(food.nf_protein for food in foods))),
            carbs_g=float(round(sum(food.nf_total_carbohydrate for food in foods))),
            fat_g=float(round(sum(food.nf_total_fat for food in foods))),
        )
        return MealAnalysis(foods=lookups, totals=totals)

    async def suggest(self, query: str) -> list[str]:
        """Return food name suggestions, common foods first."""
        try:
            raw = await self.client.search_instant(query)
        except Exception as exc:
            raise UpstreamUnavailable(LOOKUP_PROVIDER, str(exc)) from exc
        names: list[str] = []
        for group in ("common", "branded"):
            entries = raw.get(group) if isinstance(raw, dict) else None
            if not isinstance(entries, list):
                continue
            for entry in entries[:10]:
                if isinstance(entry, dict) and entry.get("food_name"):
                    names.append(str(entry["food_name"]))
        return names

    async def _first_food(self, phrase: str) -> NutritionixFood:
        foods = await self._foods(phrase)
        if not foods:
            raise FoodNotFound(phrase)
        return foods[0]

    async def _foods(self, query: str) -> list[NutritionixFood]:
        try:
            raw = await call_with_retry(
                lambda: self.client.natural_nutrients(query),
                action="natural_nutrients",
                retry_attempts=self.retry_attempts,
                retry_delay_seconds=self.retry_delay_seconds,
            )
        except Exception as exc:
            if _status_is_not_found(exc):
                raise FoodNotFound(query) from exc
            raise UpstreamUnavailable(LOOKUP_PROVIDER, str(exc)) from exc
        try:
            return NutritionixResponse.model_validate(raw).foods
        except ValidationError as exc:
            raise UpstreamUnavailable(LOOKUP_PROVIDER, "malformed response") from exc

    def _now(self) -> datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.now(tz=UTC)


def coerce_servings(servings: object) -> float:
    """Return a positive serving count; non-numeric input means one serving."""
    value: float | None = None
    if isinstance(servings, bool):
        value = None
    elif isinstance(servings, int | float):
        try:
            value = float(servings)
        except OverflowError as exc:
            raise InvalidServings("servings is too large") from exc
    elif isinstance(servings, str):
        try:
            value = float(servings.strip())
        except ValueError:
            value = None
    if value is None or math.isnan(value):
        return 1.0
    if not math.isfinite(value) or value <= 0:
        raise InvalidServings(f"servings must be greater than 0, got {servings!r}")
    return value


def quantity_phrase(food_name: str, quantity: float) -> str:
    """Build the natural-language query, e.g. `2 chicken breast`."""
    return f"{quantity:g} {food_name}"


def _to_lookup(food: NutritionixFood) -> FoodLookup:
    return FoodLookup(
        name=food.food_name,
        serving_qty=food.serving_qty,
        serving_unit=food.serving_unit,
        nutrition=food.to_facts(),
    )


def _status_is_not_found(exc: Exception) -> bool:
    # Nutritionix answers 404 when nothing in the phrase matches a food.
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None) == 404
