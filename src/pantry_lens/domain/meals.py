"""Domain models for meal logging."""

from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator

from pantry_lens.domain.nutrition import NutritionFacts


@dataclass(frozen=True)
class MealRecord:
    """Logged meal; nutrition is already scaled by servings."""

    name: str
    nutrition: NutritionFacts
    servings: float
    timestamp: str


@dataclass(frozen=True)
class FoodLookup:
    """Nutrition for a free-text phrase, without logging it."""

    name: str
    serving_qty: float
    serving_unit: str
    nutrition: NutritionFacts

    @property
    def serving(self) -> str:
        return f"{self.serving_qty:g} {self.serving_unit}".strip()


@dataclass(frozen=True)
class MealAnalysis:
    """Per-food breakdown and totals for a meal description."""

    foods: list[FoodLookup]
    totals: NutritionFacts


class NutritionixFood(BaseModel):
    """Food entry of a Nutritionix `natural/nutrients` response."""

    food_name: str = ""
    serving_qty: float = 1.0
    serving_unit: str = ""
    nf_calories: float = 0.0
    nf_protein: float = 0.0
    nf_total_carbohydrate: float = 0.0
    nf_total_fat: float = 0.0

    @field_validator(
        "nf_calories", "nf_protein", "nf_total_carbohydrate", "nf_total_fat",
        mode="before",
    )
    @classmethod
    def _non_negative(cls, value: object) -> object:
        if value is None:
            return 0.0
        if isinstance(value, int | float) and value < 0:
            return 0.0
        return value

    @field_validator("serving_qty", mode="before")
    @classmethod
    def _quantity(cls, value: object) -> object:
        return 1.0 if value is None else value

    @field_validator("serving_unit", mode="before")
    @classmethod
    def _unit(cls, value: object) -> object:
        return "" if value is None else value

    def to_facts(self) -> NutritionFacts:
        return NutritionFacts(
            calories=round(self.nf_calories),
            protein_g=float(round(self.nf_protein)),
            carbs_g=float(round(self.nf_total_carbohydrate)),
            fat_g=float(round(self.nf_total_fat)),
        )


class NutritionixResponse(BaseModel):
    """Top-level Nutritionix `natural/nutrients` response."""

    foods: list[NutritionixFood] = Field(default_factory=list)
