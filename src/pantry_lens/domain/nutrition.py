"""Nutrition domain models."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NutritionFacts:
    """Calories and macronutrients; unknown values are 0, never None."""

    calories: int
    protein_g: float
    carbs_g: float
    fat_g: float

    @classmethod
    def zero(cls) -> "NutritionFacts":
        """Return all-zero facts."""
        return cls(calories=0, protein_g=0.0, carbs_g=0.0, fat_g=0.0)

    def __add__(self, other: "NutritionFacts") -> "NutritionFacts":
        return NutritionFacts(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
        )

    def scaled(self, factor: float) -> "NutritionFacts":
        """Return facts multiplied by a serving factor."""
        return NutritionFacts(
            calories=round(self.calories * factor),
            protein_g=self.protein_g * factor,
            carbs_g=self.carbs_g * factor,
            fat_g=self.fat_g * factor,
        )


@dataclass(frozen=True)
class DailyTotals:
    """Nutrition totals for one calendar date."""

    day: date
    nutrition: NutritionFacts


@dataclass(frozen=True)
class PeriodSummary:
    """Per-day totals and averages across a date range."""

    daily: list[DailyTotals]
    avg_calories: float
    avg_protein_g: float
    avg_carbs_g: float
    avg_fat_g: float
