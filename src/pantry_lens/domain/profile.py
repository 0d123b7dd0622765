"""Physiological profile models."""

from dataclasses import dataclass
from enum import Enum


class Gender(str, Enum):
    """Supported BMR formula branches."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(float, Enum):
    """Activity multipliers applied to BMR."""

    SEDENTARY = 1.2
    LIGHT = 1.375
    MODERATE = 1.55
    ACTIVE = 1.725


class Goal(int, Enum):
    """Daily calorie offsets by goal."""

    LOSE = -500
    MAINTAIN = 0
    GAIN = 300


class DietHint(str, Enum):
    """Diet filter forwarded to the recipe search."""

    LOW_CALORIE = "low-calorie"
    HIGH_PROTEIN = "high-protein"


@dataclass(frozen=True)
class ProfileInputs:
    """User-supplied attributes the calorie target is derived from."""

    gender: Gender
    age_years: float
    weight_kg: float
    height_cm: float
    activity_multiplier: float
    goal_offset_kcal: int


@dataclass(frozen=True)
class Profile(ProfileInputs):
    """Stored profile with its cached daily calorie target."""

    daily_calorie_target: int

    def inputs(self) -> ProfileInputs:
        """Return the editable attributes without the derived target."""
        return ProfileInputs(
            gender=self.gender,
            age_years=self.age_years,
            weight_kg=self.weight_kg,
            height_cm=self.height_cm,
            activity_multiplier=self.activity_multiplier,
            goal_offset_kcal=self.goal_offset_kcal,
        )

    @property
    def diet_hint(self) -> DietHint | None:
        """Diet hint implied by the goal offset."""
        if self.goal_offset_kcal == Goal.LOSE:
            return DietHint.LOW_CALORIE
        if self.goal_offset_kcal == Goal.GAIN:
            return DietHint.HIGH_PROTEIN
        return None
