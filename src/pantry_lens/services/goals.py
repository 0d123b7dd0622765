"""Daily calorie target calculation (revised Harris-Benedict)."""

import math
from dataclasses import dataclass

from pantry_lens.domain.errors import InvalidProfile
from pantry_lens.domain.profile import (
    ActivityLevel,
    Gender,
    Goal,
    Profile,
    ProfileInputs,
)

_ALLOWED_MULTIPLIERS = frozenset(level.value for level in ActivityLevel)
_ALLOWED_OFFSETS = frozenset(goal.value for goal in Goal)


@dataclass(frozen=True)
class GoalCalculator:
    """Derives BMR, TDEE and the daily calorie target from a profile.

    Inputs are validated before any arithmetic so that a blank or zero field
    never yields a nonsensical target. No minimum calorie floor is applied.
    """

    def compute_bmr(self, profile: ProfileInputs) -> float:
        """Return basal metabolic rate in kcal/day."""
        self._validate(profile)
        return _bmr(profile)

    def compute_tdee(self, profile: ProfileInputs) -> float:
        """Return total daily energy expenditure in kcal/day."""
        self._validate(profile)
        return _bmr(profile) * profile.activity_multiplier

    def compute_daily_calories(self, profile: ProfileInputs) -> int:
        """Return the rounded daily calorie target for the profile's goal."""
        self._validate(profile)
        tdee = _bmr(profile) * profile.activity_multiplier
        return round(tdee + profile.goal_offset_kcal)

    def build_profile(self, inputs: ProfileInputs) -> Profile:
        """Return a stored-profile value with a freshly computed target."""
        target = self.compute_daily_calories(inputs)
        return Profile(
            gender=Gender(inputs.gender),
            age_years=float(inputs.age_years),
            weight_kg=float(inputs.weight_kg),
            height_cm=float(inputs.height_cm),
            activity_multiplier=float(inputs.activity_multiplier),
            goal_offset_kcal=int(inputs.goal_offset_kcal),
            daily_calorie_target=target,
        )

    def _validate(self, profile: ProfileInputs) -> None:
        for field_name in ("weight_kg", "height_cm", "age_years"):
            value = getattr(profile, field_name)
            if not _is_number(value):
                raise InvalidProfile(f"{field_name} must be a number")
            if value <= 0:
                raise InvalidProfile(f"{field_name} must be positive")
        try:
            Gender(profile.gender)
        except ValueError as exc:
            raise InvalidProfile("gender must be 'male' or 'female'") from exc
        if (
            not _is_number(profile.activity_multiplier)
            or profile.activity_multiplier not in _ALLOWED_MULTIPLIERS
        ):
            raise InvalidProfile(
                f"activity_multiplier must be one of {sorted(_ALLOWED_MULTIPLIERS)}"
            )
        if (
            not _is_number(profile.goal_offset_kcal)
            or profile.goal_offset_kcal not in _ALLOWED_OFFSETS
        ):
            raise InvalidProfile(
                f"goal_offset_kcal must be one of {sorted(_ALLOWED_OFFSETS)}"
            )


def _bmr(profile: ProfileInputs) -> float:
    if Gender(profile.gender) is Gender.MALE:
        return (
            88.362
            + 13.397 * profile.weight_kg
            + 4.799 * profile.height_cm
            - 5.677 * profile.age_years
        )
    return (
        447.593
        + 9.247 * profile.weight_kg
        + 3.098 * profile.height_cm
        - 4.330 * profile.age_years
    )


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)
