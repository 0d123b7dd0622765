"""Request models for the HTTP API."""

from pydantic import BaseModel, Field

from pantry_lens.domain.profile import Gender


class ProfileRequest(BaseModel):
    """Onboarding or full profile edit."""

    gender: Gender
    age_years: float
    weight_kg: float
    height_cm: float
    activity_multiplier: float
    goal_offset_kcal: int


class ProfilePatch(BaseModel):
    """Partial profile edit; omitted fields keep their stored values."""

    gender: Gender | None = None
    age_years: float | None = None
    weight_kg: float | None = None
    height_cm: float | None = None
    activity_multiplier: float | None = None
    goal_offset_kcal: int | None = None


class MatchRequest(BaseModel):
    """Manually entered ingredient names."""

    ingredients: list[str] = Field(default_factory=list)


class MealRequest(BaseModel):
    """Meal to resolve and log."""

    name: str
    servings: float | str | None = 1


class MealDescriptionRequest(BaseModel):
    """Free-text description of a whole meal."""

    description: str
