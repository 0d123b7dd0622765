"""Recipe domain models and recipe search response boundaries."""

import re
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator

from pantry_lens.domain.nutrition import NutritionFacts

_LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class RecipeCandidate:
    """Recipe proposed for a set of detected ingredients."""

    id: int
    title: str
    image_ref: str | None
    used_ingredient_count: int
    missed_ingredient_count: int
    nutrition: NutritionFacts
    match_percent: int
    used_ingredients: list[str] = field(default_factory=list)
    missed_ingredients: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PartialEnrichmentFailure:
    """Non-fatal nutrition lookup failure for one candidate."""

    recipe_id: int
    reason: str


@dataclass(frozen=True)
class EnrichmentOutcome:
    """Result slot for one candidate's nutrition lookup."""

    recipe_id: int
    nutrition: NutritionFacts | None = None
    failure: PartialEnrichmentFailure | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None and self.nutrition is not None


@dataclass(frozen=True)
class RecipeIngredient:
    """Ingredient line of a full recipe."""

    name: str
    amount: float
    unit: str
    original: str


@dataclass(frozen=True)
class RecipeStep:
    """Numbered instruction step."""

    number: int
    step: str


@dataclass(frozen=True)
class RecipeDetails:
    """Full recipe with instructions and nutrition."""

    id: int
    title: str
    image_ref: str | None
    ready_in_minutes: int | None
    servings: int | None
    summary: str
    ingredients: list[RecipeIngredient]
    instructions: list[RecipeStep]
    nutrition: NutritionFacts


@dataclass(frozen=True)
class RecipeSummary:
    """Recipe returned by keyword recommendations."""

    id: int
    title: str
    image_ref: str | None
    ready_in_minutes: int | None
    servings: int | None
    nutrition: NutritionFacts


def parse_amount(value: object) -> float:
    """Read a number from values like 316, "316", "25g" or "1.5 k"."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return max(float(value), 0.0)
    if isinstance(value, str):
        match = _LEADING_NUMBER.search(value)
        if match:
            return max(float(match.group()), 0.0)
    return 0.0


def text_or_empty(value: object) -> object:
    """Map a JSON null to an empty string."""
    return "" if value is None else value


class _IngredientRef(BaseModel):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)


class SpoonacularSearchHit(BaseModel):
    """Entry of a `findByIngredients` response."""

    id: int
    title: str = ""
    image: str | None = None
    usedIngredientCount: int = 0  # noqa: N815
    missedIngredientCount: int = 0  # noqa: N815
    usedIngredients: list[_IngredientRef] = Field(default_factory=list)  # noqa: N815
    missedIngredients: list[_IngredientRef] = Field(default_factory=list)  # noqa: N815

    @field_validator("usedIngredientCount", "missedIngredientCount", mode="before")
    @classmethod
    def _count_or_zero(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("title", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)


class SpoonacularNutritionWidget(BaseModel):
    """Body of `/recipes/{id}/nutritionWidget.json`."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    @field_validator("calories", "protein", "carbs", "fat", mode="before")
    @classmethod
    def _amount(cls, value: object) -> float:
        return parse_amount(value)

    def to_facts(self) -> NutritionFacts:
        return NutritionFacts(
            calories=round(self.calories),
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
        )


class _Nutrient(BaseModel):
    name: str = ""
    amount: float = 0.0

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: object) -> float:
        return parse_amount(value)


class _NutrientList(BaseModel):
    nutrients: list[_Nutrient] = Field(default_factory=list)

    def to_facts(self) -> NutritionFacts:
        amounts = {nutrient.name: nutrient.amount for nutrient in self.nutrients}
        return NutritionFacts(
            calories=round(amounts.get("Calories", 0.0)),
            protein_g=amounts.get("Protein", 0.0),
            carbs_g=amounts.get("Carbohydrates", 0.0),
            fat_g=amounts.get("Fat", 0.0),
        )


class _ExtendedIngredient(BaseModel):
    name: str = ""
    amount: float = 0.0
    unit: str = ""
    original: str = ""

    @field_validator("name", "unit", "original", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: object) -> float:
        return parse_amount(value)


class _Step(BaseModel):
    number: int = 0
    step: str = ""

    @field_validator("number", mode="before")
    @classmethod
    def _number(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("step", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)


class _Instruction(BaseModel):
    steps: list[_Step] = Field(default_factory=list)


class SpoonacularRecipeInformation(BaseModel):
    """Body of `/recipes/{id}/information` and `complexSearch` results."""

    id: int
    title: str = ""
    image: str | None = None
    readyInMinutes: int | None = None  # noqa: N815
    servings: int | None = None
    summary: str | None = None
    extendedIngredients: list[_ExtendedIngredient] = Field(  # noqa: N815
        default_factory=list
    )
    analyzedInstructions: list[_Instruction] = Field(  # noqa: N815
        default_factory=list
    )
    nutrition: _NutrientList | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _text(cls, value: object) -> object:
        return text_or_empty(value)

    def nutrition_facts(self) -> NutritionFacts:
        if self.nutrition is None:
            return NutritionFacts.zero()
        return self.nutrition.to_facts()


class SpoonacularComplexSearch(BaseModel):
    """Body of `/recipes/complexSearch`."""

    results: list[SpoonacularRecipeInformation] = Field(default_factory=list)
