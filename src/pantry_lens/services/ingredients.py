"""Cleanup of raw detector labels into ingredient names."""

from collections.abc import Sequence
from dataclasses import dataclass

from pantry_lens.domain.errors import DetectionEmpty
from pantry_lens.domain.ingredients import DetectedIngredient
from pantry_lens.domain.vision import RawLabel

MIN_SCORE = 0.6
MAX_INGREDIENTS = 10

# Category labels the detector emits for any plate of food.
GENERIC_FOOD_LABELS = frozenset(
    {
        "food",
        "vegetable",
        "fruit",
        "meat",
        "ingredient",
        "produce",
        "cuisine",
        "dish",
        "plant",
        "natural foods",
    }
)


@dataclass(frozen=True)
class IngredientNormalizer:
    """Thresholds, filters, title-cases and deduplicates detector labels."""

    min_score: float = MIN_SCORE
    max_ingredients: int = MAX_INGREDIENTS
    stoplist: frozenset[str] = GENERIC_FOOD_LABELS

    def normalize(
        self, raw_labels: Sequence[RawLabel | DetectedIngredient]
    ) -> list[DetectedIngredient]:
        """Return at most `max_ingredients` cleaned ingredients in input order."""
        seen: set[str] = set()
        ingredients: list[DetectedIngredient] = []
        for label in raw_labels:
            score = _score_of(label)
            if score <= self.min_score:
                continue
            name = label.name.strip()
            if not name or name.lower() in self.stoplist:
                continue
            name = capitalize_first(name)
            if name in seen:
                continue
            seen.add(name)
            ingredients.append(DetectedIngredient(name=name, confidence_score=score))
            if len(ingredients) == self.max_ingredients:
                break
        if not ingredients:
            raise DetectionEmpty()
        return ingredients


def capitalize_first(name: str) -> str:
    """Upper-case the first letter and lower-case the rest."""
    return name[:1].upper() + name[1:].lower()


def _score_of(label: RawLabel | DetectedIngredient) -> float:
    if isinstance(label, DetectedIngredient):
        return label.confidence_score
    return label.score
