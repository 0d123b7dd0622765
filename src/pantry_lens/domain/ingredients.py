"""Ingredient models produced by detection and cleanup."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectedIngredient:
    """Normalized ingredient ready for recipe matching."""

    name: str
    confidence_score: float
