"""Error taxonomy for the recipe matching and meal logging pipeline."""


class PantryLensError(Exception):
    """Base class for errors scoped to a single operation."""

    kind = "pantry_lens_error"


class InvalidProfile(PantryLensError):
    """Raised when profile attributes cannot produce a calorie target."""

    kind = "invalid_profile"


class ProfileNotConfigured(PantryLensError):
    """Raised when an operation needs a profile and none is stored."""

    kind = "profile_not_configured"


class InvalidServings(PantryLensError):
    """Raised when a numeric serving count is zero, negative or not finite."""

    kind = "invalid_servings"


class DetectionEmpty(PantryLensError):
    """Raised when no usable ingredient survives detection and cleanup."""

    kind = "detection_empty"

    def __init__(self, message: str = "No ingredients detected in image") -> None:
        super().__init__(message)


class UpstreamUnavailable(PantryLensError):
    """Raised when a required external provider call fails."""

    kind = "upstream_unavailable"

    def __init__(self, provider: str, reason: str | None = None) -> None:
        self.provider = provider
        self.reason = reason
        message = f"Upstream provider unavailable: {provider}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NoCandidates(PantryLensError):
    """Raised when the recipe search returns no candidates at all."""

    kind = "no_candidates"

    def __init__(self, message: str = "No recipes found for these ingredients") -> None:
        super().__init__(message)


class FoodNotFound(PantryLensError):
    """Raised when the nutrition lookup matches no food."""

    kind = "food_not_found"

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"Food not found: {query}")
