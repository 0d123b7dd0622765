"""Models for ingredient detection results."""

from pydantic import BaseModel, Field


class RawLabel(BaseModel):
    """Single label reported by the detector, before thresholding."""

    name: str
    score: float = Field(default=0.0, ge=0.0, le=1.0)


class DetectionResult(BaseModel):
    """Labels and localized objects returned for one image."""

    labels: list[RawLabel] = Field(default_factory=list)
    objects: list[RawLabel] = Field(default_factory=list)

    def all_labels(self) -> list[RawLabel]:
        """Return labels followed by localized objects."""
        return [*self.labels, *self.objects]


class GoogleLabelAnnotation(BaseModel):
    """Google Vision `labelAnnotations` entry."""

    description: str = ""
    score: float = 0.0


class GoogleObjectAnnotation(BaseModel):
    """Google Vision `localizedObjectAnnotations` entry."""

    name: str = ""
    score: float = 0.0


class GoogleError(BaseModel):
    """Per-image error block in an annotate response."""

    message: str = ""


class GoogleAnnotateResult(BaseModel):
    """One entry of `responses` in an annotate response."""

    labelAnnotations: list[GoogleLabelAnnotation] = Field(default_factory=list)  # noqa: N815
    localizedObjectAnnotations: list[GoogleObjectAnnotation] = Field(  # noqa: N815
        default_factory=list
    )
    error: GoogleError | None = None


class GoogleAnnotateResponse(BaseModel):
    """Top-level Google Vision `images:annotate` response."""

    responses: list[GoogleAnnotateResult] = Field(default_factory=list)
