"""Ingredient detection through external vision providers."""

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from pantry_lens.domain.errors import UpstreamUnavailable
from pantry_lens.domain.vision import (
    DetectionResult,
    GoogleAnnotateResponse,
    RawLabel,
)

DETECTOR_PROVIDER = "detector"
MAX_RESULTS_PER_FEATURE = 20

LABEL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "labels": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "score": {"type": "number", "minimum": 0.0, "maximum": 1.0},
                },
                "required": ["name", "score"],
                "additionalProperties": False,
            },
        }
    },
    "required": ["labels"],
    "additionalProperties": False,
}

_OPENAI_PROMPT = (
    "List the raw food ingredients visible in the image. "
    "Return each as a short singular name (e.g. 'tomato', 'chicken breast') "
    "with a confidence score between 0 and 1."
)

_logger = logging.getLogger(__name__)


class LabelDetector(Protocol):
    """Turns image bytes into unfiltered labels."""

    async def detect(self, image_bytes: bytes) -> DetectionResult:
        """Return labels and localized objects for the image."""


class GoogleVisionClient(Protocol):
    """Interface for the Google Vision `images:annotate` call."""

    async def annotate(self, payload: dict[str, object]) -> dict[str, object]:
        """Return the raw annotate response."""


class VisionClient(Protocol):
    """Interface for LLM vision extraction."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured vision extraction data."""


@dataclass
class GoogleVisionDetector(LabelDetector):
    """Label and object detection via Google Cloud Vision."""

    client: GoogleVisionClient
    max_results: int = MAX_RESULTS_PER_FEATURE

    async def detect(self, image_bytes: bytes) -> DetectionResult:
        """Annotate the image and map annotations to raw labels."""
        payload = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [
                        {"type": "LABEL_DETECTION", "maxResults": self.max_results},
                        {
                            "type": "OBJECT_LOCALIZATION",
                            "maxResults": self.max_results,
                        },
                    ],
                }
            ]
        }
        try:
            raw = await self.client.annotate(payload)
            response = GoogleAnnotateResponse.model_validate(raw)
        except (ValidationError, ValueError) as exc:
            _logger.warning("Vision response could not be parsed: %s", exc)
            raise UpstreamUnavailable(DETECTOR_PROVIDER, "malformed response") from exc
        except Exception as exc:
            _logger.warning("Vision request failed: %s", exc)
            raise UpstreamUnavailable(DETECTOR_PROVIDER, str(exc)) from exc

        if not response.responses:
            raise UpstreamUnavailable(DETECTOR_PROVIDER, "empty response")
        result = response.responses[0]
        if result.error is not None:
            raise UpstreamUnavailable(DETECTOR_PROVIDER, result.error.message)
        return DetectionResult(
            labels=[
                RawLabel(name=label.description, score=_clamp(label.score))
                for label in result.labelAnnotations
            ],
            objects=[
                RawLabel(name=obj.name, score=_clamp(obj.score))
                for obj in result.localizedObjectAnnotations
            ],
        )


@dataclass
class OpenAIVisionDetector(LabelDetector):
    """Ingredient labels via an LLM with structured outputs."""

    client: VisionClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def detect(self, image_bytes: bytes) -> DetectionResult:
        """Extract ingredient labels from an image via the configured client."""
        try:
            raw = await self.client.extract(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                image_data_url=_to_data_url(image_bytes),
                schema=LABEL_SCHEMA,
                prompt=_OPENAI_PROMPT,
            )
            return DetectionResult.model_validate(raw)
        except ValidationError as exc:
            raise UpstreamUnavailable(DETECTOR_PROVIDER, "malformed response") from exc
        except Exception as exc:
            _logger.warning("Vision request failed: %s", exc)
            raise UpstreamUnavailable(DETECTOR_PROVIDER, str(exc)) from exc


def _clamp(score: float) -> float:
    return min(max(score, 0.0), 1.0)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
