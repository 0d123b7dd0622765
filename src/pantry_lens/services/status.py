"""Connectivity probes for the external providers."""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass

from pantry_lens.services.meals import NaturalNutritionClient
from pantry_lens.services.recipes import RecipeClient
from pantry_lens.services.vision import LabelDetector

# 1x1 white PNG used to exercise the detector.
PROBE_IMAGE = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63f8ffff3f0005fe02fea7d6a4"
    "8f0000000049454e44ae426082"
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamStatus:
    """Reachability of each provider."""

    detector: bool
    recipe_search: bool
    nutrition_lookup: bool

    @property
    def all_working(self) -> bool:
        return self.detector and self.recipe_search and self.nutrition_lookup


@dataclass
class UpstreamStatusService:
    """Probes every provider concurrently; a failed probe reports False."""

    detector: LabelDetector
    recipe_client: RecipeClient
    nutrition_client: NaturalNutritionClient

    async def check(self) -> UpstreamStatus:
        detector_ok, search_ok, lookup_ok = await asyncio.gather(
            self._probe("detector", self._probe_detector()),
            self._probe("recipe-search", self._probe_recipes()),
            self._probe("nutrition-lookup", self._probe_nutrition()),
        )
        return UpstreamStatus(
            detector=detector_ok,
            recipe_search=search_ok,
            nutrition_lookup=lookup_ok,
        )

    async def _probe_detector(self) -> bool:
        await self.detector.detect(PROBE_IMAGE)
        return True

    async def _probe_recipes(self) -> bool:
        payload = await self.recipe_client.random_recipes(number=1)
        recipes = payload.get("recipes") if isinstance(payload, dict) else None
        return isinstance(recipes, list) and len(recipes) > 0

    async def _probe_nutrition(self) -> bool:
        payload = await self.nutrition_client.search_instant("apple")
        if not isinstance(payload, dict):
            return False
        return bool(payload.get("common") or payload.get("branded"))

    async def _probe(self, name: str, probe: Awaitable[bool]) -> bool:
        try:
            return bool(await probe)
        except Exception as exc:
            _logger.warning("Upstream probe %s failed: %s", name, exc)
            return False
