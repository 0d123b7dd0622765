"""Tests for upstream connectivity probes."""

import asyncio

from pantry_lens.services.status import UpstreamStatusService
from pantry_lens.services.vision import GoogleVisionDetector
from tests.conftest import (
    FakeGoogleVisionClient,
    FakeNutritionClient,
    FakeRecipeClient,
)


def test_all_providers_working() -> None:
    service = UpstreamStatusService(
        detector=GoogleVisionDetector(client=FakeGoogleVisionClient()),
        recipe_client=FakeRecipeClient(),
        nutrition_client=FakeNutritionClient(),
    )

    status = asyncio.run(service.check())

    assert status.detector
    assert status.recipe_search
    assert status.nutrition_lookup
    assert status.all_working


def test_failed_probes_report_false() -> None:
    service = UpstreamStatusService(
        detector=GoogleVisionDetector(
            client=FakeGoogleVisionClient(error=ConnectionError("down"))
        ),
        recipe_client=FakeRecipeClient(random_payload={"recipes": []}),
        nutrition_client=FakeNutritionClient(),
    )

    status = asyncio.run(service.check())

    assert not status.detector
    assert not status.recipe_search
    assert status.nutrition_lookup
    assert not status.all_working
