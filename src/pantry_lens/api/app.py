"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date, timedelta

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from pantry_lens.api.models import (
    MatchRequest,
    MealDescriptionRequest,
    MealRequest,
    ProfilePatch,
    ProfileRequest,
)
from pantry_lens.app_logging import configure_logging
from pantry_lens.containers import AppContainer
from pantry_lens.domain.errors import PantryLensError, UpstreamUnavailable
from pantry_lens.domain.meals import FoodLookup
from pantry_lens.domain.nutrition import PeriodSummary
from pantry_lens.domain.profile import Gender, Profile, ProfileInputs
from pantry_lens.services.analysis import AnalysisResult, DailySummary

_ERROR_STATUS = {
    "invalid_profile": 422,
    "invalid_servings": 422,
    "detection_empty": 422,
    "no_candidates": status.HTTP_404_NOT_FOUND,
    "food_not_found": status.HTTP_404_NOT_FOUND,
    "profile_not_configured": status.HTTP_409_CONFLICT,
    "upstream_unavailable": status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(PantryLensError)
    async def handle_domain_error(
        request: Request, exc: PantryLensError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
        body: dict[str, object] = {"error": exc.kind, "detail": str(exc)}
        if isinstance(exc, UpstreamUnavailable):
            body["provider"] = exc.provider
        logger.info("Request failed: %s %s -> %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/health/upstreams")
    async def upstream_health(request: Request) -> dict[str, bool]:
        """Report which external providers respond."""
        state: AppContainer = request.app.state.container
        result = await state.status_service.check()
        return {**asdict(result), "all_working": result.all_working}

    @app.put("/profile")
    async def put_profile(payload: ProfileRequest, request: Request) -> dict[str, object]:
        """Create or fully replace the profile."""
        state: AppContainer = request.app.state.container
        profile = state.profile_service.save_profile(
            ProfileInputs(**payload.model_dump())
        )
        return _profile_body(profile)

    @app.patch("/profile")
    async def patch_profile(payload: ProfilePatch, request: Request) -> dict[str, object]:
        """Edit profile fields; the calorie target is recomputed."""
        state: AppContainer = request.app.state.container
        changes = payload.model_dump(exclude_none=True)
        profile = state.profile_service.update_profile(**changes)
        return _profile_body(profile)

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        """Return the stored profile."""
        state: AppContainer = request.app.state.container
        return _profile_body(state.profile_service.require_profile())

    @app.post("/analysis")
    async def analyze_image(request: Request) -> dict[str, object]:
        """Detect ingredients in the raw image body and match recipes."""
        state: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Image body is required",
            )
        result = await state.orchestrator.analyze_image(image_bytes)
        return _analysis_body(result)

    @app.post("/recipes/match")
    async def match_recipes(payload: MatchRequest, request: Request) -> dict[str, object]:
        """Match recipes for manually entered ingredients."""
        state: AppContainer = request.app.state.container
        result = await state.orchestrator.match_ingredients(payload.ingredients)
        return _analysis_body(result)

    @app.get("/recipes/recommendations")
    async def recommendations(request: Request) -> dict[str, object]:
        """Goal-based recipe suggestions for the stored profile."""
        state: AppContainer = request.app.state.container
        profile = state.profile_service.require_profile()
        recipes = await state.recipe_catalog.recommend(
            profile.goal_offset_kcal, profile.daily_calorie_target
        )
        return {"recipes": [asdict(recipe) for recipe in recipes]}

    @app.get("/recipes/{recipe_id}")
    async def recipe_details(recipe_id: int, request: Request) -> dict[str, object]:
        """Full recipe with ingredients and instructions."""
        state: AppContainer = request.app.state.container
        details = await state.recipe_catalog.get_recipe_details(recipe_id)
        return asdict(details)

    @app.post("/meals")
    async def log_meal(payload: MealRequest, request: Request) -> dict[str, object]:
        """Resolve a meal by name and append it to today's ledger."""
        state: AppContainer = request.app.state.container
        record, totals = await state.orchestrator.log_meal(
            payload.name, payload.servings
        )
        return {"meal": asdict(record), "day_totals": asdict(totals)}

    @app.post("/meals/analyze")
    async def analyze_meal(
        payload: MealDescriptionRequest, request: Request
    ) -> dict[str, object]:
        """Break a meal description into foods without logging it."""
        state: AppContainer = request.app.state.container
        analysis = await state.meal_resolver.analyze_description(payload.description)
        return {
            "foods": [_lookup_body(food) for food in analysis.foods],
            "totals": asdict(analysis.totals),
        }

    @app.get("/foods/lookup")
    async def lookup_food(
        request: Request, query: str, amount: float = 1
    ) -> dict[str, object]:
        """Quick nutrition lookup for one food phrase."""
        state: AppContainer = request.app.state.container
        return _lookup_body(await state.meal_resolver.lookup(query, amount))

    @app.get("/foods/suggest")
    async def suggest_foods(request: Request, query: str) -> dict[str, object]:
        """Food name suggestions for autocomplete."""
        state: AppContainer = request.app.state.container
        return {"foods": await state.meal_resolver.suggest(query)}

    @app.get("/ledger/today")
    async def ledger_today(request: Request) -> dict[str, object]:
        """Today's meals and totals in the configured timezone."""
        state: AppContainer = request.app.state.container
        return _summary_body(state.orchestrator.daily_summary())

    @app.get("/ledger/week")
    async def ledger_week(request: Request) -> dict[str, object]:
        """Week-to-date per-day totals and averages."""
        state: AppContainer = request.app.state.container
        today = state.ledger.today()
        start = today - timedelta(days=today.weekday())
        return _period_body(state.ledger.period_summary(start, 7))

    @app.get("/ledger/{day}")
    async def ledger_day(day: date, request: Request) -> dict[str, object]:
        """Meals and totals for a calendar date."""
        state: AppContainer = request.app.state.container
        return _summary_body(state.orchestrator.daily_summary(day))

    @app.delete("/data")
    async def clear_all(
        request: Request, x_admin_token: str | None = Header(default=None)
    ) -> dict[str, str]:
        """Wipe every ledger partition and the profile."""
        state: AppContainer = request.app.state.container
        expected = state.settings.admin_token
        if not expected or x_admin_token != expected:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        state.orchestrator.clear_all()
        return {"status": "cleared"}

    return app


def _profile_body(profile: Profile) -> dict[str, object]:
    body = asdict(profile)
    body["gender"] = Gender(profile.gender).value
    hint = profile.diet_hint
    body["diet_hint"] = hint.value if hint else None
    return body


def _analysis_body(result: AnalysisResult) -> dict[str, object]:
    return {
        "ingredients": [asdict(item) for item in result.ingredients],
        "recipes": [asdict(recipe) for recipe in result.recipes],
        "message": result.message,
    }


def _lookup_body(food: FoodLookup) -> dict[str, object]:
    return {
        "name": food.name,
        "serving": food.serving,
        "nutrition": asdict(food.nutrition),
    }


def _summary_body(summary: DailySummary) -> dict[str, object]:
    return {
        "day": summary.day.isoformat(),
        "totals": asdict(summary.totals),
        "meals": [asdict(meal) for meal in summary.meals],
        "daily_calorie_target": summary.daily_calorie_target,
        "remaining_calories": summary.remaining_calories,
    }


def _period_body(summary: PeriodSummary) -> dict[str, object]:
    return {
        "daily": [
            {"day": entry.day.isoformat(), "totals": asdict(entry.nutrition)}
            for entry in summary.daily
        ],
        "avg_calories": summary.avg_calories,
        "avg_protein_g": summary.avg_protein_g,
        "avg_carbs_g": summary.avg_carbs_g,
        "avg_fat_g": summary.avg_fat_g,
    }
