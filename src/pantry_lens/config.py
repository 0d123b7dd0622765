"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    spoonacular_api_key: str
    spoonacular_base_url: str = "https://api.spoonacular.com"
    nutritionix_app_id: str
    nutritionix_api_key: str
    nutritionix_base_url: str = "https://trackapi.nutritionix.com/v2"
    nutrition_lookup_scales_servings: bool = True

    detector_provider: Literal["google", "openai"] = "google"
    google_vision_api_key: str | None = None
    google_vision_url: str = "https://vision.googleapis.com/v1/images:annotate"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False

    storage_backend: Literal["memory", "supabase"] = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_kv_table: str = "kv_store"

    timezone: str = "UTC"
    admin_token: str | None = None
    http_timeout_seconds: float = 15
    match_timeout_seconds: float = 30
    enrichment_concurrency: int = 5
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def require(value: str | None, name: str) -> str:
    """Return a setting that the selected backend needs, or fail loudly."""
    if not value:
        raise ValueError(f"Missing required setting: {name}")
    return value
