"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_token: str
    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-4.1-mini"
    off_base_url: str = "https://world.openfoodfacts.org/api/v2"
    off_user_agent: str = "label-score/1.0 (+https://example.com)"
    product_stale_after_seconds: int = 7 * 24 * 3600
    search_cache_ttl_seconds: int = 3600
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
