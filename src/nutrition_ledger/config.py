"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_token: str
    store_backend: str = "supabase"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    documents_table: str = "user_documents"
    timezone: str | None = None
    mirror_legacy_target_macros: bool = True
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_timezone(raw: str | None) -> str | None:
    """Normalize the configured day-boundary timezone."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned.lower() in {"", "local"}:
        return None
    return cleaned
