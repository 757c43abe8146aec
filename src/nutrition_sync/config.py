"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_MODEL_CONFIG = SettingsConfigDict(
    env_file=(f".env.{_ENVIRONMENT}", ".env"),
    extra="ignore",
)


class ServerSettings(BaseSettings):
    """Settings for the sync document server."""

    supabase_url: str
    supabase_service_key: str
    sync_document_id: str = "user_1"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = _MODEL_CONFIG


class ClientSettings(BaseSettings):
    """Settings for the tracker client session."""

    sync_base_url: str = "http://localhost:8000"
    storage_path: str = "nutrition_sync_state.json"
    sync_debounce_seconds: float = 2.0
    sync_success_display_seconds: float = 3.0
    http_timeout_seconds: float = 10.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = _MODEL_CONFIG
