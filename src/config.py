from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from src.pipeline_config import StepValidationPolicy


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    gemini_api_key: str = ""  # Required for guide synthesis; /api/process works without it

    # Guide generation
    gemini_model: str = "gemini-2.5-flash"
    transcript_language: str = "en"
    step_validation: StepValidationPolicy = StepValidationPolicy.PASS_THROUGH
    metadata_timeout_seconds: float = 10.0
    pipeline_timeout_seconds: float = 180.0

    # Export
    export_scale: int = 2

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles unreadable .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults. Invalid values still raise
    a ``ValidationError`` at startup.
    """
    try:
        return Settings()
    except (OSError, UnicodeDecodeError):
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
