"""App configuration — environment variable loading with typed defaults.

Loads settings from .env file (via python-dotenv) and os.environ.
Real environment variables take precedence over .env file values.

Usage:
    from skillforged.config import get_settings
    settings = get_settings()
    print(settings.job_workers)  # 2
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Only load .env from the project root — don't traverse parent directories.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DOTENV_PATH = PROJECT_ROOT / ".env"

_AI_BACKENDS = ("live", "mock")


@dataclass(frozen=True)
class Settings:
    """Typed configuration for the SkillForged service.

    All fields have sensible defaults for local development.
    """

    # App
    app_env: str
    app_port: int
    log_level: str
    cors_origins: list[str]
    app_url: str

    # AI
    ai_backend: str
    google_api_key: str
    openrouter_api_key: str
    anthropic_api_key: str

    # Cache
    redis_url: str

    # Jobs
    job_workers: int
    job_deadline_seconds: int

    # Rate limiting
    rate_limit_max_requests: int
    rate_limit_window_seconds: int


def _split_csv(value: str) -> list[str]:
    """Splits a comma-separated string into a list of stripped, non-empty values."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _int_env(env_var: str, default: str) -> int:
    """Reads an integer environment variable.

    Raises:
        ValueError: If the value is not an integer, naming the variable.
    """
    raw = os.environ.get(env_var, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for {env_var}: {raw!r}. Expected an integer."
        ) from None


def _ai_backend() -> str:
    value = os.environ.get("AI_BACKEND", "live").strip().lower()
    if value not in _AI_BACKENDS:
        raise ValueError(
            f"Invalid value for AI_BACKEND: {value!r}. "
            f"Valid options: {', '.join(_AI_BACKENDS)}"
        )
    return value


def _load_settings() -> Settings:
    """Loads configuration from .env file and environment variables.

    Returns:
        A fully resolved Settings instance.
    """
    load_dotenv(_DOTENV_PATH)

    return Settings(
        # App
        app_env=os.environ.get("APP_ENV", "development"),
        app_port=_int_env("APP_PORT", "8000"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        cors_origins=_split_csv(
            os.environ.get("CORS_ORIGINS", "http://localhost:3000")
        ),
        app_url=os.environ.get("APP_URL", "http://localhost:3000"),
        # AI
        ai_backend=_ai_backend(),
        google_api_key=os.environ.get("GOOGLE_API_KEY", ""),
        openrouter_api_key=os.environ.get("OPENROUTER_API_KEY", ""),
        anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        # Cache
        redis_url=os.environ.get("REDIS_URL", ""),
        # Jobs
        job_workers=_int_env("JOB_WORKERS", "2"),
        job_deadline_seconds=_int_env("JOB_DEADLINE_SECONDS", "900"),
        # Rate limiting
        rate_limit_max_requests=_int_env("RATE_LIMIT_MAX_REQUESTS", "5"),
        rate_limit_window_seconds=_int_env("RATE_LIMIT_WINDOW_SECONDS", "60"),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Returns the singleton Settings instance. Loads .env on first call."""
    global _settings
    if _settings is None:
        _settings = _load_settings()
    return _settings
