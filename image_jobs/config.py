from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from image_jobs.errors import ConfigError

load_dotenv()

REQUIRED_ENV = ("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY", "OPENAI_API_KEY")


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_service_role_key: str
    openai_api_key: str
    jobs_table: str = "jobs"
    image_fetch_timeout: float = 30.0
    log_level: str = "INFO"


_settings: Optional[Settings] = None


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Raises ConfigError naming every missing required variable, so a bad
    deploy fails when the app is created instead of on the first webhook.
    """
    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    if missing:
        logging.error("[CONFIG] missing environment: %s", ", ".join(missing))
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    raw_timeout = os.getenv("IMAGE_FETCH_TIMEOUT", "30")
    try:
        timeout = float(raw_timeout)
    except ValueError as e:
        raise ConfigError(f"IMAGE_FETCH_TIMEOUT must be a number, got {raw_timeout!r}") from e

    return Settings(
        supabase_url=os.environ["SUPABASE_URL"],
        supabase_service_role_key=os.environ["SUPABASE_SERVICE_ROLE_KEY"],
        openai_api_key=os.environ["OPENAI_API_KEY"],
        jobs_table=os.getenv("JOBS_TABLE", "jobs"),
        image_fetch_timeout=timeout,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (tests change the environment between cases)."""
    global _settings
    _settings = None
