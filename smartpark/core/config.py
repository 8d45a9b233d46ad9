"""
Configuration for the SmartPark engine and its API.

Settings are loaded from environment variables or a `.env` file, with
defaults suitable for local development. The billing constants and the
default rate table live here so deployments can tune them without code
changes; the engine functions still accept explicit overrides so tests
never depend on ambient configuration.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dotenv import load_dotenv
import logging
import os

ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_PATH, override=False)

DEFAULT_TIMEZONE = "Asia/Kolkata"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Rate registry storage. Scan events are never stored here.
    database_url: str = Field(
        default="sqlite+pysqlite:///./smartpark.db",
    )
    # IANA zone whose wall clock defines a "calendar day".
    timezone: str = Field(default=DEFAULT_TIMEZONE, validation_alias="SMARTPARK_TIMEZONE")
    billing_grace_minutes: int = Field(default=30)
    billing_block_minutes: int = Field(default=60)
    default_rate_car: float = Field(default=20.0)
    default_rate_bike: float = Field(default=10.0)
    default_rate_truck: float = Field(default=50.0)
    # Local scan file, the dashboard's offline data source.
    events_path: str = Field(default="data/numberplate.json")
    analytics_comparison: str = Field(default="shift")
    auto_create_db: bool = Field(default=True)
    auto_seed_rates: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    api_max_page_size: int = Field(default=200)

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()


def get_local_timezone(name: str | None = None) -> ZoneInfo:
    tz_name = (name or settings.timezone or DEFAULT_TIMEZONE).strip()
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.getLogger("config").warning("Unknown timezone=%s; using %s", tz_name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def resolve_events_path() -> Path:
    path = Path(os.getenv("EVENTS_PATH", settings.events_path)).expanduser()
    if not path.is_absolute():
        path = (Path(__file__).resolve().parents[2] / path).resolve()
    return path


def validate_runtime_settings() -> None:
    logger = logging.getLogger("config")

    try:
        ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.error("SMARTPARK_TIMEZONE=%s is not a valid IANA zone; using %s.", settings.timezone, DEFAULT_TIMEZONE)
        settings.timezone = DEFAULT_TIMEZONE

    if settings.billing_grace_minutes < 0:
        logger.warning("BILLING_GRACE_MINUTES must not be negative; using 30.")
        settings.billing_grace_minutes = 30
    if settings.billing_block_minutes < 1:
        logger.warning("BILLING_BLOCK_MINUTES must be positive; using 60.")
        settings.billing_block_minutes = 60

    for name, fallback in (("default_rate_car", 20.0), ("default_rate_bike", 10.0), ("default_rate_truck", 50.0)):
        if getattr(settings, name) <= 0:
            logger.warning("%s must be positive; using %s.", name.upper(), fallback)
            setattr(settings, name, fallback)

    if not isinstance(logging.getLevelName(settings.log_level.strip().upper()), int):
        logger.warning("Unknown LOG_LEVEL=%s; using INFO.", settings.log_level)
        settings.log_level = "INFO"

    if settings.api_max_page_size < 1:
        logger.warning("API_MAX_PAGE_SIZE must be positive; using 200.")
        settings.api_max_page_size = 200

    if settings.analytics_comparison not in {"shift", "previous_month"}:
        logger.warning("Unknown ANALYTICS_COMPARISON=%s; defaulting to shift", settings.analytics_comparison)
        settings.analytics_comparison = "shift"


validate_runtime_settings()
