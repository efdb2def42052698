"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes"}


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be parsed."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str = ""
    serpapi_api_key: str = ""
    database_url: str = ""
    sendgrid_api_key: str = ""
    callmebot_api_key: str = ""
    textbelt_key: str = "textbelt"
    outreach_webhook_url: str = ""
    outreach_delay_seconds: float = 0.5
    enable_sample_source: bool = True
    max_place_results: int = 20
    api_prefix: str = ""
    port: int = 8080


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_PLACES_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
    serpapi_api_key = os.getenv("SERPAPI_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    sendgrid_api_key = os.getenv("SENDGRID_API_KEY", "")
    callmebot_api_key = os.getenv("CALLMEBOT_API_KEY", "")
    textbelt_key = os.getenv("TEXTBELT_KEY") or "textbelt"
    outreach_webhook_url = os.getenv("OUTREACH_WEBHOOK_URL", "")
    outreach_delay_seconds = _get_float("OUTREACH_DELAY_SECONDS", 0.5)
    enable_sample_source = os.getenv("ENABLE_SAMPLE_SOURCE", "true").lower() in _TRUTHY
    max_place_results = _get_int("MAX_PLACE_RESULTS", 20)
    api_prefix = os.getenv("API_PREFIX", "").rstrip("/")
    port = _get_int("PORT", 8080)

    if not google_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; using free business sources.")
    if not database_url:
        logger.warning("DATABASE_URL is not set; prospects are kept in memory only.")
    if not sendgrid_api_key:
        logger.warning("SENDGRID_API_KEY is not configured; emails will be logged, not sent.")

    return Settings(
        google_api_key=google_api_key,
        serpapi_api_key=serpapi_api_key,
        database_url=database_url,
        sendgrid_api_key=sendgrid_api_key,
        callmebot_api_key=callmebot_api_key,
        textbelt_key=textbelt_key,
        outreach_webhook_url=outreach_webhook_url,
        outreach_delay_seconds=outreach_delay_seconds,
        enable_sample_source=enable_sample_source,
        max_place_results=max_place_results,
        api_prefix=api_prefix,
        port=port,
    )
