"""
Environment configuration for the competitor intelligence pipeline.

Values are read from the process environment, with a local .env file loaded
once on import. Everything except the database URL is optional.
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_FROM_ADDRESS = "Competitor Intel <noreply@yourdomain.com>"
DEFAULT_LLM_MODEL = "gemini-2.5-flash"
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0
DEFAULT_LLM_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing."""


def _get_optional(name: str) -> Optional[str]:
    value = os.environ.get(name, "").strip()
    return value or None


def _get_float(name: str, default: float) -> float:
    value = _get_optional(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def get_database_url() -> str:
    """Get the storage connection URL. Storage cannot run without it."""
    url = _get_optional("DATABASE_URL")
    if url is None:
        raise ConfigurationError("DATABASE_URL is not set")
    return url


def get_database_admin_url() -> str:
    """Get the privileged storage URL used by the pipeline.

    Falls back to the public DATABASE_URL when no admin URL is configured.
    """
    return _get_optional("DATABASE_ADMIN_URL") or get_database_url()


def get_news_api_key() -> Optional[str]:
    return _get_optional("NEWS_API_KEY")


def get_gemini_api_key() -> Optional[str]:
    return _get_optional("GEMINI_API_KEY")


def get_resend_api_key() -> Optional[str]:
    return _get_optional("RESEND_API_KEY")


def get_digest_from_address() -> str:
    return _get_optional("DIGEST_FROM_ADDRESS") or DEFAULT_FROM_ADDRESS


def get_cron_secret() -> Optional[str]:
    return _get_optional("CRON_SECRET")


def get_llm_model_name() -> str:
    return _get_optional("LLM_MODEL") or DEFAULT_LLM_MODEL


def get_http_timeout() -> float:
    """Timeout in seconds for news search, feed and email requests."""
    return _get_float("HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)


def get_llm_timeout() -> float:
    """Timeout in seconds for a single classification call."""
    return _get_float("LLM_TIMEOUT_SECONDS", DEFAULT_LLM_TIMEOUT_SECONDS)


def get_log_level() -> str:
    """Logging level name for every logger. Must be a standard level name."""
    level = (_get_optional("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level
