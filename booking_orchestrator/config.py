"""
Centralized configuration with environment variable overrides.

Data locations, collaborator timeouts, recognizer patterns, and browser
settings are configurable here. Nothing is hardcoded in orchestrator or
tool logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_orchestrator.logging_context import SESSION_LOG_FORMAT, install_session_filter

load_dotenv()

logger = logging.getLogger(__name__)

# Upper bound on recommendations shown per session.
MAX_RECOMMENDATIONS_LIMIT = 5


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var (true/false, yes/no, 1/0)."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class DataConfig:
    """Locations of the profile and provider data files."""

    profile_data_path: str = os.getenv("PROFILE_DATA_PATH", "data/user_profiles.json")
    # Empty means the built-in provider catalog is used.
    provider_data_path: str = os.getenv("PROVIDER_DATA_PATH", "")


@dataclass(frozen=True)
class BookingConfig:
    """Conversation and collaborator settings for the booking flow."""

    max_recommendations: int = _safe_int("MAX_RECOMMENDATIONS", "5")
    collaborator_timeout_sec: float = _safe_float("COLLABORATOR_TIMEOUT", "30.0")
    user_id_pattern: str = os.getenv("USER_ID_PATTERN", r"\buser_\d+\b")
    submit_selector: str = os.getenv("SUBMIT_SELECTOR", "button[type='submit']")


@dataclass(frozen=True)
class BrowserConfig:
    """Settings for the Playwright form inspector and actuator."""

    headless: bool = _safe_bool("BROWSER_HEADLESS", "true")
    navigation_timeout_ms: int = _safe_int("BROWSER_NAVIGATION_TIMEOUT_MS", "15000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    data: DataConfig = field(default_factory=DataConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "appointment-booking-assistant")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 1 <= config.booking.max_recommendations <= MAX_RECOMMENDATIONS_LIMIT:
        raise ValueError(
            f"MAX_RECOMMENDATIONS must be between 1 and {MAX_RECOMMENDATIONS_LIMIT}, "
            f"got {config.booking.max_recommendations}"
        )
    if config.booking.collaborator_timeout_sec <= 0:
        raise ValueError(
            "COLLABORATOR_TIMEOUT must be > 0, "
            f"got {config.booking.collaborator_timeout_sec}"
        )
    try:
        re.compile(config.booking.user_id_pattern)
    except re.error as exc:
        raise ValueError(
            f"USER_ID_PATTERN is not a valid regular expression: {exc}"
        ) from None
    if not config.booking.submit_selector.strip():
        raise ValueError("SUBMIT_SELECTOR must not be empty")
    if config.browser.navigation_timeout_ms < 1:
        raise ValueError(
            "BROWSER_NAVIGATION_TIMEOUT_MS must be >= 1, "
            f"got {config.browser.navigation_timeout_ms}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=SESSION_LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_filter()
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
