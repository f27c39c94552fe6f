"""
Configuration settings for the LORO CRM AI service.

Environment variables:
    GOOGLE_AI_API_KEY: Gemini API key (primary)
    GOOGLE_GENERATIVE_AI_API_KEY: Gemini API key (legacy name, used if the primary is unset)
    AI_MODEL_FALLBACK_ORDER: Comma-separated model ids tried in order
    AI_RETRY_ATTEMPTS: Attempts per model on transient errors (1 = no retry)
    LOG_LEVEL: Root log level (default INFO)
"""

import logging
import os

_settings_logger = logging.getLogger(__name__)


def _get_env(key: str, default: str = "") -> str:
    """Read a config value from the environment, treating blank values as unset."""
    value = os.getenv(key, "")
    return value.strip() or default


def _get_float(key: str, default: float) -> float:
    raw = _get_env(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _settings_logger.warning("Ignoring non-numeric %s=%r, using %s", key, raw, default)
        return default


def _get_int(key: str, default: int) -> int:
    raw = _get_env(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _settings_logger.warning("Ignoring non-integer %s=%r, using %s", key, raw, default)
        return default


# =============================================================================
# Version
# =============================================================================

VERSION = "1.4.0"
APP_NAME = "LORO CRM AI"

# =============================================================================
# Credentials
# =============================================================================

API_KEY_ENV_VARS = ("GOOGLE_AI_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY")


def get_api_key() -> str | None:
    """Return the first configured Gemini API key, or None."""
    for name in API_KEY_ENV_VARS:
        value = _get_env(name)
        if value:
            return value
    return None


# =============================================================================
# Models
# =============================================================================

DEFAULT_FALLBACK_MODELS = ("gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash")

MODEL_FALLBACK_ORDER: tuple[str, ...] = tuple(
    m.strip() for m in _get_env("AI_MODEL_FALLBACK_ORDER").split(",") if m.strip()
) or DEFAULT_FALLBACK_MODELS

# Per-model attempts on transient errors. 1 means each model is tried once
# and the next fallback model takes over on any failure.
RETRY_ATTEMPTS = max(1, _get_int("AI_RETRY_ATTEMPTS", 1))
RETRY_WAIT_MIN = _get_float("AI_RETRY_WAIT_MIN", 1.0)
RETRY_WAIT_MAX = _get_float("AI_RETRY_WAIT_MAX", 20.0)

# =============================================================================
# Logging / HTTP
# =============================================================================

LOG_LEVEL = _get_env("LOG_LEVEL", "INFO").upper()

API_HOST = _get_env("API_HOST", "0.0.0.0")
API_PORT = _get_int("API_PORT", 8000)


# =============================================================================
# Helper Functions
# =============================================================================

def validate_config() -> dict[str, bool]:
    """Validate configuration and return status dict."""
    status = {
        "api_key": get_api_key() is not None,
        "fallback_models": bool(MODEL_FALLBACK_ORDER),
    }
    status["all_ok"] = all(status.values())
    return status
