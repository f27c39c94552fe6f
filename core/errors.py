"""
Error taxonomy and classification for AI generation failures.

Model-level failures are recovered by the fallback loop in ``AIService``;
whatever escapes it is translated here into a structured ``AIErrorResponse``.
"""

from __future__ import annotations

import logging
from typing import Any

from models.schemas import AIErrorResponse, AIErrorType

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to generate AI response"


class AIServiceError(Exception):
    """Base class for errors raised by the AI service itself."""


class ConfigurationError(AIServiceError):
    """The backend client was never constructed (no API key at startup)."""


# Checked in order; first match wins. Matching is case-sensitive.
_ERROR_RULES: tuple[tuple[AIErrorType, int, tuple[str, ...]], ...] = (
    (AIErrorType.API_KEY, 401, ("API key", "GOOGLE_AI_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY")),
    (AIErrorType.MODEL_UNAVAILABLE, 503, ("not found", "not supported")),
    (AIErrorType.RATE_LIMIT, 429, ("quota", "rate limit")),
    (AIErrorType.NETWORK, 503, ("network", "fetch")),
)

_USER_MESSAGES = {
    AIErrorType.API_KEY: "AI insights require a valid API key to function. Please contact your administrator.",
    AIErrorType.MODEL_UNAVAILABLE: "AI model is temporarily unavailable. Using fallback insights based on your data.",
    AIErrorType.RATE_LIMIT: "AI service usage limit reached. Please try again in a few minutes.",
    AIErrorType.NETWORK: "Network connectivity issue. Please check your connection and try again.",
    AIErrorType.GENERAL: "Unable to generate AI insights at this time. Please try again later.",
}


def error_message(error: Any) -> str:
    """Best-effort message text for any raised object."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)


def classify_error(error: Any, fallback: Any | None = None) -> AIErrorResponse:
    """Map an exception to an error category and suggested HTTP status. Never raises."""
    message = error_message(error)
    error_type, status_code = AIErrorType.GENERAL, 500

    for candidate_type, candidate_status, needles in _ERROR_RULES:
        if any(needle in message for needle in needles):
            error_type, status_code = candidate_type, candidate_status
            break

    logger.debug("Classified AI error as %s (%d): %s", error_type.value, status_code, message)
    return AIErrorResponse(
        error=GENERIC_ERROR,
        error_type=error_type,
        message=message,
        fallback=fallback,
        status_code=status_code,
    )


def user_message_for(error_type: AIErrorType) -> str:
    """Sentence shown to the user when AI output is replaced by fallback content."""
    return _USER_MESSAGES.get(error_type, _USER_MESSAGES[AIErrorType.GENERAL])
