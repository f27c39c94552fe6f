"""
LLM output parsers for the LORO CRM AI service.

All parsers are total: malformed model output degrades to an empty list,
a default sentence or the caller's fallback value. Nothing here raises on
bad text.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from models.schemas import (
    AIInsightsResponse,
    AISuggestion,
    AISuggestionsResponse,
    BaseAIResponse,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

DEFAULT_SUMMARY = "Performance analysis completed."

INSIGHT_SECTIONS = ("SUMMARY", "INSIGHTS", "RECOMMENDATIONS", "QUICK_ACTIONS")
SUGGESTION_SECTIONS = ("SUGGESTIONS", "RECOMMENDATIONS")

_ITEM_SEPARATORS = re.compile(r"[•\-*]")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_KEY_VALUE_LINE = re.compile(r"^[-*]\s*(.+?):\s*(.+)$")


# =============================================================================
# Section parsing
# =============================================================================

def parse_structured_response(text: str, sections: list[str] | tuple[str, ...]) -> dict[str, list[str]]:
    """
    Split ``=== SECTION ===`` blocks into bullet items.

    A block runs from its header to the next ``===`` or the end of the text.
    Items are split on bullet, dash and asterisk characters. A section that
    is not present maps to an empty list.
    """
    text = text if isinstance(text, str) else ""
    result: dict[str, list[str]] = {}

    for section in sections:
        pattern = re.compile(rf"=== {re.escape(section)} ===([\s\S]*?)(?====|\Z)", re.IGNORECASE)
        match = pattern.search(text)
        if match:
            content = match.group(1).strip()
            items = [item.strip() for item in _ITEM_SEPARATORS.split(content)]
            result[section.lower()] = [item for item in items if item]
        else:
            result[section.lower()] = []

    return result


# =============================================================================
# JSON parsing
# =============================================================================

# Marks a failed parse; JSON `null` legitimately decodes to None
_UNPARSED = object()


def _try_parse_json(s: str) -> Any:
    try:
        return json.loads(s)
    except (json.JSONDecodeError, TypeError):
        return _UNPARSED


def parse_json_response(text: str, fallback: T) -> T | Any:
    """Parse JSON from a fenced block, then from the whole text, else return ``fallback``."""
    if isinstance(text, str):
        match = _FENCED_BLOCK.search(text)
        if match:
            parsed = _try_parse_json(match.group(1))
            if parsed is not _UNPARSED:
                return parsed

        parsed = _try_parse_json(text)
        if parsed is not _UNPARSED:
            return parsed

    sample = text[:200] if isinstance(text, str) else repr(text)
    logger.warning("Failed to parse JSON response, using fallback. Output sample: %s", sample)
    return fallback


def parse_model_response(text: str, model_cls: type[M], fallback: M) -> M:
    """Parse JSON and validate it into ``model_cls``; any failure returns ``fallback``."""
    parsed = parse_json_response(text, _UNPARSED)
    if not isinstance(parsed, dict):
        if parsed is not _UNPARSED:
            logger.warning("Expected a JSON object for %s, got %s", model_cls.__name__, type(parsed).__name__)
        return fallback
    try:
        return model_cls.model_validate(parsed)
    except ValidationError as e:
        logger.warning("Model output failed %s validation (%d errors), using fallback", model_cls.__name__, e.error_count())
        return fallback


# =============================================================================
# Typed response parsers
# =============================================================================

def parse_insights_response(text: str) -> AIInsightsResponse:
    sections = parse_structured_response(text, INSIGHT_SECTIONS)
    summary = sections["summary"]

    return AIInsightsResponse(
        insights=sections["insights"],
        summary=summary[0] if summary else DEFAULT_SUMMARY,
        recommendations=sections["recommendations"],
        quick_actions=sections["quick_actions"],
    )


def _parse_suggestion(index: int, item: str) -> AISuggestion:
    # title | description | priority | action | timing
    parts = [part.strip() for part in item.split("|")]

    def part(position: int) -> str | None:
        return parts[position] if position < len(parts) else None

    priority = part(2)
    return AISuggestion(
        id=index,
        title=parts[0] or item,
        description=part(1) or item,
        priority=priority.lower() if priority is not None else None,
        action=part(3),
        timing=part(4),
    )


def parse_suggestions_response(text: str) -> AISuggestionsResponse:
    """Parse a SUGGESTIONS (or RECOMMENDATIONS) section into suggestion records."""
    parsed = parse_structured_response(text, SUGGESTION_SECTIONS)
    items = parsed["suggestions"] or parsed["recommendations"]

    return AISuggestionsResponse(
        suggestions=[_parse_suggestion(index, item) for index, item in enumerate(items)],
    )


# =============================================================================
# Text utilities
# =============================================================================

def clean_response_text(text: str) -> str:
    """Strip code-fence markers and surrounding whitespace. Idempotent."""
    cleaned = text
    while True:
        stripped = cleaned.replace("```json", "").replace("```", "")
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned.strip()


def extract_key_value_pairs(text: str) -> dict[str, str]:
    """Collect ``- key: value`` / ``* key: value`` lines; keys become snake_case."""
    pairs: dict[str, str] = {}
    for line in text.split("\n"):
        match = _KEY_VALUE_LINE.match(line)
        if match:
            key = re.sub(r"\s+", "_", match.group(1).strip().lower())
            pairs[key] = match.group(2).strip()
    return pairs


# =============================================================================
# Response metadata
# =============================================================================

def format_response(data: Any, using_fallback: bool = False, data_hash: str | None = None) -> Any:
    """
    Stamp ``generatedAt`` (only if missing), ``usingFallback`` and optionally ``dataHash``.

    Accepts a plain dict (camelCase keys) or a ``BaseAIResponse`` model and
    returns a new object of the same kind.
    """
    if isinstance(data, BaseAIResponse):
        update: dict[str, Any] = {"using_fallback": using_fallback}
        if not data.generated_at:
            update["generated_at"] = utc_timestamp()
        if data_hash:
            update["data_hash"] = data_hash
        return data.model_copy(update=update)

    formatted = dict(data)
    formatted["generatedAt"] = formatted.get("generatedAt") or utc_timestamp()
    formatted["usingFallback"] = using_fallback
    if data_hash:
        formatted["dataHash"] = data_hash
    return formatted


def compute_data_hash(data: Any) -> str:
    """Short change-detection hash: first 16 hex chars of SHA-256 over sorted compact JSON."""
    payload = json.dumps(data, separators=(",", ":"), sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]
