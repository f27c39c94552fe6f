"""
Prompt assembly from a ``PromptConfig``.

Sections are emitted in a fixed order and only when the corresponding field
is set, so the same config always produces the same prompt text.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from models.schemas import PromptConfig

CRITICAL_REQUIREMENTS = (
    "- Be specific, actionable, and relevant",
    "- Use natural, conversational language",
    "- Focus on practical value and results",
    "- Consider South African business context where relevant",
)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True, exclude_none=True)
    return str(obj)


def to_pretty_json(value: Any) -> str:
    """Indented JSON for prompt context; pydantic records are dumped by alias."""
    return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)


def build_prompt(config: PromptConfig) -> str:
    """Build the full prompt text for a generation request."""
    prompt = f"You are {config.role}.\n\n"
    prompt += f"MISSION: {config.mission}\n\n"

    if config.context is not None:
        prompt += f"=== CONTEXT ===\n{to_pretty_json(config.context)}\n\n"

    if config.instructions:
        prompt += "=== INSTRUCTIONS ===\n"
        for index, instruction in enumerate(config.instructions, start=1):
            prompt += f"{index}. {instruction}\n"
        prompt += "\n"

    output_format = config.output_format
    if output_format is not None:
        prompt += "=== OUTPUT REQUIREMENTS ===\n"
        if output_format.type == "json" and output_format.schema_ is not None:
            prompt += (
                "Return a JSON object with these exact keys:\n"
                f"{to_pretty_json(output_format.schema_)}\n\n"
            )
        elif output_format.type == "structured" and output_format.sections is not None:
            prompt += "Use these exact section headers:\n"
            for section in output_format.sections:
                prompt += f"=== {section} ===\n[Content for {section}]\n\n"
        else:
            prompt += f"Format: {output_format.type}\n\n"

    limits = config.limits
    if limits is not None:
        if limits.max_words:
            prompt += f"Keep response under {limits.max_words} words.\n"
        if limits.max_characters:
            prompt += f"Keep response under {limits.max_characters} characters.\n"
        if limits.max_items:
            prompt += f"Provide maximum {limits.max_items} items.\n"

    tone = config.tone
    if tone is not None:
        prompt += "\n=== TONE & STYLE ===\n"
        if tone.base_tone:
            prompt += f"Base Tone: {tone.base_tone}\n"
        if tone.intensity:
            prompt += f"Intensity: {tone.intensity}\n"
        if tone.regional_adaptation:
            prompt += f"Regional: {tone.regional_adaptation}\n"

    prompt += "\nCRITICAL REQUIREMENTS:\n"
    prompt += "\n".join(CRITICAL_REQUIREMENTS) + "\n"

    return prompt
