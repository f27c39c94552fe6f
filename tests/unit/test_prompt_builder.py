"""
Tests for prompt assembly: section order, conditional sections, determinism.
"""

from __future__ import annotations

from core.prompt_builder import CRITICAL_REQUIREMENTS, build_prompt, to_pretty_json
from models.schemas import (
    LeadData,
    OutputFormat,
    PromptConfig,
    PromptLimits,
    ToneConfiguration,
)


CRITICAL_BLOCK = "\nCRITICAL REQUIREMENTS:\n" + "\n".join(CRITICAL_REQUIREMENTS) + "\n"


def test_minimal_prompt_exact_text():
    """Role and mission only: header, mission, then the fixed requirements."""
    prompt = build_prompt(PromptConfig(role="a helpful assistant", mission="Write a greeting"))
    assert prompt == (
        "You are a helpful assistant.\n\n"
        "MISSION: Write a greeting\n\n"
        + CRITICAL_BLOCK
    )


def test_prompt_always_ends_with_critical_requirements():
    prompt = build_prompt(PromptConfig(
        role="r", mission="m", tone=ToneConfiguration(base_tone="friendly"),
    ))
    assert prompt.endswith(CRITICAL_BLOCK)
    assert prompt.count("CRITICAL REQUIREMENTS:") == 1


def test_sections_appear_in_fixed_order():
    prompt = build_prompt(PromptConfig(
        role="an analyst",
        mission="Analyze",
        context={"a": 1},
        instructions=["First", "Second"],
        output_format=OutputFormat(type="text"),
        limits=PromptLimits(max_words=100),
        tone=ToneConfiguration(base_tone="consultative"),
    ))
    markers = [
        "You are an analyst.",
        "MISSION: Analyze",
        "=== CONTEXT ===",
        "=== INSTRUCTIONS ===",
        "=== OUTPUT REQUIREMENTS ===",
        "Keep response under 100 words.",
        "=== TONE & STYLE ===",
        "CRITICAL REQUIREMENTS:",
    ]
    positions = [prompt.index(marker) for marker in markers]
    assert positions == sorted(positions)


def test_instructions_are_numbered_from_one():
    prompt = build_prompt(PromptConfig(role="r", mission="m", instructions=["Do A", "Do B", "Do C"]))
    assert "=== INSTRUCTIONS ===\n1. Do A\n2. Do B\n3. Do C\n\n" in prompt


def test_empty_instructions_omit_section():
    prompt = build_prompt(PromptConfig(role="r", mission="m", instructions=[]))
    assert "INSTRUCTIONS" not in prompt


def test_context_rendered_as_indented_json():
    prompt = build_prompt(PromptConfig(role="r", mission="m", context={"leadName": "Thabo", "score": 42}))
    assert '=== CONTEXT ===\n{\n  "leadName": "Thabo",\n  "score": 42\n}\n\n' in prompt


def test_context_records_dumped_by_alias():
    text = to_pretty_json({"lead": LeadData(name="Thabo", company_name="Acme")})
    assert '"companyName": "Acme"' in text
    assert "null" not in text


def test_json_output_includes_schema():
    prompt = build_prompt(PromptConfig(
        role="r",
        mission="m",
        output_format=OutputFormat(type="json", schema={"subject": "string"}),
    ))
    assert "Return a JSON object with these exact keys:\n{\n  \"subject\": \"string\"\n}\n\n" in prompt


def test_structured_output_lists_section_headers():
    prompt = build_prompt(PromptConfig(
        role="r",
        mission="m",
        output_format=OutputFormat(type="structured", sections=["SUMMARY", "INSIGHTS"]),
    ))
    assert "Use these exact section headers:\n" in prompt
    assert "=== SUMMARY ===\n[Content for SUMMARY]\n\n" in prompt
    assert "=== INSIGHTS ===\n[Content for INSIGHTS]\n\n" in prompt


def test_json_without_schema_falls_back_to_format_line():
    prompt = build_prompt(PromptConfig(role="r", mission="m", output_format=OutputFormat(type="json")))
    assert "=== OUTPUT REQUIREMENTS ===\nFormat: json\n\n" in prompt


def test_limits_lines():
    prompt = build_prompt(PromptConfig(
        role="r",
        mission="m",
        limits=PromptLimits(max_words=150, max_characters=900, max_items=5),
    ))
    assert "Keep response under 150 words.\n" in prompt
    assert "Keep response under 900 characters.\n" in prompt
    assert "Provide maximum 5 items.\n" in prompt


def test_tone_lines_only_for_set_fields():
    prompt = build_prompt(PromptConfig(
        role="r",
        mission="m",
        tone=ToneConfiguration(base_tone="empathetic", regional_adaptation="south_african"),
    ))
    assert "\n=== TONE & STYLE ===\nBase Tone: empathetic\nRegional: south_african\n" in prompt
    assert "Intensity:" not in prompt


def test_build_prompt_is_deterministic():
    config = PromptConfig(
        role="r",
        mission="m",
        context={"b": [1, 2], "a": {"nested": True}},
        instructions=["x"],
        output_format=OutputFormat(type="structured", sections=["A"]),
    )
    assert build_prompt(config) == build_prompt(config)


def test_camel_case_config_accepted():
    config = PromptConfig.model_validate({
        "role": "r",
        "mission": "m",
        "outputFormat": {"type": "json", "schema": {"k": "v"}},
        "limits": {"maxItems": 3},
    })
    prompt = build_prompt(config)
    assert "Provide maximum 3 items." in prompt
    assert '"k": "v"' in prompt
