"""
Tests for the CRM context builders.
"""

from __future__ import annotations

from core.context_builder import (
    build_client_context,
    build_comprehensive_context,
    build_lead_intelligence_context,
    build_personalization_context,
    build_south_african_context,
    build_target_context,
)
from models.schemas import (
    ClientData,
    LeadData,
    PersonalizationContext,
    SouthAfricanContext,
    TargetData,
)


# -----------------------------------------------------------------------------
# Empty inputs
# -----------------------------------------------------------------------------


def test_all_builders_return_empty_for_none():
    assert build_lead_intelligence_context(None) == ""
    assert build_client_context(None) == ""
    assert build_south_african_context(None) == ""
    assert build_personalization_context(None) == ""
    assert build_target_context(None) == ""
    assert build_target_context([]) == ""
    assert build_comprehensive_context() == ""


# -----------------------------------------------------------------------------
# Lead
# -----------------------------------------------------------------------------


def test_lead_profile_defaults():
    context = build_lead_intelligence_context(LeadData(name="Thabo"))
    assert "=== LEAD INTELLIGENCE CONTEXT ===" in context
    assert "- Name: Thabo\n" in context
    assert "- Company: Not specified\n" in context
    assert "- Status: Unknown\n" in context
    assert "- Source: Unknown\n" in context
    assert "LEAD QUALIFICATION" not in context
    assert "COMMUNICATION HISTORY" not in context
    assert "NOTES" not in context


def test_lead_qualification_block_when_any_field_set():
    context = build_lead_intelligence_context(LeadData(name="Thabo", temperature="HOT"))
    assert "LEAD QUALIFICATION:\n- Temperature: HOT\n- Priority: MEDIUM\n- Lead Score: 0/100\n" in context


def test_lead_history_and_notes():
    context = build_lead_intelligence_context(LeadData(
        name="Thabo", last_contact="2024-05-02", score=7, notes="Prefers email",
    ))
    assert "- Last Contact: 2024-05-02\n- Total Interactions: 7\n" in context
    assert "NOTES: Prefers email\n" in context


def test_lead_accepts_camel_case_payload():
    lead = LeadData.model_validate({"name": "Thabo", "companyName": "Acme Mining", "leadScore": 80})
    context = build_lead_intelligence_context(lead)
    assert "- Company: Acme Mining\n" in context
    assert "- Lead Score: 80/100\n" in context


# -----------------------------------------------------------------------------
# Client
# -----------------------------------------------------------------------------


def test_client_context_formats_value_and_defaults_status():
    context = build_client_context(ClientData(name="Acme", total_value=1250000, last_purchase_date="2024-03-01"))
    assert "- Status: Active\n" in context
    assert "- Total Value: R1,250,000\n" in context
    assert "- Last Purchase: 2024-03-01\n" in context


def test_client_context_omits_missing_value():
    context = build_client_context(ClientData(name="Acme"))
    assert "Total Value" not in context
    assert "Last Purchase" not in context


# -----------------------------------------------------------------------------
# South African / personalization / targets
# -----------------------------------------------------------------------------


def test_south_african_context_with_known_industry_and_size():
    context = build_south_african_context(SouthAfricanContext(industry="MINING", business_size="STARTUP"))
    assert "ECONOMIC CONSIDERATIONS:" in context
    assert "MINING INDUSTRY CONTEXT:" in context
    assert "STARTUP CONSIDERATIONS:" in context


def test_south_african_context_ignores_unknown_industry():
    context = build_south_african_context(SouthAfricanContext(industry="TOURISM"))
    assert "ECONOMIC CONSIDERATIONS:" in context
    assert "INDUSTRY CONTEXT" not in context


def test_personalization_lines_and_compact_preferences():
    context = build_personalization_context(PersonalizationContext(
        recipient_name="Naledi", role="CFO", preferences={"channel": "email"},
    ))
    assert "RECIPIENT: Naledi\n" in context
    assert "ROLE: CFO\n" in context
    assert 'PREFERENCES: {"channel":"email"}\n' in context
    assert "COMPANY:" not in context


def test_target_context_lines():
    context = build_target_context([
        TargetData(category="sales", current_value=45000, target_value=100000, progress=45, period="monthly"),
    ])
    assert "SALES:\n- Current: 45000\n- Target: 100000\n- Progress: 45%\n- Period: monthly\n" in context


def test_target_values_coerced_from_strings():
    target = TargetData.model_validate({"category": "leads", "currentValue": "12.5", "targetValue": "abc"})
    assert target.current_value == 12.5
    assert target.target_value == 0.0


# -----------------------------------------------------------------------------
# Comprehensive
# -----------------------------------------------------------------------------


def test_comprehensive_context_order():
    context = build_comprehensive_context(
        lead=LeadData(name="Thabo"),
        client=ClientData(name="Acme"),
        targets=[TargetData(category="sales", progress=10)],
        south_african_context=SouthAfricanContext(),
        personalization=PersonalizationContext(recipient_name="Naledi"),
        custom_context={"campaign": "Q3"},
    )
    headers = [
        "=== LEAD INTELLIGENCE CONTEXT ===",
        "=== CLIENT CONTEXT ===",
        "=== TARGET & PERFORMANCE CONTEXT ===",
        "=== SOUTH AFRICAN BUSINESS CONTEXT ===",
        "=== PERSONALIZATION CONTEXT ===",
        "=== ADDITIONAL CONTEXT ===",
    ]
    positions = [context.index(header) for header in headers]
    assert positions == sorted(positions)
    assert '"campaign": "Q3"' in context


def test_comprehensive_context_skips_missing_parts():
    context = build_comprehensive_context(client=ClientData(name="Acme"))
    assert context == build_client_context(ClientData(name="Acme"))
