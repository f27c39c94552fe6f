"""
Context builders: turn CRM records into prompt-context text blocks.

Every builder is total: ``None`` (or an empty list) yields ``""``, and
optional lines only appear when their source fields are set.
"""

from __future__ import annotations

import json
from typing import Any

from models.schemas import (
    ClientData,
    LeadData,
    PersonalizationContext,
    SouthAfricanContext,
    TargetData,
)
from core.prompt_builder import to_pretty_json

NOT_SPECIFIED = "Not specified"

INDUSTRY_CONTEXTS = {
    "MINING": (
        "MINING INDUSTRY CONTEXT:\n"
        "- Consider safety and regulatory compliance priorities\n"
        "- Reference commodity price volatility impacts\n"
        "- Emphasize operational efficiency and cost reduction\n"
    ),
    "FINANCE": (
        "FINANCE INDUSTRY CONTEXT:\n"
        "- Reference regulatory compliance requirements (SARB, FSCA)\n"
        "- Consider digital transformation and fintech disruption\n"
        "- Emphasize security and risk management\n"
    ),
    "RETAIL": (
        "RETAIL INDUSTRY CONTEXT:\n"
        "- Consider consumer spending patterns and economic pressures\n"
        "- Reference omnichannel retail trends\n"
        "- Emphasize inventory management and supply chain efficiency\n"
    ),
    "AGRICULTURE": (
        "AGRICULTURE INDUSTRY CONTEXT:\n"
        "- Consider weather patterns and climate impact\n"
        "- Reference land reform and transformation\n"
        "- Emphasize sustainability and water conservation\n"
    ),
}

BUSINESS_SIZE_CONTEXTS = {
    "STARTUP": (
        "STARTUP CONSIDERATIONS:\n"
        "- Limited budget and cash flow constraints\n"
        "- Focus on growth and scaling challenges\n"
        "- Emphasize quick wins and ROI\n"
    ),
    "SMALL": (
        "SMALL BUSINESS CONSIDERATIONS:\n"
        "- Resource constraints and efficiency needs\n"
        "- Focus on practical, implementable solutions\n"
        "- Emphasize cost-effectiveness and clear ROI\n"
    ),
    "ENTERPRISE": (
        "ENTERPRISE CONSIDERATIONS:\n"
        "- Complex procurement processes and compliance requirements\n"
        "- Multiple stakeholders and decision makers\n"
        "- Focus on strategic value and competitive advantage\n"
    ),
}


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def build_lead_intelligence_context(lead: LeadData | None) -> str:
    """Prospect profile, qualification, history and notes for a lead."""
    if lead is None:
        return ""

    context = "\n=== LEAD INTELLIGENCE CONTEXT ===\n"
    context += (
        "PROSPECT PROFILE:\n"
        f"- Name: {lead.name}\n"
        f"- Company: {lead.company_name or NOT_SPECIFIED}\n"
        f"- Role: {lead.job_title or NOT_SPECIFIED}\n"
        f"- Industry: {lead.industry or NOT_SPECIFIED}\n"
        f"- Company Size: {lead.business_size or NOT_SPECIFIED}\n"
        f"- Status: {lead.status or 'Unknown'}\n"
        f"- Source: {lead.source or 'Unknown'}\n"
    )

    if lead.temperature or lead.priority or lead.lead_score:
        context += (
            "\nLEAD QUALIFICATION:\n"
            f"- Temperature: {lead.temperature or 'COLD'}\n"
            f"- Priority: {lead.priority or 'MEDIUM'}\n"
            f"- Lead Score: {lead.lead_score or 0}/100\n"
        )

    if lead.last_contact:
        context += (
            "\nCOMMUNICATION HISTORY:\n"
            f"- Last Contact: {lead.last_contact}\n"
            f"- Total Interactions: {lead.score or 0}\n"
        )

    if lead.notes:
        context += f"\nNOTES: {lead.notes}\n"

    return context


def build_client_context(client: ClientData | None) -> str:
    if client is None:
        return ""

    context = "\n=== CLIENT CONTEXT ===\n"
    context += (
        "CLIENT PROFILE:\n"
        f"- Name: {client.name}\n"
        f"- Company: {client.company_name or NOT_SPECIFIED}\n"
        f"- Industry: {client.industry or NOT_SPECIFIED}\n"
        f"- Business Size: {client.business_size or NOT_SPECIFIED}\n"
        f"- Status: {client.status or 'Active'}\n"
    )

    if client.total_value:
        context += f"- Total Value: R{_format_number(client.total_value)}\n"

    if client.last_purchase_date:
        context += f"- Last Purchase: {client.last_purchase_date}\n"

    return context


def build_south_african_context(config: SouthAfricanContext | None) -> str:
    """Local market framing plus industry and company-size guidance when known."""
    if config is None:
        return ""

    context = "\n=== SOUTH AFRICAN BUSINESS CONTEXT ===\n"
    context += (
        "ECONOMIC CONSIDERATIONS:\n"
        "- Consider load shedding impacts on business operations\n"
        "- Reference local economic conditions and market dynamics\n"
        "- Use South African business terminology and cultural references\n"
        "- Consider Ubuntu philosophy in relationship building\n"
    )

    if config.industry and config.industry in INDUSTRY_CONTEXTS:
        context += f"\n{INDUSTRY_CONTEXTS[config.industry]}\n"

    if config.business_size and config.business_size in BUSINESS_SIZE_CONTEXTS:
        context += f"\n{BUSINESS_SIZE_CONTEXTS[config.business_size]}\n"

    return context


def build_personalization_context(personalization: PersonalizationContext | None) -> str:
    if personalization is None:
        return ""

    context = "\n=== PERSONALIZATION CONTEXT ===\n"
    if personalization.recipient_name:
        context += f"RECIPIENT: {personalization.recipient_name}\n"
    if personalization.company_name:
        context += f"COMPANY: {personalization.company_name}\n"
    if personalization.industry:
        context += f"INDUSTRY: {personalization.industry}\n"
    if personalization.role:
        context += f"ROLE: {personalization.role}\n"
    if personalization.preferences is not None:
        preferences = json.dumps(personalization.preferences, separators=(",", ":"), ensure_ascii=False)
        context += f"PREFERENCES: {preferences}\n"

    return context


def build_target_context(targets: list[TargetData] | None) -> str:
    if not targets:
        return ""

    context = "\n=== TARGET & PERFORMANCE CONTEXT ===\n"
    for target in targets:
        context += (
            f"{target.category.upper()}:\n"
            f"- Current: {_plain_number(target.current_value)}\n"
            f"- Target: {_plain_number(target.target_value)}\n"
            f"- Progress: {_plain_number(target.progress)}%\n"
            f"- Period: {target.period}\n\n"
        )

    return context


def build_comprehensive_context(
    lead: LeadData | None = None,
    client: ClientData | None = None,
    targets: list[TargetData] | None = None,
    south_african_context: SouthAfricanContext | None = None,
    personalization: PersonalizationContext | None = None,
    custom_context: dict[str, Any] | None = None,
) -> str:
    """Concatenate whichever context blocks have input, in a fixed order."""
    context = ""
    context += build_lead_intelligence_context(lead)
    context += build_client_context(client)
    context += build_target_context(targets)
    context += build_south_african_context(south_african_context)
    context += build_personalization_context(personalization)

    if custom_context is not None:
        context += "\n=== ADDITIONAL CONTEXT ===\n"
        context += to_pretty_json(custom_context)
        context += "\n"

    return context
