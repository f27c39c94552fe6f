"""
Static fallback content served when the AI service is unconfigured or fails.

Every payload built here is marked ``usingFallback`` by the routes so the
dashboard can label it as non-AI content.
"""

from __future__ import annotations

from core.errors import user_message_for
from models.schemas import (
    AIContentResponse,
    AIErrorType,
    ChurnRisk,
    ClientHealthResponse,
    CommunicationChannel,
    CommunicationPlan,
    CommunicationStrategyResponse,
    EmailDraftRequest,
    InsightRequest,
    InsightsPayload,
    LeadData,
    LeadSuggestion,
    NextActionPayload,
    PatternAnalysisResponse,
    PersonalizationGuide,
    UrgencyLevel,
)

# =============================================================================
# Insights
# =============================================================================

FALLBACK_SUMMARY = (
    "Based on your current performance, you're making solid progress toward your targets. "
    "Focus on consistent daily activities and strategic follow-ups to maintain momentum."
)

FALLBACK_INSIGHTS = [
    "Focus on your highest-value targets this week to maximize impact.",
    "Schedule follow-ups with warm leads within the next 2 business days.",
    "Review your pipeline for conversion opportunities and potential bottlenecks.",
    "Set aside time daily for prospecting new leads in your target market.",
    "Analyze successful closed deals to replicate winning strategies.",
    "Prioritize relationship-building activities to strengthen your network.",
]

FALLBACK_RECOMMENDATIONS = [
    "Block calendar time for high-priority prospecting activities",
    "Create a standardized follow-up sequence for new leads",
    "Set weekly goals that align with monthly targets",
    "Schedule regular pipeline reviews to identify opportunities",
]

FALLBACK_QUICK_ACTIONS = [
    "Call your top 3 warm leads today",
    "Send follow-up emails to recent inquiries",
    "Update CRM with latest contact information",
    "Review and prioritize this week's activities",
]

ERROR_INSIGHTS = [
    "Review your current targets and focus on high-priority activities.",
    "Consider reaching out to recent leads for immediate opportunities.",
    "Analyze your sales pipeline for conversion opportunities.",
]

ERROR_RECOMMENDATIONS = [
    "Review your pipeline manually for immediate opportunities",
    "Follow up with recent leads and prospects",
    "Set clear daily and weekly activity goals",
]

ERROR_QUICK_ACTIONS = [
    "Contact warm leads from this week",
    "Update your CRM with recent activities",
    "Plan tomorrow's priority activities",
]


def fallback_insights(body: InsightRequest, urgency: UrgencyLevel) -> InsightsPayload:
    """Generic coaching content for when no API key is configured."""
    return InsightsPayload(
        insights=list(FALLBACK_INSIGHTS),
        summary=FALLBACK_SUMMARY,
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        quick_actions=list(FALLBACK_QUICK_ACTIONS),
        feasibility_analysis=list(FALLBACK_RECOMMENDATIONS),
        actionable_recommendations=list(FALLBACK_QUICK_ACTIONS),
        urgency_level=urgency,
        type=body.type,
        time_frame=body.time_frame,
    )


def error_insights(error_type: AIErrorType, body: InsightRequest) -> InsightsPayload:
    """Content for a failed generation; the first insight explains the failure."""
    if error_type == AIErrorType.MODEL_UNAVAILABLE:
        summary = (
            "AI insights are temporarily unavailable, but your performance data shows "
            "continued progress. Focus on core activities."
        )
    else:
        summary = "Focus on your core activities and maintain consistent effort toward your goals."

    return InsightsPayload(
        insights=[user_message_for(error_type), *ERROR_INSIGHTS],
        summary=summary,
        recommendations=list(ERROR_RECOMMENDATIONS),
        quick_actions=list(ERROR_QUICK_ACTIONS),
        feasibility_analysis=list(ERROR_RECOMMENDATIONS),
        actionable_recommendations=list(ERROR_QUICK_ACTIONS),
        urgency_level="medium",
        type=body.type,
        time_frame=body.time_frame,
    )


# =============================================================================
# Lead next actions
# =============================================================================

FALLBACK_NEXT_ACTIONS = [
    {
        "title": "Send follow-up email",
        "description": "Follow up on previous interaction with additional value",
        "priority": "medium",
        "action": "email",
        "timing": "Within 24-48 hours",
    },
    {
        "title": "Schedule discovery call",
        "description": "Schedule a call to understand their needs better",
        "priority": "high",
        "action": "call",
        "timing": "This week",
    },
    {
        "title": "Share relevant content",
        "description": "Send case study or product information",
        "priority": "low",
        "action": "content",
        "timing": "Within 3-5 days",
    },
]


def fallback_next_actions(lead: LeadData) -> NextActionPayload:
    return NextActionPayload(
        suggestions=[
            LeadSuggestion(id=index + 1, lead_id=lead.uid, lead_name=lead.name, **action)
            for index, action in enumerate(FALLBACK_NEXT_ACTIONS)
        ]
    )


# =============================================================================
# Attendance patterns
# =============================================================================

def fallback_patterns() -> PatternAnalysisResponse:
    return PatternAnalysisResponse()


# =============================================================================
# Clients
# =============================================================================

def fallback_communication_strategy() -> CommunicationStrategyResponse:
    return CommunicationStrategyResponse(
        strategy=CommunicationPlan(
            approach="Consultative and value-focused",
            frequency="Regular check-ins",
            channels=[
                CommunicationChannel(
                    channel="Email",
                    purpose="Updates and information",
                    frequency="Weekly",
                    best_time="Business hours",
                ),
            ],
            tone="Professional and friendly",
            key_messages=["Value delivery", "Relationship building"],
        ),
        personalization=PersonalizationGuide(style="Professional"),
        cadence=[],
        best_practices=["Maintain regular communication", "Provide value in each touchpoint"],
    )


def fallback_client_health() -> ClientHealthResponse:
    return ClientHealthResponse(
        analysis="Client shows moderate engagement with no strong churn signals.",
        score=70,
        factors=["Overall Engagement: client shows moderate engagement"],
        status="healthy",
        churn_risk=ChurnRisk(
            level="low",
            probability=20,
            reasons=["Regular interactions", "Satisfactory engagement"],
        ),
        recommendations=["Maintain regular communication"],
        action_plan=["Continue current engagement strategy"],
    )


# =============================================================================
# Email
# =============================================================================

def fallback_email(body: EmailDraftRequest) -> AIContentResponse:
    """Plain follow-up addressed to the lead (or recipient) by name."""
    name = body.lead_data.name if body.lead_data else body.recipient_name
    company = (body.lead_data.company_name if body.lead_data else None) or "your organization"
    content = (
        f"Dear {name},\n\n"
        f"I hope this message finds you well. I wanted to reach out to see how things are going at "
        f"{company} and explore how we might be able to support your business objectives.\n\n"
        "Would you be open to a brief conversation about your current priorities? "
        "I can work around your schedule for a call or meeting.\n\n"
        "Looking forward to hearing from you.\n\n"
        "Best regards"
    )
    return AIContentResponse(
        subject=f"Following up with {name}",
        content=content,
        alternatives=["Quick follow-up", "Next steps discussion"],
    )
