"""
HTTP routes for the LORO CRM AI service.

Every AI route follows the same shape:
1. Unconfigured service -> fallback payload (HTTP 200, usingFallback=true)
2. Build prompt (+ context blocks) -> generate with model fallback -> parse
3. Any failure -> classified error with the fallback payload attached
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.fallbacks import (
    error_insights,
    fallback_client_health,
    fallback_communication_strategy,
    fallback_email,
    fallback_insights,
    fallback_next_actions,
    fallback_patterns,
)
from config.settings import VERSION
from core.ai_service import AIService
from core.context_builder import (
    build_client_context,
    build_comprehensive_context,
    build_lead_intelligence_context,
    build_personalization_context,
    build_south_african_context,
    build_target_context,
)
from core.parsers import (
    INSIGHT_SECTIONS,
    compute_data_hash,
    format_response,
    parse_insights_response,
    parse_model_response,
    parse_suggestions_response,
)
from models.schemas import (
    AIContentResponse,
    AIErrorResponse,
    BaseAIResponse,
    ClientHealthResponse,
    CommunicationStrategyRequest,
    CommunicationStrategyResponse,
    EmailDraftRequest,
    GenerationOptions,
    HealthAnalysisRequest,
    InsightRequest,
    InsightsPayload,
    LeadSuggestion,
    NextActionPayload,
    NextActionRequest,
    OutputFormat,
    PatternAnalysisRequest,
    PatternAnalysisResponse,
    PersonalizationContext,
    PromptConfig,
    PromptLimits,
    SouthAfricanContext,
    TargetData,
    ToneConfiguration,
    UrgencyLevel,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_INSIGHTS = 6
MAX_RECOMMENDATIONS = 4
# Items are split on bullet, dash and asterisk characters, so none may appear inside an item
NO_INLINE_SEPARATORS = (
    "Do not use hyphens, dashes or asterisks inside an item; write ranges as \"24 to 48 hours\""
)
SUGGESTION_FORMAT = (
    "\n\nFormat each suggestion on its own bullet as:\n"
    "• [title] | [description] | [high/medium/low] | [action type] | [timing]\n"
    f"{NO_INLINE_SEPARATORS}."
)


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


# =============================================================================
# Helpers
# =============================================================================

def determine_urgency_level(targets: list[TargetData]) -> UrgencyLevel:
    """Urgency from average target progress; stalled sales/clients targets are critical."""
    if not targets:
        return "medium"

    overall_progress = sum(t.progress for t in targets) / len(targets)
    stalled = [t for t in targets if t.category in ("sales", "clients") and t.progress == 0]

    if len(stalled) > 1 or overall_progress < 10:
        return "critical"
    if overall_progress < 30:
        return "high"
    if overall_progress < 60:
        return "medium"
    return "low"


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _request_hash(body: Any) -> str:
    """Client-supplied hash, else one computed from the request payload."""
    if body.data_hash:
        return body.data_hash
    return compute_data_hash(body.model_dump(mode="json", by_alias=True, exclude={"data_hash"}))


def _error_response(title: str, err: AIErrorResponse, payload: BaseAIResponse) -> JSONResponse:
    content = {
        "error": title,
        "errorType": err.error_type.value,
        **payload.model_dump(mode="json", by_alias=True),
    }
    return JSONResponse(status_code=err.status_code, content=content)


# =============================================================================
# Service routes
# =============================================================================

@router.get("/health")
def health(service: AIService = Depends(get_ai_service)) -> dict[str, Any]:
    return {"status": "ok", "configured": service.is_configured(), "version": VERSION}


@router.get("/api/ai/usage")
def usage(service: AIService = Depends(get_ai_service)) -> dict[str, Any]:
    return service.tracer.usage_summary()


# =============================================================================
# Insights
# =============================================================================

@router.post("/api/ai/insights", response_model=InsightsPayload)
async def generate_insights(body: InsightRequest, service: AIService = Depends(get_ai_service)):
    urgency = determine_urgency_level(body.target_data)
    data_hash = _request_hash(body)

    if not service.is_configured():
        logger.warning("Google AI API key not configured, using fallback insights")
        return format_response(fallback_insights(body, urgency), using_fallback=True, data_hash=data_hash)

    try:
        profile = body.profile_data
        user = f"{profile.name} {profile.surname}".strip() if profile else "the user"
        prompt = service.build_prompt(PromptConfig(
            role=(
                "an AI Sales Coach and CRM Assistant with expertise in sales performance, "
                "lead management, and business development"
            ),
            mission=f"Review {user}'s {body.time_frame} performance and recommend focused next steps",
            context=_compact({
                "timeFrame": body.time_frame,
                "analysisType": body.type,
                "currentDate": body.current_date,
                "profile": profile,
                "attendance": body.attendance_data,
                "leads": body.leads_data,
            }),
            instructions=[
                "SUMMARY: a 2-3 sentence overview of current performance and key focus areas",
                "INSIGHTS: 4-6 specific, actionable insights about performance, opportunities, and strategies",
                "RECOMMENDATIONS: 3-4 strategic recommendations for improvement",
                "QUICK_ACTIONS: 3-4 immediate actions to take today or this week",
                "Start every item with a bullet (•) and keep it to 2-4 sentences",
                NO_INLINE_SEPARATORS,
                "Focus on sales performance, lead conversion, and CRM effectiveness",
            ],
            output_format=OutputFormat(type="structured", sections=list(INSIGHT_SECTIONS)),
            limits=PromptLimits(max_items=MAX_INSIGHTS),
        ))
        full_prompt = build_target_context(body.target_data) + "\n" + prompt

        result = await service.generate_content(full_prompt, GenerationOptions(max_output_tokens=1536))
        logger.info("Generated insights with %s", result.model_used)

        parsed = parse_insights_response(result.text)
        recommendations = parsed.recommendations[:MAX_RECOMMENDATIONS]
        quick_actions = parsed.quick_actions[:MAX_RECOMMENDATIONS]
        payload = InsightsPayload(
            insights=parsed.insights[:MAX_INSIGHTS],
            summary=parsed.summary,
            recommendations=recommendations,
            quick_actions=quick_actions,
            feasibility_analysis=recommendations,
            actionable_recommendations=quick_actions,
            urgency_level=urgency,
            type=body.type,
            time_frame=body.time_frame,
        )
        return format_response(payload, data_hash=data_hash)

    except Exception as e:
        logger.error("Error generating insights: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(error_insights(err.error_type, body), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to generate insights", err, fallback)


# =============================================================================
# Lead next actions
# =============================================================================

@router.post("/api/ai/leads/next-action", response_model=NextActionPayload)
async def suggest_next_actions(body: NextActionRequest, service: AIService = Depends(get_ai_service)):
    lead = body.lead_data
    data_hash = _request_hash(body)

    if not service.is_configured():
        return format_response(fallback_next_actions(lead), using_fallback=True, data_hash=data_hash)

    try:
        lead_context = build_lead_intelligence_context(lead)
        locale_context = build_south_african_context(
            SouthAfricanContext(industry=lead.industry, business_size=lead.business_size)
        )
        prompt = service.build_prompt(PromptConfig(
            role="an AI Sales Strategy Advisor specializing in lead nurturing and conversion",
            mission="Recommend the best next action to move the lead forward in the sales process",
            context=_compact({
                "leadData": lead,
                "currentStatus": body.current_status,
                "lastAction": body.last_action,
                "availableActions": body.available_actions,
                "urgency": body.urgency or "medium",
            }),
            instructions=[
                "Analyze the lead's current status and history",
                "Consider the urgency level and lead temperature",
                "Recommend 3-5 specific next actions",
                "Prioritize actions based on likelihood of conversion",
                "Include timing recommendations for each action",
            ],
            output_format=OutputFormat(type="structured", sections=["SUGGESTIONS"]),
            limits=PromptLimits(max_items=5),
        ))
        full_prompt = lead_context + "\n" + locale_context + "\n" + prompt + SUGGESTION_FORMAT

        result = await service.generate_content(full_prompt, GenerationOptions(max_output_tokens=1024))
        parsed = parse_suggestions_response(result.text)

        suggestions = [
            LeadSuggestion(
                **suggestion.model_dump(exclude={"id"}),
                id=lead.uid * 100 + index if lead.uid is not None else suggestion.id,
                lead_id=lead.uid,
                lead_name=lead.name,
            )
            for index, suggestion in enumerate(parsed.suggestions)
        ]
        return format_response(NextActionPayload(suggestions=suggestions), data_hash=data_hash)

    except Exception as e:
        logger.error("Error generating next actions: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(fallback_next_actions(lead), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to generate next actions", err, fallback)


# =============================================================================
# Attendance patterns
# =============================================================================

PATTERN_SCHEMA = {
    "patterns": "array of {pattern, description, frequency, impact}",
    "trends": "array of {trend, direction, description}",
    "insights": "array of strings",
    "recommendations": "array of strings",
}


@router.post("/api/ai/attendance/pattern-analysis", response_model=PatternAnalysisResponse)
async def analyze_attendance_patterns(
    body: PatternAnalysisRequest, service: AIService = Depends(get_ai_service)
):
    data_hash = _request_hash(body)

    if not service.is_configured():
        return format_response(fallback_patterns(), using_fallback=True, data_hash=data_hash)

    try:
        prompt = service.build_prompt(PromptConfig(
            role="an AI Attendance Pattern Analyst",
            mission="Analyze attendance patterns and identify trends",
            context={
                "attendanceData": body.attendance_data,
                "staffData": body.staff_data or [],
            },
            instructions=[
                "Identify attendance patterns",
                "Detect trends",
                "Analyze individual patterns",
                "Provide insights",
                "Recommend improvements",
            ],
            output_format=OutputFormat(type="json", schema=PATTERN_SCHEMA),
        ))

        result = await service.generate_content(
            prompt, GenerationOptions(temperature=0.6, max_output_tokens=1536)
        )
        fallback = fallback_patterns()
        parsed = parse_model_response(result.text, PatternAnalysisResponse, fallback)
        return format_response(parsed, using_fallback=parsed is fallback, data_hash=data_hash)

    except Exception as e:
        logger.error("Error analyzing attendance patterns: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(fallback_patterns(), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to analyze attendance patterns", err, fallback)


# =============================================================================
# Clients
# =============================================================================

COMMUNICATION_SCHEMA = {
    "strategy": {
        "approach": "string",
        "frequency": "string",
        "channels": "array of {channel, purpose, frequency, bestTime}",
        "tone": "string",
        "keyMessages": "array of strings",
    },
    "personalization": {
        "preferences": "array of strings",
        "topics": "array of strings",
        "style": "string",
    },
    "cadence": "array of {touchpoint, timing, purpose, content}",
    "bestPractices": "array of strings",
}

CLIENT_TONE = ToneConfiguration(
    base_tone="consultative",
    intensity="moderate",
    regional_adaptation="south_african",
)


@router.post("/api/ai/clients/communication-strategy", response_model=CommunicationStrategyResponse)
async def plan_client_communication(
    body: CommunicationStrategyRequest, service: AIService = Depends(get_ai_service)
):
    client = body.client_data
    data_hash = _request_hash(body)

    if not service.is_configured():
        return format_response(fallback_communication_strategy(), using_fallback=True, data_hash=data_hash)

    try:
        client_context = build_client_context(client)
        locale_context = build_south_african_context(
            SouthAfricanContext(industry=client.industry, business_size=client.business_size)
        )
        personalization = build_personalization_context(PersonalizationContext(
            recipient_name=client.name,
            company_name=client.company_name,
            industry=client.industry,
        ))
        prompt = service.build_prompt(PromptConfig(
            role="an AI Communication Strategist specializing in client relationship management",
            mission="Develop personalized communication strategy for the client",
            context={
                "clientData": client,
                "communicationHistory": body.communication_history,
                "preferredChannels": body.preferred_channels,
                "communicationGoals": body.communication_goals,
            },
            instructions=[
                "Analyze client communication preferences and history",
                "Develop comprehensive communication strategy",
                "Define optimal channels, frequency, and timing",
                "Create personalized messaging approach",
                "Design communication cadence",
                "Provide best practices for engagement",
                "Consider South African business culture",
            ],
            output_format=OutputFormat(type="json", schema=COMMUNICATION_SCHEMA),
            tone=CLIENT_TONE,
        ))
        full_prompt = "\n".join([client_context, locale_context, personalization, prompt])

        result = await service.generate_content(full_prompt, GenerationOptions(max_output_tokens=2048))
        fallback = fallback_communication_strategy()
        parsed = parse_model_response(result.text, CommunicationStrategyResponse, fallback)
        return format_response(parsed, using_fallback=parsed is fallback, data_hash=data_hash)

    except Exception as e:
        logger.error("Error generating communication strategy: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(fallback_communication_strategy(), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to generate communication strategy", err, fallback)


HEALTH_SCHEMA = {
    "analysis": "string (2-3 sentence health narrative)",
    "score": "number (0-100 health score)",
    "factors": "array of strings (factor: impact and description)",
    "status": "string (healthy|at-risk|critical)",
    "churnRisk": {
        "level": "string (low|medium|high|critical)",
        "probability": "number (0-100)",
        "reasons": "array of strings",
    },
    "recommendations": "array of strings",
    "actionPlan": "array of strings",
}


@router.post("/api/ai/clients/health-analysis", response_model=ClientHealthResponse)
async def analyze_client_health(body: HealthAnalysisRequest, service: AIService = Depends(get_ai_service)):
    client = body.client_data
    data_hash = _request_hash(body)

    if not service.is_configured():
        return format_response(fallback_client_health(), using_fallback=True, data_hash=data_hash)

    try:
        client_context = build_client_context(client)
        locale_context = build_south_african_context(
            SouthAfricanContext(industry=client.industry, business_size=client.business_size)
        )
        prompt = service.build_prompt(PromptConfig(
            role="an AI Client Health Analyst specializing in customer success and retention",
            mission="Analyze client health and identify churn risks",
            context={
                "clientData": client,
                "metrics": body.metrics or {},
                "historicalData": body.historical_data,
            },
            instructions=[
                "Calculate overall health score (0-100)",
                "Determine health status (healthy/at-risk/critical)",
                "Analyze contributing factors",
                "Assess churn risk with probability",
                "Provide prioritized recommendations",
                "Create actionable improvement plan",
            ],
            output_format=OutputFormat(type="json", schema=HEALTH_SCHEMA),
        ))
        full_prompt = client_context + "\n" + locale_context + "\n" + prompt

        result = await service.generate_content(
            full_prompt, GenerationOptions(temperature=0.6, max_output_tokens=2048)
        )
        fallback = fallback_client_health()
        parsed = parse_model_response(result.text, ClientHealthResponse, fallback)
        return format_response(parsed, using_fallback=parsed is fallback, data_hash=data_hash)

    except Exception as e:
        logger.error("Error analyzing client health: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(fallback_client_health(), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to analyze client health", err, fallback)


# =============================================================================
# Email drafting
# =============================================================================

EMAIL_SCHEMA = {
    "subject": "string (compelling, personalized subject line)",
    "content": "string (full email body with greeting and sign-off)",
    "alternatives": "array of 2-3 alternative subject lines",
}

DEFAULT_EMAIL_TONE = ToneConfiguration(
    base_tone="professional",
    intensity="moderate",
    regional_adaptation="south_african",
)

TEMPLATE_INSTRUCTIONS = {
    "introduction": [
        "Establish credibility and relevance quickly",
        "Demonstrate understanding of their challenges",
        "Provide immediate value or insight",
    ],
    "follow_up": [
        "Reference the previous interaction specifically",
        "Provide additional value since the last contact",
        "Progress the conversation naturally",
    ],
    "proposal": [
        "Present a solution tailored to their specific needs",
        "Address identified pain points directly",
        "Make next steps crystal clear",
    ],
    "check_in": [
        "Keep it short and relationship focused",
        "Ask one open question about current priorities",
    ],
    "re_engagement": [
        "Acknowledge the time since the last conversation",
        "Lead with something new and relevant to them",
        "Offer a low-commitment next step",
    ],
}


def _email_context(body: EmailDraftRequest, tone: ToneConfiguration) -> str:
    """Lead/client, locale and personalization blocks; industry only when the tone asks for it."""
    lead, client = body.lead_data, body.client_data
    source = lead or client
    industry = source.industry if source and tone.industry_specific else None
    business_size = source.business_size if source else None

    locale = None
    if tone.regional_adaptation == "south_african":
        locale = SouthAfricanContext(industry=industry, business_size=business_size)

    personalization = PersonalizationContext(
        recipient_name=body.recipient_name,
        company_name=source.company_name if source else None,
        industry=industry,
        role=lead.job_title if lead else None,
    )
    notes = _compact({"customMessage": body.custom_message, "contextNotes": body.context_notes})

    return build_comprehensive_context(
        lead=lead,
        client=client,
        south_african_context=locale,
        personalization=personalization,
        custom_context=notes or None,
    )


@router.post("/api/ai/email", response_model=AIContentResponse)
async def draft_email(body: EmailDraftRequest, service: AIService = Depends(get_ai_service)):
    data_hash = _request_hash(body)

    if not service.is_configured():
        return format_response(fallback_email(body), using_fallback=True, data_hash=data_hash)

    try:
        tone = body.tone or DEFAULT_EMAIL_TONE
        template = body.template_type if body.template_type in TEMPLATE_INSTRUCTIONS else "follow_up"
        prompt = service.build_prompt(PromptConfig(
            role="an expert business communication writer for the South African market",
            mission=f"Write a {template.replace('_', ' ')} email to {body.recipient_name}",
            instructions=[
                *TEMPLATE_INSTRUCTIONS[template],
                "Address the recipient by name",
                "End with a clear, single call to action",
            ],
            output_format=OutputFormat(type="json", schema=EMAIL_SCHEMA),
            tone=tone,
            limits=PromptLimits(max_words=250),
        ))
        full_prompt = _email_context(body, tone) + "\n" + prompt

        result = await service.generate_content(full_prompt, GenerationOptions(max_output_tokens=2048))
        fallback = fallback_email(body)
        parsed = parse_model_response(result.text, AIContentResponse, fallback)
        if not parsed.subject or not parsed.content:
            parsed = fallback
        return format_response(parsed, using_fallback=parsed is fallback, data_hash=data_hash)

    except Exception as e:
        logger.error("Error drafting email: %s", e, exc_info=True)
        err = service.handle_error(e)
        fallback = format_response(fallback_email(body), using_fallback=True, data_hash=data_hash)
        return _error_response("Failed to generate email", err, fallback)
