"""
Pydantic models for the LORO CRM AI service.

Every data boundary (prompt configuration, generation results, parsed model
output, HTTP payloads) flows through these models. Wire names are camelCase
to match the dashboard; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision (e.g. 2025-01-31T09:15:02.117Z)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Base for models exchanged with the dashboard (camelCase on the wire)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


# =============================================================================
# Enums
# =============================================================================

class AIErrorType(str, Enum):
    API_KEY = "api_key"
    MODEL_UNAVAILABLE = "model_unavailable"
    RATE_LIMIT = "rate_limit"
    NETWORK = "network"
    GENERAL = "general"


# =============================================================================
# Generation
# =============================================================================

class GenerationOptions(CamelModel):
    """Sampling parameters for one generate call. Unset fields use the defaults."""
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    top_k: int = Field(default=40, gt=0)
    top_p: float = Field(default=0.95, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=2048, gt=0)
    model: str | None = None  # Preferred model, tried before the fallback order


class GenerationResult(CamelModel):
    """Successful generation: raw text plus the model that produced it."""
    text: str
    model_used: str
    finish_reason: str | None = None


# =============================================================================
# Prompt configuration
# =============================================================================

class OutputFormat(CamelModel):
    type: Literal["json", "text", "structured"] = "text"
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    sections: list[str] | None = None


class ToneConfiguration(CamelModel):
    """Multi-dimensional tone: base tone, intensity and regional adaptation."""
    base_tone: str | None = None  # consultative, authoritative, empathetic, ...
    intensity: str | None = None  # subtle, moderate, strong
    regional_adaptation: str | None = None  # south_african, international, local
    industry_specific: bool = False


class PromptLimits(CamelModel):
    max_words: int | None = None
    max_characters: int | None = None
    max_items: int | None = None


class PromptConfig(CamelModel):
    """Everything the prompt assembler needs. Built by the caller, consumed once."""
    model_config = ConfigDict(frozen=True)

    role: str
    mission: str
    context: dict[str, Any] | None = None
    instructions: list[str] = Field(default_factory=list)
    output_format: OutputFormat | None = None
    tone: ToneConfiguration | None = None
    limits: PromptLimits | None = None


# =============================================================================
# Errors
# =============================================================================

class AIErrorResponse(CamelModel):
    """User-facing error payload built from a caught exception."""
    error: str
    error_type: AIErrorType = AIErrorType.GENERAL
    message: str
    fallback: Any | None = None
    status_code: int = Field(default=500, exclude=True)


# =============================================================================
# Parsed responses
# =============================================================================

class BaseAIResponse(CamelModel):
    generated_at: str = Field(default_factory=utc_timestamp)
    using_fallback: bool = False
    data_hash: str | None = None


class AIInsightsResponse(BaseAIResponse):
    insights: list[str] = Field(default_factory=list)
    summary: str = ""
    recommendations: list[str] = Field(default_factory=list)
    quick_actions: list[str] = Field(default_factory=list)


class AISuggestion(CamelModel):
    id: int = 0
    title: str
    description: str
    priority: str | None = None  # high, medium, low (as written by the model)
    action: str | None = None
    timing: str | None = None


class AISuggestionsResponse(BaseAIResponse):
    suggestions: list[AISuggestion] = Field(default_factory=list)


class AIContentResponse(BaseAIResponse):
    content: str = ""
    subject: str | None = None
    alternatives: list[str] = Field(default_factory=list)


class AIAnalysisResponse(BaseAIResponse):
    analysis: str = ""
    score: float | None = None
    factors: list[str] = Field(default_factory=list)


# =============================================================================
# CRM records (prompt context sources)
# =============================================================================

class LeadData(CamelModel):
    uid: int | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    status: str | None = None
    score: int | None = None  # Total interactions
    last_contact: str | None = None
    source: str | None = None
    value: float | None = None
    assignee: str | None = None
    company_name: str | None = None
    job_title: str | None = None
    industry: str | None = None
    business_size: str | None = None
    temperature: str | None = None
    priority: str | None = None
    lead_score: int | None = None
    notes: str | None = None


class ClientData(CamelModel):
    uid: int | None = None
    name: str
    email: str | None = None
    phone: str | None = None
    company_name: str | None = None
    industry: str | None = None
    business_size: str | None = None
    status: str | None = None
    total_value: float | None = None
    last_purchase_date: str | None = None


class TargetData(CamelModel):
    current_value: float = 0.0
    target_value: float = 0.0
    progress: float = 0.0
    period: str = ""
    category: str
    unit: str | None = None

    @field_validator("current_value", "target_value", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> Any:
        # The dashboard sometimes posts numbers as strings; unparseable means 0
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return 0.0
        return value


class SouthAfricanContext(CamelModel):
    industry: str | None = None  # MINING, FINANCE, RETAIL, AGRICULTURE
    business_size: str | None = None  # STARTUP, SMALL, ENTERPRISE


class PersonalizationContext(CamelModel):
    recipient_name: str | None = None
    company_name: str | None = None
    industry: str | None = None
    role: str | None = None
    preferences: dict[str, Any] | None = None


class AttendanceData(CamelModel):
    hours_worked: float = 0.0
    expected_hours: float = 0.0
    attendance_rate: float = 0.0
    punctuality_score: float = 0.0


class ProfileData(CamelModel):
    uid: str = ""
    name: str
    surname: str = ""
    email: str = ""
    role: str = ""
    department: str | None = None


# =============================================================================
# HTTP payloads
# =============================================================================

UrgencyLevel = Literal["low", "medium", "high", "critical"]


class InsightRequest(CamelModel):
    target_data: list[TargetData] = Field(default_factory=list)
    attendance_data: AttendanceData | None = None
    profile_data: ProfileData | None = None
    leads_data: list[LeadData] | None = None
    time_frame: Literal["daily", "weekly", "monthly", "quarterly"] = "weekly"
    type: str = "comprehensive_performance"
    data_hash: str | None = None
    current_date: str | None = None


class InsightsPayload(AIInsightsResponse):
    feasibility_analysis: list[str] = Field(default_factory=list)
    actionable_recommendations: list[str] = Field(default_factory=list)
    urgency_level: UrgencyLevel = "medium"
    type: str | None = None
    time_frame: str | None = None


class LastAction(CamelModel):
    type: str
    date: str
    outcome: str | None = None


class NextActionRequest(CamelModel):
    lead_data: LeadData
    current_status: str
    last_action: LastAction | None = None
    available_actions: list[str] | None = None
    urgency: Literal["high", "medium", "low"] | None = None
    data_hash: str | None = None


class LeadSuggestion(AISuggestion):
    lead_id: int | None = None
    lead_name: str | None = None


class NextActionPayload(BaseAIResponse):
    suggestions: list[LeadSuggestion] = Field(default_factory=list)


class AttendanceRecord(CamelModel):
    date: str
    present: int = 0
    absent: int = 0
    late: int = 0


class PatternAnalysisRequest(CamelModel):
    attendance_data: list[AttendanceRecord] = Field(default_factory=list)
    staff_data: list[dict[str, Any]] | None = None
    data_hash: str | None = None


class AttendancePattern(CamelModel):
    pattern: str
    description: str = ""
    frequency: float = 0
    impact: str = ""


class AttendanceTrend(CamelModel):
    trend: str
    direction: str = "stable"  # improving, declining, stable
    description: str = ""


class PatternAnalysisResponse(BaseAIResponse):
    patterns: list[AttendancePattern] = Field(default_factory=list)
    trends: list[AttendanceTrend] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# ---- Clients ----

class CommunicationRecord(CamelModel):
    date: str
    type: str
    outcome: str = ""
    preference: str | None = None


class CommunicationStrategyRequest(CamelModel):
    client_data: ClientData
    communication_history: list[CommunicationRecord] = Field(default_factory=list)
    preferred_channels: list[str] = Field(default_factory=list)
    communication_goals: list[str] = Field(default_factory=list)
    data_hash: str | None = None


class CommunicationChannel(CamelModel):
    channel: str
    purpose: str = ""
    frequency: str = ""
    best_time: str = ""


class CommunicationPlan(CamelModel):
    approach: str = ""
    frequency: str = ""
    channels: list[CommunicationChannel] = Field(default_factory=list)
    tone: str = ""
    key_messages: list[str] = Field(default_factory=list)


class PersonalizationGuide(CamelModel):
    preferences: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    style: str = ""


class CadenceStep(CamelModel):
    touchpoint: str
    timing: str = ""
    purpose: str = ""
    content: str = ""


class CommunicationStrategyResponse(BaseAIResponse):
    strategy: CommunicationPlan = Field(default_factory=CommunicationPlan)
    personalization: PersonalizationGuide = Field(default_factory=PersonalizationGuide)
    cadence: list[CadenceStep] = Field(default_factory=list)
    best_practices: list[str] = Field(default_factory=list)


class ClientMetrics(CamelModel):
    engagement_score: float | None = None
    support_tickets: int | None = None
    last_purchase_date: str | None = None
    purchase_frequency: float | None = None
    total_spent: float | None = None
    contract_renewal_date: str | None = None


class ClientInteraction(CamelModel):
    date: str
    interaction: str
    sentiment: Literal["positive", "neutral", "negative"] | None = None


class HealthAnalysisRequest(CamelModel):
    client_data: ClientData
    metrics: ClientMetrics | None = None
    historical_data: list[ClientInteraction] = Field(default_factory=list)
    data_hash: str | None = None


class ChurnRisk(CamelModel):
    level: str = "low"  # low, medium, high, critical
    probability: float = Field(default=0.0, ge=0.0, le=100.0)
    reasons: list[str] = Field(default_factory=list)


class ClientHealthResponse(AIAnalysisResponse):
    """``score`` is the 0-100 health score; ``analysis`` the narrative."""
    status: str = "healthy"  # healthy, at-risk, critical
    churn_risk: ChurnRisk = Field(default_factory=ChurnRisk)
    recommendations: list[str] = Field(default_factory=list)
    action_plan: list[str] = Field(default_factory=list)


# ---- Email ----

class EmailDraftRequest(CamelModel):
    recipient_name: str
    recipient_email: str | None = None
    lead_data: LeadData | None = None
    client_data: ClientData | None = None
    template_type: str = "follow_up"  # introduction, follow_up, proposal, check_in, ...
    tone: ToneConfiguration | None = None
    custom_message: str | None = None
    context_notes: str | None = None
    data_hash: str | None = None


# =============================================================================
# Tracing
# =============================================================================

class TraceEntry(BaseModel):
    """Single entry in the generation trace."""
    model_config = ConfigDict(protected_namespaces=())

    time: str = Field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))
    component: str
    action: str
    detail: str = ""
    tokens_in: int = 0
    tokens_out: int = 0
    cost_usd: float = 0.0
    duration_ms: int = 0
    model: str = ""
