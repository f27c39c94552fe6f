"""Pydantic models for type-safe data flow."""
from .schemas import (
    # Enums
    AIErrorType,
    # Generation
    GenerationOptions,
    GenerationResult,
    # Prompt configuration
    OutputFormat,
    ToneConfiguration,
    PromptLimits,
    PromptConfig,
    # Errors
    AIErrorResponse,
    # Parsed responses
    BaseAIResponse,
    AIInsightsResponse,
    AISuggestion,
    AISuggestionsResponse,
    AIContentResponse,
    AIAnalysisResponse,
    # CRM records
    LeadData,
    ClientData,
    TargetData,
    SouthAfricanContext,
    PersonalizationContext,
    AttendanceData,
    ProfileData,
    # HTTP payloads
    InsightRequest,
    InsightsPayload,
    LastAction,
    NextActionRequest,
    LeadSuggestion,
    NextActionPayload,
    AttendanceRecord,
    PatternAnalysisRequest,
    AttendancePattern,
    AttendanceTrend,
    PatternAnalysisResponse,
    CommunicationRecord,
    CommunicationStrategyRequest,
    CommunicationChannel,
    CommunicationPlan,
    PersonalizationGuide,
    CadenceStep,
    CommunicationStrategyResponse,
    ClientMetrics,
    ClientInteraction,
    HealthAnalysisRequest,
    ChurnRisk,
    ClientHealthResponse,
    EmailDraftRequest,
    # Tracing
    TraceEntry,
    utc_timestamp,
)

__all__ = [
    "AIErrorType",
    "GenerationOptions",
    "GenerationResult",
    "OutputFormat",
    "ToneConfiguration",
    "PromptLimits",
    "PromptConfig",
    "AIErrorResponse",
    "BaseAIResponse",
    "AIInsightsResponse",
    "AISuggestion",
    "AISuggestionsResponse",
    "AIContentResponse",
    "AIAnalysisResponse",
    "LeadData",
    "ClientData",
    "TargetData",
    "SouthAfricanContext",
    "PersonalizationContext",
    "AttendanceData",
    "ProfileData",
    "InsightRequest",
    "InsightsPayload",
    "LastAction",
    "NextActionRequest",
    "LeadSuggestion",
    "NextActionPayload",
    "AttendanceRecord",
    "PatternAnalysisRequest",
    "AttendancePattern",
    "AttendanceTrend",
    "PatternAnalysisResponse",
    "CommunicationRecord",
    "CommunicationStrategyRequest",
    "CommunicationChannel",
    "CommunicationPlan",
    "PersonalizationGuide",
    "CadenceStep",
    "CommunicationStrategyResponse",
    "ClientMetrics",
    "ClientInteraction",
    "HealthAnalysisRequest",
    "ChurnRisk",
    "ClientHealthResponse",
    "EmailDraftRequest",
    "TraceEntry",
    "utc_timestamp",
]
