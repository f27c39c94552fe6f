"""
AI Service for LORO CRM.

Gemini generation facade with:
- Ordered model fallback (preferred model first, then the configured order)
- Optional per-model retry on transient errors via tenacity
- Attempt tracing via TraceStore
- Error classification into user-facing payloads

The service is constructed explicitly (usually once per process via
``AIService.from_settings()``) and handed to whatever needs it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from config import settings
from core.errors import AIServiceError, ConfigurationError, classify_error
from core.prompt_builder import build_prompt
from core.tracing import TraceStore
from models.schemas import AIErrorResponse, GenerationOptions, GenerationResult, PromptConfig

logger = logging.getLogger(__name__)

COMPONENT = "AIService"
NOT_CONFIGURED_MESSAGE = "AI service not configured - GOOGLE_AI_API_KEY is missing"


# =============================================================================
# Retry configuration
# =============================================================================

RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    genai_errors.ServerError,
    httpx.RemoteProtocolError,
    httpx.ReadError,
    httpx.ConnectError,
    httpx.TimeoutException,
)


def _is_retryable(exception: BaseException) -> bool:
    """Check if an exception is transient (rate limit, 5xx, dropped connection)."""
    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return True
    # ClientError covers 400/403/404 as well; only 429 is worth another try
    if isinstance(exception, genai_errors.ClientError):
        return getattr(exception, "code", 0) == 429
    msg = str(exception).lower()
    return any(kw in msg for kw in ("resource exhausted", "peer closed connection", "incomplete chunked read"))


# =============================================================================
# Response helpers
# =============================================================================

def _response_text(response: Any) -> str:
    # .text can raise or return None when the candidate was blocked or empty
    try:
        text = response.text
    except (ValueError, AttributeError):
        text = None
    if text is None:
        logger.warning("Model response had no text (candidates may be empty or blocked)")
        return ""
    return text


def _finish_reason(response: Any) -> str | None:
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    if reason is None:
        return None
    return getattr(reason, "value", None) or str(reason)


def _usage_count(usage: Any, name: str) -> int:
    value = getattr(usage, name, None)
    return value if isinstance(value, int) else 0


# =============================================================================
# Service
# =============================================================================

class AIService:
    """Gemini generation with sequential model fallback."""

    def __init__(
        self,
        api_key: str | None = None,
        client: Any | None = None,
        fallback_models: list[str] | tuple[str, ...] | None = None,
        retry_attempts: int | None = None,
        retry_wait: wait_base | None = None,
        tracer: TraceStore | None = None,
    ):
        self._client = client
        if self._client is None and api_key:
            self._client = genai.Client(api_key=api_key)
            logger.info("Created Gemini client")

        self.fallback_models: tuple[str, ...] = (
            tuple(fallback_models) if fallback_models is not None else settings.MODEL_FALLBACK_ORDER
        )
        self.retry_attempts = max(1, retry_attempts if retry_attempts is not None else settings.RETRY_ATTEMPTS)
        self.retry_wait = retry_wait or wait_exponential(
            multiplier=1, min=settings.RETRY_WAIT_MIN, max=settings.RETRY_WAIT_MAX
        )
        self.tracer = tracer or TraceStore()

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "AIService":
        """Build the service from environment configuration (reads the API key once)."""
        service = cls(api_key=settings.get_api_key(), **kwargs)
        if not service.is_configured():
            logger.warning("No Gemini API key found (%s); AI routes will serve fallback content",
                           " / ".join(settings.API_KEY_ENV_VARS))
        return service

    def is_configured(self) -> bool:
        return self._client is not None

    # ---- Prompting ----

    def build_prompt(self, config: PromptConfig) -> str:
        return build_prompt(config)

    def candidate_models(self, preferred: str | None = None) -> list[str]:
        """Preferred model first, then the fallback order, without duplicates."""
        models = [preferred, *self.fallback_models] if preferred else list(self.fallback_models)
        return list(dict.fromkeys(models))

    # ---- Generation ----

    async def generate_content(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        """
        Generate text, trying each candidate model in order.

        Returns the first successful result. When every candidate fails, the
        error from the last candidate is re-raised.

        Raises:
            ConfigurationError: no client was constructed (missing API key).
        """
        if self._client is None:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

        options = options or GenerationOptions()
        candidates = self.candidate_models(options.model)
        last_error: Exception | None = None

        for index, model_name in enumerate(candidates):
            try:
                result = await self._generate_with_retry(model_name, prompt, options)
            except Exception as e:
                last_error = e
                logger.warning("Failed to use model %s: %s", model_name, e)
                if index < len(candidates) - 1:
                    self.tracer.record(
                        COMPONENT, "FALLBACK", f"{model_name} -> {candidates[index + 1]}", model=model_name
                    )
                continue

            if index > 0:
                logger.info("Generated with fallback model %s after %d failed attempt(s)", model_name, index)
            return result

        if last_error is not None:
            self.tracer.record(COMPONENT, "EXHAUSTED", f"All {len(candidates)} models failed: {last_error}")
            logger.error("All %d model attempts failed; last error: %s", len(candidates), last_error)
            raise last_error

        raise AIServiceError("All model attempts failed")

    async def _generate_with_retry(
        self, model_name: str, prompt: str, options: GenerationOptions
    ) -> GenerationResult:
        result: GenerationResult | None = None
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.retry_attempts),
            wait=self.retry_wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                result = await self._call_model(model_name, prompt, options)
        return result

    async def _call_model(
        self, model_name: str, prompt: str, options: GenerationOptions
    ) -> GenerationResult:
        """Single backend call against one model."""
        config = types.GenerateContentConfig(
            temperature=options.temperature,
            top_k=options.top_k,
            top_p=options.top_p,
            max_output_tokens=options.max_output_tokens,
        )

        with self.tracer.trace_llm_call(COMPONENT, model_name, prompt) as ctx:
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=prompt,
                config=config,
            )
            text = _response_text(response)
            ctx["response_text"] = text

            usage = getattr(response, "usage_metadata", None)
            if usage is not None:
                ctx["tokens_in"] = _usage_count(usage, "prompt_token_count") or ctx["tokens_in"]
                ctx["tokens_out"] = _usage_count(usage, "candidates_token_count")

        return GenerationResult(
            text=text,
            model_used=model_name,
            finish_reason=_finish_reason(response),
        )

    # ---- Errors ----

    def handle_error(self, error: Any, fallback: Any | None = None) -> AIErrorResponse:
        """Translate any raised error into a categorised payload. Never raises."""
        return classify_error(error, fallback=fallback)
