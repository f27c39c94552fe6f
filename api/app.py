"""
FastAPI application factory.

The AI service is built once per application and shared through
``app.state.ai_service``; routes receive it via ``get_ai_service``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from api.routes import router
from config.settings import APP_NAME, VERSION
from core.ai_service import AIService

logger = logging.getLogger(__name__)


def create_app(ai_service: AIService | None = None) -> FastAPI:
    app = FastAPI(title=f"{APP_NAME} API", version=VERSION)
    app.state.ai_service = ai_service if ai_service is not None else AIService.from_settings()
    app.include_router(router)
    logger.info("AI routes ready (configured=%s)", app.state.ai_service.is_configured())
    return app
