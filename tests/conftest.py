"""
Shared fixtures: a scripted stand-in for the google-genai async client.

``FakeGenaiClient`` exposes ``client.aio.models.generate_content`` like the
real SDK. Each model id maps to a list of outcomes consumed in order; an
``Exception`` outcome is raised, a ``str`` outcome becomes the response text.
The last outcome of a list is repeated once the others are used up.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from tenacity import wait_none

from core.ai_service import AIService
from core.tracing import TraceStore

TEST_MODELS = ("model-a", "model-b", "model-c")


def make_response(text: str | None, finish_reason: str = "STOP", usage: Any = None) -> SimpleNamespace:
    response = SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(finish_reason=SimpleNamespace(value=finish_reason))],
    )
    if usage is not None:
        response.usage_metadata = usage
    return response


class FakeModels:
    def __init__(self, outcomes: dict[str, list[Any]]):
        self.outcomes = {model: list(items) for model, items in outcomes.items()}
        self.calls: list[SimpleNamespace] = []

    async def generate_content(self, model: str, contents: str, config: Any = None):
        self.calls.append(SimpleNamespace(model=model, contents=contents, config=config))
        queue = self.outcomes.get(model)
        if not queue:
            raise ValueError(f"models/{model} is not found for API version v1beta")
        outcome = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, SimpleNamespace):
            return outcome
        return make_response(outcome)

    @property
    def called_models(self) -> list[str]:
        return [call.model for call in self.calls]


class FakeGenaiClient:
    def __init__(self, outcomes: dict[str, list[Any]] | None = None):
        self.models = FakeModels(outcomes or {})
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture
def make_service():
    """Factory for an AIService wired to a scripted client (no retry sleeps)."""

    def _make(outcomes: dict[str, list[Any]] | None = None, **kwargs: Any) -> AIService:
        kwargs.setdefault("fallback_models", TEST_MODELS)
        kwargs.setdefault("retry_attempts", 1)
        kwargs.setdefault("retry_wait", wait_none())
        kwargs.setdefault("tracer", TraceStore())
        return AIService(client=FakeGenaiClient(outcomes), **kwargs)

    return _make


@pytest.fixture
def unconfigured_service() -> AIService:
    return AIService(client=None, api_key=None, fallback_models=TEST_MODELS, retry_wait=wait_none())
