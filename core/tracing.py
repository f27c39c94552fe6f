"""
Observability & tracing for AI generation calls.

Records every model attempt (call, response, failure, fallback) with timing
and approximate token/cost figures, so the dashboard can show usage and the
fallback path a request took.

Per-model usage is aggregated as entries arrive, so totals survive the
entry log being trimmed to ``max_entries``.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Iterator

from models.schemas import TraceEntry


# =============================================================================
# Pricing (approximate, USD per token)
# =============================================================================

MODEL_COSTS = {
    "gemini-2.5-pro": {"input": 1.25 / 1_000_000, "output": 10.0 / 1_000_000},
    "gemini-2.5-flash": {"input": 0.30 / 1_000_000, "output": 2.50 / 1_000_000},
    "gemini-2.0-flash": {"input": 0.10 / 1_000_000, "output": 0.40 / 1_000_000},
    "default": {"input": 1.0 / 1_000_000, "output": 5.0 / 1_000_000},
}


def estimate_cost(model: str, tokens_in: int, tokens_out: int) -> float:
    pricing = MODEL_COSTS.get(model) or MODEL_COSTS["default"]
    return tokens_in * pricing["input"] + tokens_out * pricing["output"]


def estimate_tokens(text: str) -> int:
    """~4 characters per token; never less than 1."""
    return max(1, len(text) // 4)


# =============================================================================
# Usage aggregation
# =============================================================================

@dataclass
class ModelUsage:
    calls: int = 0
    failures: int = 0
    tokens_in: int = 0
    tokens_out: int = 0
    cost_usd: float = 0.0
    total_ms: int = 0

    def add(self, entry: TraceEntry) -> None:
        if entry.action == "LLM_CALL":
            self.calls += 1
        elif entry.action == "LLM_FAIL":
            self.failures += 1
        self.tokens_in += entry.tokens_in
        self.tokens_out += entry.tokens_out
        self.cost_usd += entry.cost_usd
        self.total_ms += entry.duration_ms


class TraceStore:
    """
    In-memory trace log for generation activity.

    One store is owned by each ``AIService``. The entry log is bounded;
    ``usage_summary()`` feeds the usage endpoint.
    """

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self._entries: deque[TraceEntry] = deque(maxlen=max_entries)
        self._usage: dict[str, ModelUsage] = {}
        self._started_at = datetime.now()
        # Guards entries and usage; the usage route reads from a worker thread
        self._lock = threading.RLock()

    def record(
        self,
        component: str,
        action: str,
        detail: str = "",
        tokens_in: int = 0,
        tokens_out: int = 0,
        cost_usd: float = 0.0,
        duration_ms: int = 0,
        model: str = "",
    ) -> TraceEntry:
        entry = TraceEntry(
            component=component,
            action=action,
            detail=(detail or "")[:500],
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            cost_usd=cost_usd,
            duration_ms=duration_ms,
            model=model,
        )
        with self._lock:
            self._entries.append(entry)
            if model:
                self._usage.setdefault(model, ModelUsage()).add(entry)
        return entry

    @contextmanager
    def trace_llm_call(self, component: str, model: str, prompt_text: str = "") -> Iterator[dict[str, Any]]:
        """
        Time one model attempt and record its outcome.

        The caller fills ``response_text`` (and real token counts when the
        backend reports them) on the yielded dict::

            with tracer.trace_llm_call("AIService", model, prompt) as ctx:
                response = await client.aio.models.generate_content(...)
                ctx["response_text"] = response.text

        An exception leaving the block is logged as ``LLM_FAIL`` and re-raised.
        """
        ctx: dict[str, Any] = {"tokens_in": estimate_tokens(prompt_text), "tokens_out": 0, "response_text": ""}
        self.record(component, "LLM_CALL", f"Model: {model}", model=model)
        started = time.perf_counter()

        try:
            yield ctx
        except Exception as e:
            elapsed = int((time.perf_counter() - started) * 1000)
            self.record(component, "LLM_FAIL", f"{type(e).__name__}: {e}", duration_ms=elapsed, model=model)
            raise

        elapsed = int((time.perf_counter() - started) * 1000)
        text = ctx.get("response_text") or ""
        tokens_in = ctx.get("tokens_in") or 0
        tokens_out = ctx.get("tokens_out") or estimate_tokens(text)
        self.record(
            component,
            "LLM_RESPONSE",
            f"{len(text):,} chars in {elapsed}ms",
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            cost_usd=estimate_cost(model, tokens_in, tokens_out),
            duration_ms=elapsed,
            model=model,
        )

    # ---- Totals ----

    def _sum(self, field_name: str) -> Any:
        with self._lock:
            return sum(getattr(usage, field_name) for usage in self._usage.values())

    @property
    def total_cost(self) -> float:
        return self._sum("cost_usd")

    @property
    def total_tokens(self) -> tuple[int, int]:
        return self._sum("tokens_in"), self._sum("tokens_out")

    @property
    def total_calls(self) -> int:
        return self._sum("calls")

    @property
    def total_failures(self) -> int:
        return self._sum("failures")

    # ---- Views ----

    def get_entries(self, last_n: int = 0) -> list[TraceEntry]:
        with self._lock:
            entries = list(self._entries)
        return entries[-last_n:] if last_n > 0 else entries

    def get_model_summary(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {model: asdict(usage) for model, usage in self._usage.items()}

    def usage_summary(self) -> dict[str, Any]:
        with self._lock:
            tokens_in, tokens_out = self.total_tokens
            return {
                "session_start": self._started_at.isoformat(),
                "total_calls": self.total_calls,
                "total_failures": self.total_failures,
                "tokens_in": tokens_in,
                "tokens_out": tokens_out,
                "estimated_cost_usd": round(self.total_cost, 6),
                "models": self.get_model_summary(),
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._usage.clear()
