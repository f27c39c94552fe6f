"""
Tests for TraceStore accounting.
"""

from __future__ import annotations

import threading

import pytest

from core.tracing import MODEL_COSTS, TraceStore, estimate_cost, estimate_tokens


def test_estimate_tokens_minimum_one():
    assert estimate_tokens("") == 1
    assert estimate_tokens("x" * 400) == 100


def test_estimate_cost_unknown_model_uses_default():
    expected = 1000 * MODEL_COSTS["default"]["input"] + 500 * MODEL_COSTS["default"]["output"]
    assert estimate_cost("some-new-model", 1000, 500) == pytest.approx(expected)


def test_trace_llm_call_success_records_call_and_response():
    tracer = TraceStore()
    with tracer.trace_llm_call("AIService", "gemini-2.5-flash", "p" * 40) as ctx:
        ctx["response_text"] = "r" * 80

    call, response = tracer.get_entries()
    assert call.action == "LLM_CALL"
    assert response.action == "LLM_RESPONSE"
    assert response.tokens_in == 10
    assert response.tokens_out == 20
    assert tracer.total_calls == 1
    assert tracer.total_cost > 0


def test_trace_llm_call_failure_reraises_and_counts():
    tracer = TraceStore()
    with pytest.raises(RuntimeError, match="boom"):
        with tracer.trace_llm_call("AIService", "gemini-2.5-pro", "prompt"):
            raise RuntimeError("boom")

    assert [e.action for e in tracer.get_entries()] == ["LLM_CALL", "LLM_FAIL"]
    assert tracer.total_failures == 1
    assert "RuntimeError: boom" in tracer.get_entries()[-1].detail


def test_max_entries_trims_oldest():
    tracer = TraceStore(max_entries=3)
    for i in range(5):
        tracer.record("C", "STEP", f"step {i}")
    assert [e.detail for e in tracer.get_entries()] == ["step 2", "step 3", "step 4"]
    assert tracer.get_entries(last_n=1)[0].detail == "step 4"


def test_model_summary_and_usage():
    tracer = TraceStore()
    with tracer.trace_llm_call("AIService", "gemini-2.5-flash", "prompt") as ctx:
        ctx["response_text"] = "answer"
    with pytest.raises(ValueError):
        with tracer.trace_llm_call("AIService", "gemini-2.5-pro", "prompt"):
            raise ValueError("not found")

    summary = tracer.get_model_summary()
    assert summary["gemini-2.5-flash"]["calls"] == 1
    assert summary["gemini-2.5-pro"]["failures"] == 1

    usage = tracer.usage_summary()
    assert usage["total_calls"] == 2
    assert usage["total_failures"] == 1
    assert set(usage["models"]) == {"gemini-2.5-flash", "gemini-2.5-pro"}


def test_clear_resets_totals():
    tracer = TraceStore()
    with tracer.trace_llm_call("AIService", "gemini-2.5-flash", "prompt") as ctx:
        ctx["response_text"] = "answer"
    tracer.clear()
    assert tracer.get_entries() == []
    assert tracer.total_calls == 0
    assert tracer.total_cost == 0.0


def test_usage_summary_safe_while_recording_from_another_thread():
    """Summaries read on worker threads while new models keep being recorded."""
    tracer = TraceStore(max_entries=50)
    stop = threading.Event()
    errors: list[Exception] = []

    def read_summaries():
        while not stop.is_set():
            try:
                tracer.usage_summary()
                tracer.get_entries(last_n=5)
            except Exception as e:
                errors.append(e)
                return

    readers = [threading.Thread(target=read_summaries) for _ in range(2)]
    for reader in readers:
        reader.start()
    try:
        for i in range(1000):
            tracer.record("AIService", "LLM_CALL", model=f"model-{i}")
    finally:
        stop.set()
        for reader in readers:
            reader.join()

    assert errors == []
    assert tracer.total_calls == 1000
    assert len(tracer.get_model_summary()) == 1000
