"""Prometheus metrics for the chatrecall application.

Custom business metrics that complement the auto-instrumented HTTP
metrics provided by ``prometheus-fastapi-instrumentator``.

All metrics use the ``chatrecall_`` prefix.
"""

import logging

from fastapi import FastAPI
from prometheus_client import Counter, Gauge, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from chatrecall.configs.config import AppConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Context retrieval metrics
# ---------------------------------------------------------------------------

CONTEXT_REQUESTS_TOTAL = Counter(
    "chatrecall_context_requests_total",
    "Total context retrieval requests, by mode and outcome",
    ["mode", "status"],  # status: ok | empty | failed | forbidden | unauthorized
)

CONTEXT_DURATION_SECONDS = Histogram(
    "chatrecall_context_duration_seconds",
    "End-to-end duration of a context retrieval request",
    ["mode"],
    buckets=(0.1, 0.25, 0.5, 1, 2, 5, 10, 20, 30, 60),
)

CONTEXT_WINDOW_SIZE = Histogram(
    "chatrecall_context_window_size",
    "Number of candidate messages shown to the model",
    ["mode"],
    buckets=(0, 1, 10, 20, 40, 80, 120, 200),
)

GROUNDED_IDS_TOTAL = Counter(
    "chatrecall_grounded_ids_total",
    "Model-proposed message ids, by grounding result",
    ["result"],  # kept | dropped
)

# ---------------------------------------------------------------------------
# LLM gateway metrics
# ---------------------------------------------------------------------------

LLM_CALLS_TOTAL = Counter(
    "chatrecall_llm_calls_total",
    "Total LLM completion calls, by outcome",
    ["model_name", "status"],  # ok | unavailable | rejected | malformed
)

LLM_LATENCY_SECONDS = Histogram(
    "chatrecall_llm_latency_seconds",
    "Latency of LLM completion calls",
    ["model_name"],
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30),
)

LLM_CALLS_IN_FLIGHT = Gauge(
    "chatrecall_llm_calls_in_flight",
    "Number of LLM calls currently in-flight",
    ["model_name"],
)

PARSE_FAILURES_TOTAL = Counter(
    "chatrecall_parse_failures_total",
    "Model responses that held no parseable JSON object",
)

# ---------------------------------------------------------------------------
# Concurrency metrics
# ---------------------------------------------------------------------------

SEMAPHORE_ACQUIRES_TOTAL = Counter(
    "chatrecall_semaphore_acquires_total",
    "Total semaphore acquire attempts",
    ["result"],  # "ok" | "timeout"
)

SEMAPHORE_WAIT_SECONDS = Histogram(
    "chatrecall_semaphore_wait_seconds",
    "Time spent waiting for a semaphore slot",
    buckets=(0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30),
)


# ---------------------------------------------------------------------------
# App setup (middleware must be added before the app starts)
# ---------------------------------------------------------------------------


def setup_metrics(app: FastAPI, config: AppConfig) -> None:
    """Attach HTTP instrumentation and the ``/metrics`` endpoint to *app*."""
    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=config.tracing.excluded_urls,
    ).instrument(app).expose(app, endpoint="/metrics")

    logger.info("Prometheus metrics initialised")
