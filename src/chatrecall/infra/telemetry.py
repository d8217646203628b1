"""OpenTelemetry bootstrap: tracing initialisation and helpers.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing is
enabled via ``TracingConfig``.  When disabled the module is a graceful no-op
(local dev without a collector).

Auto-instrumentations wired here:

- **FastAPI** (inbound HTTP spans)
- **httpx** (outbound HTTP spans, including the LLM gateway)
- **SQLAlchemy** (DB spans)

Usage::

    from chatrecall.infra.telemetry import SPAN_CONTEXT_RETRIEVE, tracer

    with tracer.start_as_current_span(SPAN_CONTEXT_RETRIEVE) as span:
        ...
"""

from __future__ import annotations

import base64
import logging

from opentelemetry import trace

from chatrecall.configs.system import TracingConfig

logger = logging.getLogger(__name__)

_otel_enabled = False

tracer = trace.get_tracer("chatrecall")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_CONTEXT_RETRIEVE = "context.retrieve"
SPAN_CONTEXT_FETCH = "context.fetch_window"
SPAN_CONTEXT_PARSE = "context.parse"
SPAN_LLM_COMPLETE = "llm.complete"
SPAN_SEMAPHORE_SLOT = "semaphore.slot"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_CONTEXT_MODE = "context.mode"
ATTR_CONTEXT_QUERY_LEN = "context.query_len"
ATTR_CONTEXT_WINDOW_SIZE = "context.window_size"
ATTR_CONTEXT_PROPOSED_IDS = "context.proposed_ids"
ATTR_CONTEXT_GROUNDED_IDS = "context.grounded_ids"

ATTR_LLM_MODEL = "llm.model"
ATTR_LLM_PROMPT_LEN = "llm.prompt_len"
ATTR_LLM_STATUS_CODE = "llm.status_code"

ATTR_SEMAPHORE_TIMEOUT = "semaphore.timeout"


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> None:
    """Initialise the OTEL ``TracerProvider`` and auto-instrumentations.

    Parameters
    ----------
    app:
        The FastAPI application instance.  Passed to the FastAPI
        instrumentor so it can attach ASGI middleware.
    settings:
        Tracing configuration.  When ``None`` or ``enabled`` is
        ``False``, this function is a no-op.
    """
    global _otel_enabled  # noqa: PLW0603

    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return

    if not settings.endpoint or not settings.username or not settings.password:
        logger.warning(
            "Tracing enabled but endpoint/credentials not configured, "
            "skipping OpenTelemetry setup."
        )
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)

    credentials = f"{settings.username}:{settings.password}"
    encoded = base64.b64encode(credentials.encode()).decode()
    exporter = OTLPSpanExporter(
        endpoint=settings.endpoint,
        headers={"Authorization": f"Basic {encoded}"},
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        excluded = ",".join(settings.excluded_urls) if settings.excluded_urls else ""
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded)

    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    HTTPXClientInstrumentor().instrument()

    _otel_enabled = True
    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )


def instrument_sqlalchemy(engine: object) -> None:
    """Instrument a SQLAlchemy engine for DB span tracing.

    No-op when OTEL is not enabled.
    """
    if not _otel_enabled:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    sync_engine = getattr(engine, "sync_engine", engine)
    SQLAlchemyInstrumentor().instrument(engine=sync_engine)
    logger.info("SQLAlchemy engine instrumented for OTEL tracing.")
