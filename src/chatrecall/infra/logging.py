"""Structured logging bootstrap.

Configures the root logger so every ``logging.getLogger(__name__)`` call
across the app (and uvicorn) emits either JSON lines (default) or
coloured human-readable lines for local development.

Every record carries:

* ``requester_id``: the authenticated user of the current request,
  taken from ``chatrecall.infra.identity.current_requester_id``.
* ``trace_id`` / ``span_id``: when OpenTelemetry tracing is active.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from chatrecall.configs.system import LoggingConfig
from chatrecall.infra.identity import current_requester_id


class _RequestContextFilter(logging.Filter):
    """Injects the requester id and OTEL trace/span ids into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        requester_id = current_requester_id.get()
        record.requester_id = "" if requester_id is None else str(requester_id)  # type: ignore[attr-defined]

        ctx = trace.get_current_span().get_span_context()
        if ctx and ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


_JSON_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(requester_id)s %(trace_id)s %(span_id)s"
)
_DEV_FORMAT = "%(levelprefix)s %(asctime)s %(name)s [user=%(requester_id)s]  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"

_QUIET_LOGGERS = ("httpx", "httpcore", "opentelemetry", "sqlalchemy.engine")


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure the root logger (call once at startup)."""
    if config is None:
        config = LoggingConfig()

    root = logging.getLogger()
    root.setLevel(config.level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_RequestContextFilter())

    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        formatter: logging.Formatter = JsonFormatter(
            fmt=_JSON_FORMAT,
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"requester_id": "", "trace_id": "", "span_id": ""},
        )
    else:
        from uvicorn.logging import DefaultFormatter

        formatter = DefaultFormatter(
            fmt=_DEV_FORMAT,
            datefmt=_DEV_DATEFMT,
            use_colors=True,
        )

    handler.setFormatter(formatter)
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvi = logging.getLogger(name)
        uvi.handlers = [handler]
        uvi.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
