"""Structured logging bootstrap.

The library itself only ever calls ``logging.getLogger(__name__)`` and
never installs handlers on import.  Applications (and tests) that want
readable output call ``setup_logging`` once at startup, which makes
the root logger emit either:

* **JSON lines** (``json_output=True``) -- machine-parseable, one
  object per record.
* **Human-readable** (``json_output=False``, default) --
  timestamp-prefixed lines for local development.

When OpenTelemetry tracing is active the current ``trace_id`` and
``span_id`` are injected into every log record so a log line emitted
while minting an ID can be tied back to the request that asked for it.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from opentelemetry import trace

from typeids.configs.config import get_settings
from typeids.configs.system import LoggingConfig


class _TraceContextFilter(logging.Filter):
    """Injects OTEL trace/span IDs into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span = trace.get_current_span()
        ctx = span.get_span_context()
        if ctx and ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


_DEV_FORMAT = "%(levelname)-8s %(asctime)s %(name)s  %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


def setup_logging(
    config: LoggingConfig | None = None, stream: TextIO | None = None
) -> logging.Handler:
    """Configure the root logger (call once at startup).

    Without ``config`` the ``logging`` section of ``get_settings()`` is
    used.  Returns the installed handler so callers can detach it again.
    """
    if config is None:
        config = get_settings().logging

    level = config.level.upper()
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(_TraceContextFilter())

    formatter: logging.Formatter
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(trace_id)s %(span_id)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )
    else:
        formatter = logging.Formatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT)

    handler.setFormatter(formatter)

    root.handlers = [handler]

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
    return handler
