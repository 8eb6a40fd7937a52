"""structlog setup.

structlog events and records from stdlib loggers (Uvicorn, SQLAlchemy, httpx)
share one processor chain and one stdout handler, and every event recorded
inside a span carries that span's trace and span ids.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from opentelemetry import trace

# Third-party loggers that flood DEBUG/INFO with per-request chatter
NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "sqlalchemy.engine",
    "opentelemetry.exporter.otlp.proto.http",
    "uvicorn.access",
)


def _add_otel_context(
    logger: logging.Logger, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Copy the current span's ids onto the event."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = trace.format_trace_id(span_context.trace_id)
        event_dict["span_id"] = trace.format_span_id(span_context.span_id)
    return event_dict


def _renderer(level: str) -> structlog.types.Processor:
    # DEBUG runs in containers where logs are shipped as JSON lines
    if level == "DEBUG":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(*, log_level: str = "INFO") -> None:
    """
    Route structlog and stdlib logging through a single stdout handler.

    Safe to call repeatedly; existing root handlers are replaced.

    Args:
        log_level: Root level name, case-insensitive
    """
    level = log_level.upper()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_otel_context,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(level)],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping()[level])

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
