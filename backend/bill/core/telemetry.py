"""OpenTelemetry tracing setup and the span helper used by services."""

import threading
from collections.abc import Generator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

from bill import __version__
from bill.core.config import settings

if TYPE_CHECKING:
    from opentelemetry.trace.span import Span

logger = structlog.get_logger(__name__)

# Built on first use so every Uvicorn worker owns its exporter threads
_tracer_provider: TracerProvider | None = None
_provider_lock = threading.Lock()

SpanAttribute = str | int | float | bool | list[str] | list[int] | list[float] | list[bool]


def get_tracer_provider() -> TracerProvider | None:
    """
    Return the process-wide TracerProvider, creating it on first call.

    Returns:
        None while OTEL_ENABLED is false
    """
    global _tracer_provider  # noqa: PLW0603
    if not settings.OTEL_ENABLED:
        return None
    with _provider_lock:
        if _tracer_provider is None:
            _tracer_provider = _build_tracer_provider()
    return _tracer_provider


def _build_tracer_provider() -> TracerProvider:
    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.OTEL_SERVICE_NAME,
                "service.version": __version__,
                "deployment.environment": settings.OTEL_ENVIRONMENT,
            }
        )
    )

    endpoint = settings.OTEL_EXPORTER_OTLP_TRACES_ENDPOINT
    if not endpoint:
        logger.warning("otel_export_disabled", reason="OTEL_EXPORTER_OTLP_TRACES_ENDPOINT not set")
        return provider

    exporter = OTLPSpanExporter(endpoint=endpoint, headers=parse_otlp_headers(settings.OTEL_EXPORTER_OTLP_HEADERS))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info("otel_export_enabled", endpoint=endpoint, service_name=settings.OTEL_SERVICE_NAME)
    return provider


def parse_otlp_headers(raw: str | None) -> dict[str, str]:
    """
    Parse ``key=value`` pairs separated by commas into exporter headers.

    Values may themselves contain ``=``. Pairs without one are skipped.

    Example:
        >>> parse_otlp_headers("Authorization=Bearer token123,X-Custom=value")
        {'Authorization': 'Bearer token123', 'X-Custom': 'value'}
    """
    headers: dict[str, str] = {}
    for item in (raw or "").split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            headers[key.strip()] = value.strip()
        elif key:
            logger.warning("otel_header_ignored", header=key)
    return headers


def shutdown_tracer_provider() -> None:
    """Flush and stop the provider, if one was ever built."""
    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        logger.info("otel_tracer_provider_shutdown")


@contextmanager
def service_span(
    name: str,
    service: str,
    kind: SpanKind = SpanKind.INTERNAL,
    **attributes: SpanAttribute,
) -> Generator["Span"]:
    """
    Open a span around one service operation and mark it OK when the block completes.

    ``service`` becomes the ``peer.service`` attribute. Exceptions are left to
    the SDK, which records them and sets ERROR status. A block that handles a
    failure itself may set ERROR on the span; that status is kept. The tracer
    is resolved on each call, so spans go to whichever provider is installed at
    that moment.

    Example:
        with service_span("supabase.sign_up", "supabase", kind=SpanKind.CLIENT) as span:
            response = await client.post(...)
            span.set_attribute("http.status_code", response.status_code)
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(name, kind=kind, attributes={"peer.service": service, **attributes}) as span:
        yield span
        if not isinstance(span, ReadableSpan) or span.status.is_unset:
            span.set_status(Status(StatusCode.OK))
