"""Tests for OpenTelemetry telemetry module."""

import pytest
from bill.core import telemetry
from bill.core.config import settings
from bill.core.telemetry import get_tracer_provider, parse_otlp_headers, service_span
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, Status, StatusCode


class TestServiceSpan:
    """Tests for service_span context manager."""

    def test_keeps_error_status_set_by_block(
        self, otel_enabled_provider: tuple[TracerProvider, InMemorySpanExporter]
    ) -> None:
        """Test that a handled failure marked on the span is not overwritten with OK."""
        _, exporter = otel_enabled_provider

        with service_span("signup.execute", "signup-service") as span:
            span.set_status(Status(StatusCode.ERROR, "BILL-500"))

        finished = exporter.get_finished_spans()[0]
        assert finished.status.status_code == StatusCode.ERROR
        assert finished.status.description == "BILL-500"

    def test_sets_ok_status_and_peer_service(
        self, otel_enabled_provider: tuple[TracerProvider, InMemorySpanExporter]
    ) -> None:
        """Test that a successful block ends with OK status."""
        _, exporter = otel_enabled_provider

        with service_span("signup.execute", "signup-service", **{"user.email_hash": "abc"}):
            pass

        spans = exporter.get_finished_spans()
        assert len(spans) == 1
        span = spans[0]
        assert span.name == "signup.execute"
        assert span.status.status_code == StatusCode.OK
        assert span.attributes["peer.service"] == "signup-service"
        assert span.attributes["user.email_hash"] == "abc"
        assert span.kind == SpanKind.INTERNAL

    def test_error_status_on_exception(
        self, otel_enabled_provider: tuple[TracerProvider, InMemorySpanExporter]
    ) -> None:
        """Test that the SDK marks the span as errored when the block raises."""
        _, exporter = otel_enabled_provider

        with pytest.raises(RuntimeError, match="boom"), service_span("supabase.sign_up", "supabase"):
            raise RuntimeError("boom")

        span = exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR

    def test_client_kind(self, otel_enabled_provider: tuple[TracerProvider, InMemorySpanExporter]) -> None:
        _, exporter = otel_enabled_provider

        with service_span("supabase.sign_up", "supabase", kind=SpanKind.CLIENT):
            pass

        assert exporter.get_finished_spans()[0].kind == SpanKind.CLIENT


class TestTracerProvider:
    """Tests for lazy TracerProvider creation."""

    def test_disabled_returns_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "OTEL_ENABLED", False)

        assert get_tracer_provider() is None

    def test_enabled_creates_provider_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the provider is created lazily and reused."""
        monkeypatch.setattr(settings, "OTEL_ENABLED", True)
        monkeypatch.setattr(settings, "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT", None)

        first = get_tracer_provider()
        second = get_tracer_provider()

        assert isinstance(first, TracerProvider)
        assert first is second
        assert first.resource.attributes["service.name"] == settings.OTEL_SERVICE_NAME

        telemetry.shutdown_tracer_provider()


class TestParseOtlpHeaders:
    def test_pairs(self) -> None:
        assert parse_otlp_headers("Authorization=Bearer token123,X-Custom=value") == {
            "Authorization": "Bearer token123",
            "X-Custom": "value",
        }

    def test_value_containing_equals(self) -> None:
        assert parse_otlp_headers("Authorization=Basic dXNlcjpwYXNz==") == {"Authorization": "Basic dXNlcjpwYXNz=="}

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty(self, value: str) -> None:
        assert parse_otlp_headers(value) == {}

    def test_skips_malformed_pairs(self) -> None:
        assert parse_otlp_headers("broken, X-Key=1") == {"X-Key": "1"}
