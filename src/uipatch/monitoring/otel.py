"""OpenTelemetry integration for uipatch monitoring."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from ..logging import logger
from .telemetry import SessionTelemetry

if TYPE_CHECKING:
    from opentelemetry.metrics import Meter
    from opentelemetry.trace import Tracer


class OpenTelemetryConfig(BaseModel):
    """OpenTelemetry configuration.

    Attributes:
        service_name: Service name for traces and metrics
        endpoint: OTLP endpoint URL (no export when unset)
        headers: Additional headers for OTLP requests
        insecure: Use insecure connection (no TLS)
        timeout: Request timeout in seconds
        enabled: Enable/disable OpenTelemetry export
        trace_enabled: Enable trace export
        metrics_enabled: Enable metrics export
    """

    service_name: str = "uipatch"
    endpoint: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    insecure: bool = False
    timeout: float = Field(default=30.0, ge=1.0)
    enabled: bool = True
    trace_enabled: bool = True
    metrics_enabled: bool = True

    @classmethod
    def from_env(cls) -> OpenTelemetryConfig:
        """Create config from environment variables.

        Reads:
            - OTEL_SERVICE_NAME
            - OTEL_EXPORTER_OTLP_ENDPOINT
            - OTEL_EXPORTER_OTLP_HEADERS
            - OTEL_EXPORTER_OTLP_INSECURE
        """
        headers = {}
        headers_str = os.getenv("OTEL_EXPORTER_OTLP_HEADERS", "")
        if headers_str:
            for pair in headers_str.split(","):
                if "=" in pair:
                    key, value = pair.split("=", 1)
                    headers[key.strip()] = value.strip()

        return cls(
            service_name=os.getenv("OTEL_SERVICE_NAME", "uipatch"),
            endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"),
            headers=headers,
            insecure=os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "").lower() == "true",
        )


class OpenTelemetryExporter:
    """Export session telemetry to OpenTelemetry.

    Usage:
        ```python
        from uipatch.monitoring import Monitor, OpenTelemetryConfig, OpenTelemetryExporter

        otel = OpenTelemetryExporter(OpenTelemetryConfig.from_env())
        monitor = Monitor(on_complete=otel.export)
        ```

    Requires:
        pip install uipatch[observability]
    """

    def __init__(self, config: OpenTelemetryConfig) -> None:
        self.config = config
        self._tracer: Tracer | None = None
        self._meter: Meter | None = None
        self._instruments: dict[str, Any] = {}
        self._initialized = False

    def _ensure_initialized(self) -> None:
        """Lazily initialize OpenTelemetry components."""
        if self._initialized:
            return

        try:
            from opentelemetry import metrics, trace
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.resources import Resource
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError as e:
            raise ImportError(
                "OpenTelemetry packages not installed. "
                "Install with: pip install uipatch[observability]"
            ) from e

        resource = Resource.create({"service.name": self.config.service_name})

        if self.config.trace_enabled:
            tracer_provider = TracerProvider(resource=resource)

            if self.config.endpoint:
                from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                    OTLPSpanExporter,
                )
                from opentelemetry.sdk.trace.export import BatchSpanProcessor

                span_exporter = OTLPSpanExporter(
                    endpoint=self.config.endpoint,
                    headers=self.config.headers or None,
                    insecure=self.config.insecure,
                    timeout=int(self.config.timeout),
                )
                tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

            trace.set_tracer_provider(tracer_provider)
            self._tracer = trace.get_tracer(self.config.service_name)

        if self.config.metrics_enabled:
            metrics.set_meter_provider(MeterProvider(resource=resource))
            self._meter = metrics.get_meter(self.config.service_name)

        self._initialized = True

    def export(self, telemetry: SessionTelemetry) -> None:
        """Export one session's telemetry as a span and metrics."""
        if not self.config.enabled:
            return

        self._ensure_initialized()

        if self._tracer is not None:
            self._export_trace(telemetry)

        if self._meter is not None:
            self._export_metrics(telemetry)

    def _export_trace(self, telemetry: SessionTelemetry) -> None:
        from opentelemetry import trace
        from opentelemetry.trace import StatusCode

        assert self._tracer is not None
        with self._tracer.start_as_current_span(
            name=f"uipatch.{telemetry.kind}",
            kind=trace.SpanKind.CLIENT,
        ) as span:
            span.set_attribute("uipatch.stream_id", telemetry.stream_id)
            span.set_attribute("uipatch.line_count", telemetry.line_count)
            span.set_attribute("uipatch.skipped_count", telemetry.skipped_count)
            if telemetry.adapter:
                span.set_attribute("uipatch.adapter", telemetry.adapter)
            if telemetry.duration is not None:
                span.set_attribute("uipatch.duration_ms", telemetry.duration * 1000)
            if telemetry.time_to_first_line is not None:
                span.set_attribute(
                    "uipatch.ttfl_ms", telemetry.time_to_first_line * 1000
                )

            if telemetry.error.occurred:
                span.set_status(
                    StatusCode.ERROR, telemetry.error.message or "Unknown error"
                )
                if telemetry.error.code:
                    span.set_attribute("uipatch.error.code", telemetry.error.code)
            elif telemetry.cancelled:
                span.set_status(StatusCode.OK, "Cancelled")
                span.set_attribute("uipatch.cancelled", True)
            elif telemetry.completed:
                span.set_status(StatusCode.OK)

    def _export_metrics(self, telemetry: SessionTelemetry) -> None:
        assert self._meter is not None
        if not self._instruments:
            self._instruments = {
                "lines": self._meter.create_counter(
                    "uipatch.lines",
                    description="Patch lines applied",
                    unit="lines",
                ),
                "duration": self._meter.create_histogram(
                    "uipatch.duration",
                    description="Session duration",
                    unit="s",
                ),
                "sessions": self._meter.create_counter(
                    "uipatch.sessions",
                    description="Sessions by final status",
                    unit="sessions",
                ),
            }

        labels = {"kind": telemetry.kind}
        self._instruments["lines"].add(telemetry.line_count, labels)
        if telemetry.duration is not None:
            self._instruments["duration"].record(telemetry.duration, labels)
        self._instruments["sessions"].add(
            1, {**labels, "status": telemetry.status or "unknown"}
        )

    def shutdown(self) -> None:
        """Shutdown OpenTelemetry providers."""
        if not self._initialized:
            return

        from opentelemetry import metrics, trace

        for provider in (trace.get_tracer_provider(), metrics.get_meter_provider()):
            shutdown = getattr(provider, "shutdown", None)
            if shutdown is not None:
                try:
                    shutdown()
                except Exception as e:
                    logger.debug(f"OpenTelemetry shutdown error: {e}")
