"""uipatch Monitoring & Telemetry.

Usage:
    ```python
    from uipatch.monitoring import Monitor, combine_events

    monitor = Monitor()
    controller = SessionController(transport, on_event=monitor.handle_event)

    # With OpenTelemetry and Sentry
    from uipatch.monitoring import (
        OpenTelemetryConfig,
        OpenTelemetryExporter,
        SentryConfig,
        SentryExporter,
    )

    otel = OpenTelemetryExporter(OpenTelemetryConfig.from_env())
    sentry = SentryExporter(SentryConfig.from_env())
    monitor = Monitor(
        on_complete=lambda t: (otel.export(t), sentry.capture_telemetry_error(t)),
    )
    ```
"""

from .handlers import (
    EventHandler,
    combine_events,
    exclude_events,
    filter_events,
    log_events,
)
from .monitor import Monitor
from .otel import OpenTelemetryConfig, OpenTelemetryExporter
from .sentry import SentryConfig, SentryExporter
from .telemetry import ErrorInfo, SessionTelemetry

__all__ = [
    # Handlers
    "EventHandler",
    "combine_events",
    "exclude_events",
    "filter_events",
    "log_events",
    # Monitor
    "Monitor",
    "SessionTelemetry",
    "ErrorInfo",
    # Exporters
    "OpenTelemetryConfig",
    "OpenTelemetryExporter",
    "SentryConfig",
    "SentryExporter",
]
