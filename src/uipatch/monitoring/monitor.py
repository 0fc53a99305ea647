"""Monitor: folds observability events into per-session telemetry."""

from __future__ import annotations

from collections.abc import Callable

from ..events import ObservabilityEvent, ObservabilityEventType
from .telemetry import ErrorInfo, SessionTelemetry


class Monitor:
    """Collect telemetry for every session seen on the event stream.

    Usage:
        ```python
        from uipatch.monitoring import Monitor

        monitor = Monitor(on_complete=lambda t: print(t.line_count))
        controller = SessionController(transport, on_event=monitor.handle_event)

        await controller.start("Create a login form").wait()
        telemetry = monitor.get_telemetry()
        print(telemetry.status, telemetry.time_to_first_line)
        ```
    """

    def __init__(
        self,
        on_complete: Callable[[SessionTelemetry], None] | None = None,
    ) -> None:
        self._on_complete = on_complete
        self._sessions: dict[str, SessionTelemetry] = {}
        self._last_id: str | None = None

    def handle_event(self, event: ObservabilityEvent) -> None:
        telemetry = self._sessions.get(event.stream_id)
        if telemetry is None:
            telemetry = SessionTelemetry(
                stream_id=event.stream_id,
                kind=event.meta.get("kind", "session"),
            )
            self._sessions[event.stream_id] = telemetry
        self._last_id = event.stream_id

        if event.type is ObservabilityEventType.SESSION_START:
            telemetry.started_at = event.ts
        elif event.type is ObservabilityEventType.ADAPTER_DETECTED:
            telemetry.adapter = event.meta.get("adapter")
        elif event.type is ObservabilityEventType.PATCH_APPLIED:
            if telemetry.first_line_at is None:
                telemetry.first_line_at = event.ts
            telemetry.line_count += 1
        elif event.type is ObservabilityEventType.PATCH_SKIPPED:
            telemetry.skipped_count += 1
        elif event.type is ObservabilityEventType.ERROR:
            telemetry.error = ErrorInfo(
                occurred=True,
                message=event.meta.get("error"),
                code=event.meta.get("code"),
            )
        elif event.type is ObservabilityEventType.SESSION_END:
            telemetry.status = event.meta.get("status")
            telemetry.ended_at = event.ts
            if self._on_complete is not None:
                self._on_complete(telemetry)

    def get_telemetry(self, stream_id: str | None = None) -> SessionTelemetry | None:
        """Get telemetry for a session, or the most recent one."""
        key = stream_id or self._last_id
        if key is None:
            return None
        return self._sessions.get(key)

    def all(self) -> list[SessionTelemetry]:
        return list(self._sessions.values())

    def reset(self) -> None:
        self._sessions.clear()
        self._last_id = None
