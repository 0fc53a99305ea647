"""Session telemetry collected from observability events."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorInfo(BaseModel):
    """Failure details, if the session failed."""

    occurred: bool = False
    message: str | None = None
    code: str | None = None


class SessionTelemetry(BaseModel):
    """Telemetry for one session or playback run.

    Attributes:
        stream_id: Event bus stream id (the session id)
        kind: "session" for live sessions, "playback" for scripted runs
        status: Final status ("completed", "cancelled", "failed"), None while running
        adapter: Name of the adapter that handled the transport stream
        line_count: Patch lines applied and published
        skipped_count: Lines that were not patches
        started_at: Start timestamp (ms)
        first_line_at: Timestamp of the first applied line (ms)
        ended_at: End timestamp (ms)
        error: Failure details
    """

    stream_id: str
    kind: str = "session"
    status: str | None = None
    adapter: str | None = None
    line_count: int = 0
    skipped_count: int = 0
    started_at: float | None = None
    first_line_at: float | None = None
    ended_at: float | None = None
    error: ErrorInfo = Field(default_factory=ErrorInfo)

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"

    @property
    def duration(self) -> float | None:
        """Duration in seconds."""
        if self.started_at is None or self.ended_at is None:
            return None
        return (self.ended_at - self.started_at) / 1000

    @property
    def time_to_first_line(self) -> float | None:
        """Seconds from start to the first applied line."""
        if self.started_at is None or self.first_line_at is None:
            return None
        return (self.first_line_at - self.started_at) / 1000
