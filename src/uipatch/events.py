from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from uuid6 import uuid7

# ─────────────────────────────────────────────────────────────────────────────
# Event Types (UPPER_CASE values)
# ─────────────────────────────────────────────────────────────────────────────


class ObservabilityEventType(str, Enum):
    # Session
    SESSION_START = "SESSION_START"
    SESSION_END = "SESSION_END"
    SESSION_SUMMARY = "SESSION_SUMMARY"

    # Stream
    STREAM_INIT = "STREAM_INIT"
    STREAM_READY = "STREAM_READY"
    STREAM_FLUSH = "STREAM_FLUSH"

    # Adapter
    ADAPTER_DETECTED = "ADAPTER_DETECTED"

    # Patch
    PATCH_APPLIED = "PATCH_APPLIED"
    PATCH_SKIPPED = "PATCH_SKIPPED"

    # Abort
    ABORT_REQUESTED = "ABORT_REQUESTED"
    ABORT_COMPLETED = "ABORT_COMPLETED"

    # Playback
    PLAYBACK_TYPING_START = "PLAYBACK_TYPING_START"
    PLAYBACK_TYPING_END = "PLAYBACK_TYPING_END"
    PLAYBACK_STAGE = "PLAYBACK_STAGE"

    # Completion
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


# ─────────────────────────────────────────────────────────────────────────────
# Observability Event
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ObservabilityEvent:
    type: ObservabilityEventType
    ts: float
    stream_id: str
    meta: dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Central event bus for session and playback observability.

    Every bus owns a stream id (UUIDv7, time-ordered) that is stamped on all
    events it emits; sessions use it as their own id.
    """

    def __init__(
        self,
        handler: Callable[[ObservabilityEvent], None] | None = None,
        meta: dict[str, Any] | None = None,
        stream_id: str | None = None,
    ):
        self._handler = handler
        self._stream_id = stream_id or str(uuid7())
        self._meta = meta or {}

    @property
    def stream_id(self) -> str:
        return self._stream_id

    def emit(self, event_type: ObservabilityEventType, **event_meta: Any) -> None:
        if not self._handler:
            return

        event = ObservabilityEvent(
            type=event_type,
            ts=time.time() * 1000,
            stream_id=self._stream_id,
            meta={**self._meta, **event_meta},
        )
        self._handler(event)
