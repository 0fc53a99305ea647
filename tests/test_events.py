"""Tests for the observability event bus."""

from uipatch.events import EventBus, ObservabilityEvent, ObservabilityEventType


class TestEventBus:
    def test_no_handler_is_noop(self):
        EventBus().emit(ObservabilityEventType.SESSION_START)

    def test_emit_stamps_event(self):
        events: list[ObservabilityEvent] = []
        bus = EventBus(events.append, meta={"kind": "session"})
        bus.emit(ObservabilityEventType.PATCH_APPLIED, index=0)

        assert len(events) == 1
        event = events[0]
        assert event.type == ObservabilityEventType.PATCH_APPLIED
        assert event.stream_id == bus.stream_id
        assert event.meta == {"kind": "session", "index": 0}
        assert event.ts > 0

    def test_event_meta_overrides_bus_meta(self):
        events = []
        bus = EventBus(events.append, meta={"source": "bus"})
        bus.emit(ObservabilityEventType.ABORT_REQUESTED, source="user")
        assert events[0].meta["source"] == "user"

    def test_stream_ids_are_unique(self):
        ids = [EventBus().stream_id for _ in range(5)]
        assert len(set(ids)) == 5

    def test_explicit_stream_id(self):
        assert EventBus(stream_id="fixed").stream_id == "fixed"

    def test_event_type_values(self):
        assert ObservabilityEventType.SESSION_START.value == "SESSION_START"
        assert ObservabilityEventType("PATCH_SKIPPED") is ObservabilityEventType.PATCH_SKIPPED
