"""Event Handler Utilities.

Helpers for combining and composing event handlers for session and
playback observability.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..events import ObservabilityEvent, ObservabilityEventType
from ..logging import logger

# Event handler type
EventHandler = Callable[[ObservabilityEvent], None]


def combine_events(*handlers: EventHandler | None) -> EventHandler:
    """Combine multiple event handlers into a single handler.

    Args:
        handlers: Event handlers to combine (None values are filtered out)

    Returns:
        A single event handler that calls all provided handlers

    Example:
        ```python
        from uipatch.monitoring import Monitor, combine_events

        monitor = Monitor()
        controller = SessionController(
            transport,
            on_event=combine_events(
                monitor.handle_event,
                lambda e: print(e.type),  # custom handler
            ),
        )
        ```
    """
    valid_handlers = [h for h in handlers if h is not None]

    if len(valid_handlers) == 0:
        return lambda event: None

    if len(valid_handlers) == 1:
        return valid_handlers[0]

    def combined_handler(event: ObservabilityEvent) -> None:
        for handler in valid_handlers:
            try:
                handler(event)
            except Exception as e:
                # One handler failing shouldn't break the others
                logger.debug(f"Event handler error for {event.type}: {e}")

    return combined_handler


def filter_events(
    types: Iterable[ObservabilityEventType | str],
    handler: EventHandler,
) -> EventHandler:
    """Create a filtered event handler that only receives specific event types.

    Example:
        ```python
        from uipatch.events import ObservabilityEventType
        from uipatch.monitoring import filter_events

        error_handler = filter_events(
            [ObservabilityEventType.ERROR],
            lambda event: send_to_alert_system(event),
        )
        ```
    """
    type_set = {ObservabilityEventType(t) for t in types}

    def filtered_handler(event: ObservabilityEvent) -> None:
        if event.type in type_set:
            handler(event)

    return filtered_handler


def exclude_events(
    types: Iterable[ObservabilityEventType | str],
    handler: EventHandler,
) -> EventHandler:
    """Create an event handler that skips specific event types.

    Useful for dropping per-line events like PATCH_APPLIED.
    """
    type_set = {ObservabilityEventType(t) for t in types}

    def excluded_handler(event: ObservabilityEvent) -> None:
        if event.type not in type_set:
            handler(event)

    return excluded_handler


def log_events(level: int = logging.DEBUG) -> EventHandler:
    """Create a handler that writes every event to the uipatch logger."""

    def logging_handler(event: ObservabilityEvent) -> None:
        logger.log(level, f"{event.type.value} {event.stream_id} {event.meta}")

    return logging_handler
