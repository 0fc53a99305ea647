"""uipatch types - shared enums and the published update shape."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .tree import Tree

# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────


class SessionStatus(str, Enum):
    """Lifecycle of a streaming session."""

    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            SessionStatus.COMPLETED,
            SessionStatus.CANCELLED,
            SessionStatus.FAILED,
        )


class Phase(str, Enum):
    """Phase of the playback script engine."""

    TYPING = "typing"
    STREAMING = "streaming"
    COMPLETE = "complete"


class Mode(str, Enum):
    """Which producer currently drives the workbench."""

    SIMULATION = "simulation"
    INTERACTIVE = "interactive"


# ─────────────────────────────────────────────────────────────────────────────
# Published update
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Update:
    """What observers receive for every processed line.

    Live sessions and playback publish the same shape, so one consumer can
    render both.

    `lines` is an immutable copy of the log taken per update, so publishing
    costs O(n) in the log length and a whole stream O(n^2). Fine for
    generated UIs of a few dozen lines; consumers of long streams should read
    `line` and keep their own log.

    Usage:
        def on_update(update: Update) -> None:
            render(update.tree)
            show_stream(update.lines)
    """

    tree: Tree
    line: str  # The line that produced this snapshot
    lines: tuple[str, ...]  # Every line so far, in order, including `line`
    session_id: str


# A transport takes the prompt and returns a raw stream (or an awaitable
# resolving to one) that an adapter can turn into text or byte chunks.
Transport = Callable[[str], Any]
