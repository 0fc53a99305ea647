"""Session state management."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .tree import Tree
from .types import SessionStatus


@dataclass
class SessionState:
    """Runtime state of one session.

    `tree` and `lines` only ever move forward: each applied line replaces
    the snapshot and appends to the log. Terminal transitions happen once.
    """

    prompt: str = ""
    status: SessionStatus = SessionStatus.IDLE
    tree: Tree = field(default_factory=Tree.empty)
    lines: list[str] = field(default_factory=list)
    skipped_count: int = 0
    error: Exception | None = None
    started_at: float | None = None
    first_line_at: float | None = None
    ended_at: float | None = None
    duration: float | None = None

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE


def create_state(prompt: str = "") -> SessionState:
    """Create fresh session state."""
    return SessionState(prompt=prompt)


def mark_active(state: SessionState) -> None:
    state.status = SessionStatus.ACTIVE
    state.started_at = time.time()


def append_line(state: SessionState, tree: Tree, line: str) -> None:
    """Record an applied line and the snapshot it produced."""
    if state.first_line_at is None:
        state.first_line_at = time.time()
    state.tree = tree
    state.lines.append(line)


def _finish(state: SessionState, status: SessionStatus) -> bool:
    if state.status.is_terminal:
        return False
    state.status = status
    state.ended_at = time.time()
    if state.started_at is not None:
        state.duration = state.ended_at - state.started_at
    return True


def mark_completed(state: SessionState) -> bool:
    """Mark session completed. Returns False if it had already ended."""
    return _finish(state, SessionStatus.COMPLETED)


def mark_cancelled(state: SessionState) -> bool:
    """Mark session cancelled. Returns False if it had already ended."""
    return _finish(state, SessionStatus.CANCELLED)


def mark_failed(state: SessionState, error: Exception) -> bool:
    """Mark session failed with `error`. Returns False if it had already ended."""
    if not _finish(state, SessionStatus.FAILED):
        return False
    state.error = error
    return True
