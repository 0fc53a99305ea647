"""Deterministic playback of a staged script.

The engine reveals a prompt one character at a time, then publishes each
pre-built stage on a fixed interval, then completes. It is a small state
machine (TYPING -> STREAMING -> COMPLETE); every step is one timer wait
followed by one transition or publish, so cancellation is a single edge to
COMPLETE from anywhere.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from ._utils import fire_callback
from .config import PlaybackConfig
from .events import EventBus, ObservabilityEvent, ObservabilityEventType
from .logging import logger
from .script import CONTACT_FORM_SCRIPT, Stage
from .tree import Tree
from .types import Phase, Update

Sleep = Callable[[float], Awaitable[Any]]


@dataclass
class PlaybackCallbacks:
    """Playback observers. Fire-and-forget, like session callbacks."""

    on_typing: Callable[[str], None] | None = None
    """Called with the prompt revealed so far, one character at a time."""

    on_phase: Callable[[Phase], None] | None = None
    """Called on every phase transition."""

    on_update: Callable[[Update], None] | None = None
    """Called for every published stage (same shape as live sessions)."""

    on_complete: Callable[[bool], None] | None = None
    """Called once on reaching COMPLETE. Args: (cancelled: bool)"""


class PlaybackEngine:
    """Replays a fixed script of (snapshot, line) stages on timers.

    Usage:
        engine = PlaybackEngine(
            callbacks=PlaybackCallbacks(on_update=lambda u: render(u.tree)),
        )
        engine.start()
        ...
        engine.cancel()  # freezes at the current stage
        await engine.wait()
    """

    def __init__(
        self,
        script: Sequence[Stage] = CONTACT_FORM_SCRIPT,
        *,
        config: PlaybackConfig | None = None,
        callbacks: PlaybackCallbacks | None = None,
        on_event: Callable[[ObservabilityEvent], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.script = tuple(script)
        self.config = config or PlaybackConfig()
        self._callbacks = callbacks or PlaybackCallbacks()
        self._bus = EventBus(on_event, meta={"kind": "playback"})
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

        self._phase = Phase.TYPING
        self._started = False
        self._cancelled = False
        self._typed = 0
        self._stage_index = -1
        self._lines: list[str] = []

    # ─────────────────────────────────────────────────────────────────────────
    # Observable state
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def id(self) -> str:
        return self._bus.stream_id

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def typed_prompt(self) -> str:
        return self.config.prompt[: self._typed]

    @property
    def stage_index(self) -> int:
        """Index of the last published stage, -1 before the first."""
        return self._stage_index

    @property
    def tree(self) -> Tree | None:
        """Snapshot of the last published stage."""
        if self._stage_index < 0:
            return None
        return self.script[self._stage_index].tree

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    # ─────────────────────────────────────────────────────────────────────────
    # Control
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> asyncio.Task[None]:
        """Run the engine as a task on the running loop."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def run(self) -> None:
        """Drive the state machine until COMPLETE.

        When awaited directly instead of through start(), a cancel() from
        another task interrupts the pending timer by cancelling the awaiting
        task, so CancelledError propagates to the caller.
        """
        if self._started:
            raise RuntimeError("Playback already started")
        self._started = True
        borrowed = self._task is None
        if borrowed:
            # Awaited directly: cancel() interrupts the caller's task
            self._task = asyncio.current_task()

        logger.debug(f"Starting playback: {self.id}")
        self._bus.emit(ObservabilityEventType.SESSION_START, stages=len(self.script))
        self._bus.emit(ObservabilityEventType.PLAYBACK_TYPING_START)
        try:
            while self._phase is not Phase.COMPLETE:
                if self._phase is Phase.TYPING:
                    await self._type_step()
                else:
                    await self._stream_step()
        except asyncio.CancelledError:
            self.cancel()
            raise
        finally:
            if borrowed:
                self._task = None

    def cancel(self) -> None:
        """Truncate at the current stage and complete. Idempotent."""
        if self._phase is Phase.COMPLETE:
            return

        logger.debug(f"Playback cancelled at stage {self._stage_index}")
        self._cancelled = True
        self._bus.emit(ObservabilityEventType.ABORT_REQUESTED, source="user")
        self._transition(Phase.COMPLETE)

        if (
            self._task is not None
            and not self._task.done()
            and self._task is not asyncio.current_task()
        ):
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the engine task to finish."""
        if self._task is not None:
            await asyncio.wait([self._task])

    # ─────────────────────────────────────────────────────────────────────────
    # State machine steps
    # ─────────────────────────────────────────────────────────────────────────

    async def _type_step(self) -> None:
        prompt = self.config.prompt
        if self._typed < len(prompt):
            await self._sleep(self.config.char_interval)
            if self._phase is not Phase.TYPING:
                return
            self._typed += 1
            fire_callback(self._callbacks.on_typing, self.typed_prompt)
            return

        await self._sleep(self.config.typing_pause)
        if self._phase is Phase.TYPING:
            self._bus.emit(ObservabilityEventType.PLAYBACK_TYPING_END)
            self._transition(Phase.STREAMING)

    async def _stream_step(self) -> None:
        next_index = self._stage_index + 1
        if next_index < len(self.script):
            await self._sleep(self.config.stage_interval)
            if self._phase is not Phase.STREAMING:
                return
            self._publish(next_index)
            return

        await self._sleep(self.config.complete_pause)
        if self._phase is Phase.STREAMING:
            self._transition(Phase.COMPLETE)

    def _publish(self, index: int) -> None:
        stage = self.script[index]
        self._stage_index = index
        self._lines.append(stage.line)
        self._bus.emit(ObservabilityEventType.PLAYBACK_STAGE, index=index)
        self._bus.emit(ObservabilityEventType.PATCH_APPLIED, index=index)
        fire_callback(
            self._callbacks.on_update,
            Update(
                tree=stage.tree,
                line=stage.line,
                lines=tuple(self._lines),
                session_id=self.id,
            ),
        )

    def _transition(self, phase: Phase) -> None:
        self._phase = phase
        fire_callback(self._callbacks.on_phase, phase)
        if phase is not Phase.COMPLETE:
            return

        status = "cancelled" if self._cancelled else "completed"
        self._bus.emit(
            ObservabilityEventType.COMPLETE,
            line_count=len(self._lines),
            cancelled=self._cancelled,
        )
        self._bus.emit(
            ObservabilityEventType.SESSION_SUMMARY,
            status=status,
            line_count=len(self._lines),
            skipped_count=0,
            duration=None,
        )
        self._bus.emit(ObservabilityEventType.SESSION_END, status=status)
        fire_callback(self._callbacks.on_complete, self._cancelled)
