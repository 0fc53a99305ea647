"""Workbench: one consumer view over playback and live sessions.

Starts in simulation mode, replaying the contact-form script, then hands
over to interactive mode where prompts start live sessions. Both producers
publish the same Update shape, so the view only tracks the latest tree and
raw-line log.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

from ._utils import fire_callback
from .config import PlaybackConfig
from .events import ObservabilityEvent
from .logging import logger
from .playback import PlaybackCallbacks, PlaybackEngine, Sleep
from .script import CONTACT_FORM_SCRIPT, Stage
from .session import Session, SessionCallbacks, SessionController
from .state import SessionState
from .tree import Tree, is_ready, tree_to_json
from .types import Mode, Phase, SessionStatus, Transport, Update

STATUS_READY = "ready"
STATUS_GENERATING = "generating..."
STATUS_WAITING = "waiting..."


class Workbench:
    """Coordinates the playback engine and the session controller.

    Usage:
        bench = Workbench(HttpTransport(), on_change=redraw)
        bench.start()           # simulation mode
        bench.stop()            # skip to interactive mode
        session = bench.submit("Create a login form")
        await session.wait()
        print(bench.json_view())
    """

    def __init__(
        self,
        transport: Transport,
        *,
        script: Sequence[Stage] = CONTACT_FORM_SCRIPT,
        playback_config: PlaybackConfig | None = None,
        on_change: Callable[[], None] | None = None,
        on_event: Callable[[ObservabilityEvent], None] | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.mode = Mode.SIMULATION
        self.error: Exception | None = None
        self._on_change = on_change
        self._tree: Tree | None = None
        self._lines: tuple[str, ...] = ()
        self._typed_prompt = ""

        self._playback = PlaybackEngine(
            script,
            config=playback_config,
            callbacks=PlaybackCallbacks(
                on_typing=self._on_typing,
                on_phase=lambda phase: self._changed(),
                on_update=self._on_playback_update,
                on_complete=self._on_playback_complete,
            ),
            on_event=on_event,
            sleep=sleep,
        )
        self._controller = SessionController(
            transport,
            callbacks=SessionCallbacks(
                on_update=self._on_session_update,
                on_complete=self._on_session_end,
                on_cancel=self._on_session_end,
                on_error=self._on_session_error,
            ),
            on_event=on_event,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # View
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def playback(self) -> PlaybackEngine:
        return self._playback

    @property
    def controller(self) -> SessionController:
        return self._controller

    @property
    def tree(self) -> Tree | None:
        return self._tree

    @property
    def lines(self) -> tuple[str, ...]:
        return self._lines

    @property
    def typed_prompt(self) -> str:
        return self._typed_prompt

    @property
    def is_loading(self) -> bool:
        return self._controller.status is SessionStatus.ACTIVE

    @property
    def is_streaming(self) -> bool:
        """True while either producer is publishing lines."""
        simulating = (
            self.mode is Mode.SIMULATION and self._playback.phase is Phase.STREAMING
        )
        return simulating or self.is_loading

    def json_view(self) -> str:
        return tree_to_json(self._tree)

    def preview_status(self) -> str:
        if is_ready(self._tree):
            return STATUS_READY
        return STATUS_GENERATING if self.is_loading else STATUS_WAITING

    # ─────────────────────────────────────────────────────────────────────────
    # Control
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> asyncio.Task[None]:
        """Start the simulation."""
        return self._playback.start()

    def stop(self) -> None:
        """Stop whatever is running; in simulation mode skip to interactive."""
        self._controller.cancel()
        if self.mode is Mode.SIMULATION:
            self._playback.cancel()
            self._enter_interactive()
            self._typed_prompt = self._playback.config.prompt
            self._changed()

    def submit(self, prompt: str) -> Session | None:
        """Start a live session for `prompt`. Blank prompts are ignored."""
        if not prompt or not prompt.strip():
            return None

        if self.mode is Mode.SIMULATION:
            self.stop()

        self._tree = Tree.empty()
        self._lines = ()
        self._typed_prompt = prompt
        self.error = None
        session = self._controller.start(prompt)
        self._changed()
        return session

    async def wait(self) -> None:
        """Wait for the playback and the current session to end."""
        await self._playback.wait()
        await self._controller.wait()

    # ─────────────────────────────────────────────────────────────────────────
    # Producer callbacks
    # ─────────────────────────────────────────────────────────────────────────

    def _on_typing(self, text: str) -> None:
        if self.mode is Mode.SIMULATION:
            self._typed_prompt = text
            self._changed()

    def _on_playback_update(self, update: Update) -> None:
        if self.mode is Mode.SIMULATION:
            self._show(update)

    def _on_playback_complete(self, cancelled: bool) -> None:
        if self.mode is Mode.SIMULATION:
            self._enter_interactive()
            self._changed()

    def _on_session_update(self, update: Update) -> None:
        current = self._controller.current
        if current is not None and current.id == update.session_id:
            self._show(update)

    def _on_session_end(self, state: SessionState) -> None:
        self._changed()

    def _on_session_error(self, error: Exception, state: SessionState) -> None:
        self.error = error
        self._changed()

    def _show(self, update: Update) -> None:
        self._tree = update.tree
        self._lines = update.lines
        self._changed()

    def _enter_interactive(self) -> None:
        logger.debug("Switching to interactive mode")
        self.mode = Mode.INTERACTIVE

    def _changed(self) -> None:
        fire_callback(self._on_change)
