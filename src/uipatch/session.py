"""Streaming session runtime.

One session consumes one transport request: chunks are framed into lines,
each line is parsed and reduced into the running tree, and every resulting
snapshot is published to observers in order. A controller keeps at most one
session active and supersedes it when a new request starts.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

from ._utils import aclose, fire_callback
from .adapters import Adapter, Adapters
from .errors import Error
from .events import EventBus, ObservabilityEvent, ObservabilityEventType
from .framer import LineFramer, frame_lines
from .logging import logger
from .parser import parse_patch
from .reducer import apply_patch
from .state import (
    SessionState,
    append_line,
    create_state,
    mark_active,
    mark_cancelled,
    mark_completed,
    mark_failed,
)
from .tree import Tree
from .types import SessionStatus, Transport, Update

# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle Callbacks
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class SessionCallbacks:
    """Lifecycle callbacks for a session.

    All callbacks are fire-and-forget: errors raised by a callback are
    logged and swallowed so an observer can never break the stream.
    """

    on_start: Callable[[Session], None] | None = None
    """Called when a session becomes active.
    Args: (session: Session)
    """

    on_update: Callable[[Update], None] | None = None
    """Called for every applied patch line, in order.
    Args: (update: Update)
    """

    on_complete: Callable[[SessionState], None] | None = None
    """Called when the transport ended and the residual line was flushed.
    Args: (state: SessionState)
    """

    on_cancel: Callable[[SessionState], None] | None = None
    """Called when the session is cancelled or superseded.
    Args: (state: SessionState)
    """

    on_error: Callable[[Exception, SessionState], None] | None = None
    """Called when the transport fails. Never called for cancellation.
    Args: (error: Exception, state: SessionState)
    """


# ─────────────────────────────────────────────────────────────────────────────
# Transport-free pipeline
# ─────────────────────────────────────────────────────────────────────────────


async def reconcile(
    chunks: AsyncIterable[str | bytes],
    tree: Tree | None = None,
) -> AsyncIterator[tuple[Tree, str]]:
    """Frame, parse and reduce a chunk stream.

    Yields (snapshot, trimmed line) for every line that is a patch. Lines
    that are not patches are skipped.

    Usage:
        async for tree, line in reconcile(chunks):
            render(tree)
    """
    current = tree if tree is not None else Tree.empty()
    async for line in frame_lines(chunks):
        patch = parse_patch(line)
        if patch is None:
            continue
        current = apply_patch(current, patch)
        yield current, line.strip()


# ─────────────────────────────────────────────────────────────────────────────
# Session
# ─────────────────────────────────────────────────────────────────────────────


class Session:
    """Handle for one streaming session.

    Usage:
        session = controller.start("Create a login form")

        # Stop early (idempotent)
        session.cancel()

        # Wait for the end; never raises for failed or cancelled sessions
        state = await session.wait()
        print(state.status, state.tree, state.lines)

        # Context manager cancels on exit
        async with controller.start(prompt) as session:
            await session.wait()
    """

    def __init__(
        self,
        prompt: str,
        *,
        callbacks: SessionCallbacks | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.state = create_state(prompt)
        self._callbacks = callbacks or SessionCallbacks()
        self._bus = event_bus or EventBus()
        self._task: asyncio.Task[None] | None = None

    @property
    def id(self) -> str:
        return self._bus.stream_id

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def done(self) -> bool:
        return self.state.status.is_terminal

    def __repr__(self) -> str:
        return f"Session(id={self.id!r}, status={self.state.status.value!r})"

    # ─────────────────────────────────────────────────────────────────────────
    # Control
    # ─────────────────────────────────────────────────────────────────────────

    def start(self, transport: Transport, adapter: Adapter | str | None = None) -> None:
        """Activate the session and schedule its run on the running loop."""
        if self.state.status is not SessionStatus.IDLE:
            raise RuntimeError(f"Session already started: {self.state.status.value}")

        mark_active(self.state)
        logger.debug(f"Starting session: {self.id}")
        self._bus.emit(ObservabilityEventType.SESSION_START, prompt=self.state.prompt)
        self._task = asyncio.get_running_loop().create_task(
            self._run(transport, adapter)
        )
        fire_callback(self._callbacks.on_start, self)

    def cancel(self) -> None:
        """Cancel the session. No-op once the session has ended."""
        if not mark_cancelled(self.state):
            return

        logger.debug(f"Cancel requested: {self.id}")
        self._bus.emit(ObservabilityEventType.ABORT_REQUESTED, source="user")
        if (
            self._task is not None
            and not self._task.done()
            and self._task is not asyncio.current_task()
        ):
            self._task.cancel()
        self._bus.emit(
            ObservabilityEventType.ABORT_COMPLETED,
            line_count=self.state.line_count,
        )
        self._end()
        fire_callback(self._callbacks.on_cancel, self.state)

    async def wait(self) -> SessionState:
        """Wait for the session to end and return its final state."""
        if self._task is not None:
            await asyncio.wait([self._task])
        return self.state

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        self.cancel()
        return False  # Don't suppress exceptions

    # ─────────────────────────────────────────────────────────────────────────
    # Run loop
    # ─────────────────────────────────────────────────────────────────────────

    async def _run(self, transport: Transport, adapter_hint: Adapter | str | None) -> None:
        framer = LineFramer()
        raw: Any = None
        chunks: Any = None

        try:
            self._bus.emit(ObservabilityEventType.STREAM_INIT)
            raw = transport(self.state.prompt)

            # Transports may be sync or async factories
            if inspect.isawaitable(raw):
                raw = await raw

            adapter = Adapters.detect(raw, adapter_hint)
            self._bus.emit(ObservabilityEventType.ADAPTER_DETECTED, adapter=adapter.name)
            self._bus.emit(ObservabilityEventType.STREAM_READY)

            chunks = adapter.wrap(raw)
            async for chunk in chunks:
                for line in framer.feed(chunk):
                    if not self._process(line):
                        return

            residual = framer.flush()
            if residual:
                self._bus.emit(
                    ObservabilityEventType.STREAM_FLUSH, length=len(residual[0])
                )
            for line in residual:
                if not self._process(line):
                    return

        except asyncio.CancelledError:
            # cancel() has normally recorded the transition already
            if mark_cancelled(self.state):
                self._end()
                fire_callback(self._callbacks.on_cancel, self.state)
            raise

        except Exception as e:
            self._fail(e)
            return

        finally:
            await self._close(chunks, raw)

        if mark_completed(self.state):
            logger.debug(f"Session complete: {self.state.line_count} lines")
            self._bus.emit(
                ObservabilityEventType.COMPLETE, line_count=self.state.line_count
            )
            self._end()
            fire_callback(self._callbacks.on_complete, self.state)

    async def _close(self, *streams: Any) -> None:
        """Close the adapter and transport streams.

        A close error fails a session that is still active; after the
        session has ended it is only logged.
        """
        for stream in streams:
            try:
                await aclose(stream)
            except Exception as e:
                if self.state.is_active:
                    self._fail(e)
                else:
                    logger.debug(f"Stream close error (ignored): {e}")

    def _process(self, line: str) -> bool:
        """Parse, reduce and publish one line.

        Returns False once the session is no longer active.
        Each update carries a fresh tuple copy of the log (see Update).
        """
        if not self.state.is_active:
            return False

        patch = parse_patch(line)
        if patch is None:
            self.state.skipped_count += 1
            self._bus.emit(ObservabilityEventType.PATCH_SKIPPED, length=len(line))
            return True

        tree = apply_patch(self.state.tree, patch)
        text = line.strip()
        append_line(self.state, tree, text)
        self._bus.emit(
            ObservabilityEventType.PATCH_APPLIED,
            op=patch.op,
            path=patch.path,
            index=self.state.line_count - 1,
        )
        fire_callback(
            self._callbacks.on_update,
            Update(tree=tree, line=text, lines=tuple(self.state.lines), session_id=self.id),
        )
        return self.state.is_active

    def _fail(self, error: Exception) -> None:
        if not mark_failed(self.state, error):
            return

        if isinstance(error, Error):
            error.context.session_id = self.id
            error.context.line_count = self.state.line_count

        logger.warning(f"Session {self.id} failed: {error}")
        self._bus.emit(
            ObservabilityEventType.ERROR,
            error=str(error),
            code=error.code.value if isinstance(error, Error) else None,
        )
        self._end()
        fire_callback(self._callbacks.on_error, error, self.state)

    def _end(self) -> None:
        self._bus.emit(
            ObservabilityEventType.SESSION_SUMMARY,
            status=self.state.status.value,
            line_count=self.state.line_count,
            skipped_count=self.state.skipped_count,
            duration=self.state.duration,
        )
        self._bus.emit(ObservabilityEventType.SESSION_END, status=self.state.status.value)


# ─────────────────────────────────────────────────────────────────────────────
# Controller
# ─────────────────────────────────────────────────────────────────────────────


class SessionController:
    """Runs sessions for one consumer, last request wins.

    Usage:
        controller = SessionController(
            transport,
            callbacks=SessionCallbacks(on_update=lambda u: render(u.tree)),
        )

        controller.start("Create a contact form")
        # Supersedes (cancels) the first session
        session = controller.start("Create a login form")
        await session.wait()
    """

    def __init__(
        self,
        transport: Transport,
        *,
        callbacks: SessionCallbacks | None = None,
        on_event: Callable[[ObservabilityEvent], None] | None = None,
        adapter: Adapter | str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> None:
        self._transport = transport
        self._callbacks = callbacks or SessionCallbacks()
        self._on_event = on_event
        self._adapter = adapter
        self._meta = meta
        self._current: Session | None = None

    @property
    def current(self) -> Session | None:
        """The most recently started session, if any."""
        return self._current

    @property
    def status(self) -> SessionStatus:
        """ACTIVE while a session runs, IDLE otherwise."""
        if self._current is not None and self._current.state.is_active:
            return SessionStatus.ACTIVE
        return SessionStatus.IDLE

    def start(self, prompt: str) -> Session:
        """Start a session, cancelling any active one first.

        Must be called from a running event loop.

        Raises:
            ValueError: If the prompt is blank
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must not be blank")

        self.cancel()

        session = Session(
            prompt,
            callbacks=self._callbacks,
            event_bus=EventBus(self._on_event, meta=self._meta),
        )
        self._current = session
        session.start(self._transport, self._adapter)
        return session

    def cancel(self) -> None:
        """Cancel the active session, if any."""
        if self._current is not None:
            self._current.cancel()

    async def wait(self) -> SessionState | None:
        """Wait for the current session to end."""
        if self._current is None:
            return None
        return await self._current.wait()
