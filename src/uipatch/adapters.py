"""uipatch stream adapters.

Adapters turn whatever a transport returns into a plain stream of text or
byte chunks for the line framer:
- OpenAI - OpenAI SDK / LiteLLM chat completion streams
- httpx - An open streaming httpx.Response
- chunks - Any iterable or async iterable of str/bytes (fallback)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

from .errors import Error, ErrorCode, TransportError
from .logging import logger

Chunk = str | bytes


@runtime_checkable
class Adapter(Protocol):
    """Protocol for stream adapters."""

    name: str

    def detect(self, stream: Any) -> bool:
        """Check if this adapter can handle the given stream."""
        ...

    def wrap(self, stream: Any) -> AsyncIterator[Chunk]:
        """Wrap raw stream into a stream of text/byte chunks."""
        ...


class OpenAIAdapter:
    """Adapter for OpenAI SDK streams. Also works with LiteLLM.

    Yields the text delta of each ChatCompletionChunk.
    """

    name = "openai"

    def detect(self, stream: Any) -> bool:
        """Detect OpenAI or LiteLLM streams."""
        type_name = type(stream).__module__
        return "openai" in type_name or "litellm" in type_name

    async def wrap(self, stream: Any) -> AsyncIterator[Chunk]:
        async for chunk in stream:
            if hasattr(chunk, "choices") and chunk.choices:
                delta = getattr(chunk.choices[0], "delta", None)
                content = getattr(delta, "content", None) if delta else None
                if content:
                    yield content


class HttpxResponseAdapter:
    """Adapter for an open streaming httpx.Response.

    A non-success status raises TransportError before the body is read.
    """

    name = "httpx"

    def detect(self, stream: Any) -> bool:
        return type(stream).__module__.startswith("httpx") and hasattr(
            stream, "aiter_bytes"
        )

    async def wrap(self, stream: Any) -> AsyncIterator[Chunk]:
        if not stream.is_success:
            raise TransportError.from_status(stream.status_code)
        async for chunk in stream.aiter_bytes():
            yield chunk


class ChunkPassthroughAdapter:
    """Adapter for raw chunk iterables.

    Accepts sync or async iterables. Items that are not str/bytes are
    skipped.
    """

    name = "chunks"

    def detect(self, stream: Any) -> bool:
        """Detect chunk iterables (fallback adapter)."""
        if isinstance(stream, (str, bytes)):
            return False
        return hasattr(stream, "__aiter__") or hasattr(stream, "__iter__")

    async def wrap(self, stream: Any) -> AsyncIterator[Chunk]:
        if hasattr(stream, "__aiter__"):
            async for chunk in stream:
                if isinstance(chunk, (str, bytes)):
                    yield chunk
        else:
            for chunk in stream:
                if isinstance(chunk, (str, bytes)):
                    yield chunk


def _builtin_adapters() -> list[Adapter]:
    # Specific adapters first, passthrough last (fallback)
    return [OpenAIAdapter(), HttpxResponseAdapter(), ChunkPassthroughAdapter()]


_adapters: list[Adapter] = _builtin_adapters()


# ─────────────────────────────────────────────────────────────────────────────
# Adapters Class - Scoped API
# ─────────────────────────────────────────────────────────────────────────────


class Adapters:
    """Scoped API for stream adapter operations.

    Usage:
        from uipatch import Adapters

        # Detect adapter for a stream
        adapter = Adapters.detect(stream)

        # Detect with hint
        adapter = Adapters.detect(stream, hint="openai")

        # Register a custom adapter (takes priority)
        Adapters.register(my_adapter)

        # List registered adapters
        names = Adapters.list()

        # Restore the built-in adapters (for testing)
        Adapters.reset()
    """

    @staticmethod
    def detect(stream: Any, hint: Adapter | str | None = None) -> Adapter:
        """Detect or lookup adapter for stream.

        Args:
            stream: The stream to detect adapter for
            hint: Optional adapter instance or name hint

        Returns:
            Adapter instance that can handle the stream

        Raises:
            Error: With code NO_ADAPTER if no adapter found or unknown hint
        """
        if hint is not None and not isinstance(hint, str):
            return hint

        if isinstance(hint, str):
            if hint == "litellm":
                hint = "openai"
            for a in _adapters:
                if a.name == hint:
                    return a
            raise Error(f"Unknown adapter: {hint}", ErrorCode.NO_ADAPTER)

        for a in _adapters:
            if a.detect(stream):
                logger.debug(f"Detected adapter: {a.name}")
                return a

        raise Error(
            f"No adapter found for stream of type {type(stream).__name__}",
            ErrorCode.NO_ADAPTER,
        )

    @staticmethod
    def register(adapter: Adapter) -> None:
        """Register a custom adapter (takes priority)."""
        _adapters.insert(0, adapter)

    @staticmethod
    def unregister(name: str) -> bool:
        """Unregister an adapter by name.

        Returns:
            True if adapter was found and removed, False otherwise
        """
        for i, adapter in enumerate(_adapters):
            if adapter.name == name:
                _adapters.pop(i)
                return True
        return False

    @staticmethod
    def list() -> list[str]:
        """List names of all registered adapters in priority order."""
        return [a.name for a in _adapters]

    @staticmethod
    def clear() -> None:
        """Remove all adapters."""
        _adapters.clear()

    @staticmethod
    def reset() -> None:
        """Restore the built-in adapters."""
        _adapters[:] = _builtin_adapters()
