"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import pytest

from uipatch.adapters import Adapters


def patch_line(op: str, path: str, value: Any) -> str:
    """Serialize one patch as a JSONL line (with trailing newline)."""
    return json.dumps({"op": op, "path": path, "value": value}) + "\n"


class ChunkTransport:
    """Transport that replays fixed chunks, optionally pausing between them.

    Records every prompt it is called with.
    """

    def __init__(
        self,
        chunks: list[str | bytes],
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.chunks = chunks
        self.delay = delay
        self.error = error
        self.prompts: list[str] = []
        self.closed = 0

    def __call__(self, prompt: str) -> AsyncIterator[str | bytes]:
        self.prompts.append(prompt)
        return self._stream()

    async def _stream(self) -> AsyncIterator[str | bytes]:
        try:
            for chunk in self.chunks:
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed += 1


class GatedTransport:
    """Transport that yields chunks only when the test releases them."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue[str | None] = asyncio.Queue()
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        return self._stream()

    def send(self, chunk: str) -> None:
        self.queue.put_nowait(chunk)

    def end(self) -> None:
        self.queue.put_nowait(None)

    async def _stream(self) -> AsyncIterator[str]:
        while True:
            chunk = await self.queue.get()
            if chunk is None:
                return
            yield chunk


class SleepRecorder:
    """Drop-in for asyncio.sleep that records durations and yields once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run for a few loop iterations."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def _reset_adapters():
    yield
    Adapters.reset()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
