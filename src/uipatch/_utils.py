"""Internal helpers shared by the session runtime and playback engine."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .logging import logger


def fire_callback(callback: Callable[..., Any] | None, *args: Any) -> None:
    """Fire a callback without blocking or raising errors."""
    if callback is None:
        return
    try:
        callback(*args)
    except Exception as e:
        logger.debug(f"Callback error (silently caught): {e}")


async def aclose(stream: Any) -> None:
    """Close an async generator or stream if it supports it."""
    close = getattr(stream, "aclose", None)
    if close is not None:
        await close()
