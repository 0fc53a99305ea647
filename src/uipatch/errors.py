"""Error handling for uipatch.

Malformed patch lines are never errors; they are skipped by the parser and
reducer. Errors here describe transport faults, which fail a session, and
cancellation, which is reported separately and never treated as a failure.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

# ─────────────────────────────────────────────────────────────────────────────
# Error Codes
# ─────────────────────────────────────────────────────────────────────────────


class ErrorCode(str, Enum):
    """Error codes for programmatic handling.

    Usage:
        from uipatch import Error, ErrorCode

        state = await session.wait()
        if isinstance(state.error, Error):
            if state.error.code == ErrorCode.TRANSPORT_STATUS:
                # Server answered with a non-success status
                pass
    """

    # Transport errors
    TRANSPORT_STATUS = "TRANSPORT_STATUS"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"

    # Configuration errors
    NO_ADAPTER = "NO_ADAPTER"

    # Lifecycle
    SESSION_CANCELLED = "SESSION_CANCELLED"


# ─────────────────────────────────────────────────────────────────────────────
# Error Context
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ErrorContext:
    """Context about the session when the error occurred."""

    code: ErrorCode
    session_id: str | None = None
    line_count: int = 0  # Patch lines applied before failure
    status_code: int | None = None  # Transport status, if any
    metadata: dict[str, Any] | None = None


# ─────────────────────────────────────────────────────────────────────────────
# Error Class
# ─────────────────────────────────────────────────────────────────────────────


class Error(Exception):
    """uipatch error with context for debugging.

    Attributes:
        code: The error code (ErrorCode enum)
        context: Context about the error (ErrorContext)
        timestamp: Unix timestamp when error occurred
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or ErrorContext(code=code)
        self.timestamp = time.time()

    def to_detailed_string(self) -> str:
        """Get detailed string representation for logging."""
        lines = [
            f"Error [{self.code.value}]: {self.args[0]}",
            f"  Timestamp: {self.timestamp}",
            f"  Session: {self.context.session_id}",
            f"  Lines applied: {self.context.line_count}",
        ]

        if self.context.status_code is not None:
            lines.append(f"  Status code: {self.context.status_code}")

        if self.context.metadata:
            lines.append(f"  Metadata: {self.context.metadata}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Error(code={self.code.value!r}, message={self.args[0]!r})"

    @staticmethod
    def is_cancellation(error: BaseException) -> bool:
        """Check if an exception represents an intentional cancellation.

        Usage:
            if Error.is_cancellation(exc):
                return  # Not a failure, nothing to report
        """
        if isinstance(error, asyncio.CancelledError):
            return True
        return isinstance(error, Error) and error.code == ErrorCode.SESSION_CANCELLED


class TransportError(Error):
    """Transport-level fault: non-success status or network failure."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        code = (
            ErrorCode.TRANSPORT_STATUS
            if status_code is not None
            else ErrorCode.TRANSPORT_ERROR
        )
        if context is None:
            context = ErrorContext(code=code, status_code=status_code)
        super().__init__(message, code, context)
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int) -> TransportError:
        return cls(f"HTTP error: {status_code}", status_code=status_code)
