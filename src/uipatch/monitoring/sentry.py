"""Sentry integration for uipatch monitoring."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, Field

from .telemetry import SessionTelemetry


class SentryConfig(BaseModel):
    """Sentry configuration.

    Attributes:
        dsn: Sentry DSN (nothing is sent when unset)
        environment: Environment name (production, staging, etc.)
        release: Release/version identifier
        sample_rate: Error sample rate (0.0 to 1.0)
        enabled: Enable/disable Sentry
        tags: Default tags for all events
    """

    dsn: str | None = None
    environment: str | None = None
    release: str | None = None
    sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    enabled: bool = True
    tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls) -> SentryConfig:
        """Create config from environment variables.

        Reads:
            - SENTRY_DSN
            - SENTRY_ENVIRONMENT
            - SENTRY_RELEASE
        """
        return cls(
            dsn=os.getenv("SENTRY_DSN"),
            environment=os.getenv("SENTRY_ENVIRONMENT"),
            release=os.getenv("SENTRY_RELEASE"),
        )


class SentryExporter:
    """Report failed sessions to Sentry.

    Cancelled sessions are never reported.

    Usage:
        ```python
        from uipatch.monitoring import Monitor, SentryConfig, SentryExporter

        sentry = SentryExporter(SentryConfig.from_env())
        monitor = Monitor(on_complete=sentry.capture_telemetry_error)
        ```

    Requires:
        pip install uipatch[observability]
    """

    def __init__(self, config: SentryConfig) -> None:
        self.config = config
        self._initialized = False

    @property
    def active(self) -> bool:
        return self.config.enabled and bool(self.config.dsn)

    def init(self) -> None:
        """Initialize Sentry SDK. Call once at application startup."""
        if self._initialized or not self.active:
            return

        try:
            import sentry_sdk
        except ImportError as e:
            raise ImportError(
                "Sentry SDK not installed. "
                "Install with: pip install uipatch[observability]"
            ) from e

        sentry_sdk.init(
            dsn=self.config.dsn,
            environment=self.config.environment,
            release=self.config.release,
            sample_rate=self.config.sample_rate,
        )
        for key, value in self.config.tags.items():
            sentry_sdk.set_tag(key, value)

        self._initialized = True

    def capture_error(
        self,
        error: Exception,
        telemetry: SessionTelemetry | None = None,
        **extra: Any,
    ) -> str | None:
        """Capture an exception with optional session context.

        Returns:
            Sentry event ID, or None if not sent
        """
        if not self.active:
            return None

        self.init()
        import sentry_sdk

        with sentry_sdk.new_scope() as scope:
            if telemetry is not None:
                scope.set_context("uipatch", telemetry.model_dump())
            for key, value in extra.items():
                scope.set_extra(key, value)
            return sentry_sdk.capture_exception(error)

    def capture_telemetry_error(self, telemetry: SessionTelemetry) -> str | None:
        """Capture a failure from telemetry when no exception object is at hand.

        Returns:
            Sentry event ID, or None if not sent
        """
        if not self.active or not telemetry.error.occurred:
            return None

        self.init()
        import sentry_sdk

        with sentry_sdk.new_scope() as scope:
            scope.set_context("uipatch", telemetry.model_dump())
            if telemetry.error.code:
                scope.set_tag("uipatch.error.code", telemetry.error.code)
            return sentry_sdk.capture_message(
                telemetry.error.message or "Unknown uipatch error",
                level="error",
            )
