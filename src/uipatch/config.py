"""Configuration models.

All durations are in seconds (float), matching asyncio.sleep() and
httpx timeouts.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .prompt import MAX_PROMPT_LENGTH
from .script import SIMULATION_PROMPT


class PlaybackConfig(BaseModel):
    """Timing of the playback script engine.

    Usage:
        ```python
        from uipatch import PlaybackConfig, PlaybackEngine

        engine = PlaybackEngine(config=PlaybackConfig(stage_interval=0.2))
        ```

    Attributes:
        char_interval: Delay between revealed prompt characters
        typing_pause: Pause after the prompt is fully typed
        stage_interval: Delay between stages while streaming
        complete_pause: Pause after the last stage before completing
        prompt: Prompt text revealed during the typing phase
    """

    char_interval: float = Field(default=0.02, ge=0.0)
    typing_pause: float = Field(default=0.5, ge=0.0)
    stage_interval: float = Field(default=0.6, ge=0.0)
    complete_pause: float = Field(default=0.5, ge=0.0)
    prompt: str = SIMULATION_PROMPT

    @classmethod
    def from_env(cls) -> PlaybackConfig:
        """Create config from environment variables.

        Reads:
            - UIPATCH_CHAR_INTERVAL
            - UIPATCH_STAGE_INTERVAL

        Returns:
            PlaybackConfig from environment
        """
        values: dict[str, float] = {}
        char_interval = os.getenv("UIPATCH_CHAR_INTERVAL")
        if char_interval:
            values["char_interval"] = float(char_interval)
        stage_interval = os.getenv("UIPATCH_STAGE_INTERVAL")
        if stage_interval:
            values["stage_interval"] = float(stage_interval)
        return cls(**values)


class TransportConfig(BaseModel):
    """HTTP transport configuration.

    Attributes:
        endpoint: URL that accepts {"prompt": ...} and streams JSONL patches
        timeout: Request timeout in seconds
        headers: Additional request headers
        max_prompt_length: Prompts are truncated to this many characters
    """

    endpoint: str = "http://localhost:3000/api/generate"
    timeout: float = Field(default=30.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=dict)
    max_prompt_length: int = Field(default=MAX_PROMPT_LENGTH, ge=1)

    @classmethod
    def from_env(cls) -> TransportConfig:
        """Create config from environment variables.

        Reads:
            - UIPATCH_ENDPOINT
            - UIPATCH_TIMEOUT

        Returns:
            TransportConfig from environment
        """
        values: dict[str, str | float] = {}
        endpoint = os.getenv("UIPATCH_ENDPOINT")
        if endpoint:
            values["endpoint"] = endpoint
        timeout = os.getenv("UIPATCH_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)
        return cls(**values)  # type: ignore[arg-type]
