"""Transports: prompt in, raw chunk stream out.

A transport is any callable taking the prompt and returning something an
adapter understands. These are the two built in.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

from .config import TransportConfig
from .errors import TransportError
from .logging import logger
from .prompt import MAX_PROMPT_LENGTH, SYSTEM_PROMPT, build_messages, sanitize_prompt


class HttpTransport:
    """Stream JSONL patches from an HTTP endpoint.

    POSTs {"prompt": ...} and yields the response body as byte chunks.
    A non-success status raises TransportError without reading the body.

    Usage:
        ```python
        from uipatch import HttpTransport, SessionController, TransportConfig

        transport = HttpTransport(TransportConfig(endpoint="https://.../api/generate"))
        controller = SessionController(transport)
        ```
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or TransportConfig()
        self._client = client

    def __call__(self, prompt: str) -> AsyncIterator[bytes]:
        return self._stream(sanitize_prompt(prompt, self.config.max_prompt_length))

    async def _stream(self, prompt: str) -> AsyncIterator[bytes]:
        if self._client is not None:
            async for chunk in self._request(self._client, prompt):
                yield chunk
            return

        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            async for chunk in self._request(client, prompt):
                yield chunk

    async def _request(
        self, client: httpx.AsyncClient, prompt: str
    ) -> AsyncIterator[bytes]:
        logger.debug(f"POST {self.config.endpoint}")
        try:
            async with client.stream(
                "POST",
                self.config.endpoint,
                json={"prompt": prompt},
                headers=self.config.headers,
                timeout=self.config.timeout,
            ) as response:
                if not response.is_success:
                    raise TransportError.from_status(response.status_code)
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"Transport error: {e}") from e


def openai_transport(
    client: Any,
    *,
    model: str = "gpt-4o-mini",
    temperature: float = 0.7,
    system: str = SYSTEM_PROMPT,
    max_prompt_length: int = MAX_PROMPT_LENGTH,
) -> Callable[[str], Any]:
    """Build a transport backed by an OpenAI-compatible async client.

    The returned callable creates a streamed chat completion; the session
    picks the OpenAI adapter for it automatically.

    Usage:
        ```python
        from openai import AsyncOpenAI
        from uipatch import SessionController, openai_transport

        controller = SessionController(openai_transport(AsyncOpenAI()))
        ```
    """

    def transport(prompt: str) -> Any:
        return client.chat.completions.create(
            model=model,
            messages=build_messages(prompt, system, max_prompt_length),
            temperature=temperature,
            stream=True,
        )

    return transport
