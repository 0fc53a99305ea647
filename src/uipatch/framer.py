"""Line framing over chunked streams.

Producers and networks deliver chunks that do not line up with newlines.
The framer carries the unterminated remainder of each chunk into the next
one, so the lines it emits do not depend on where chunks were split.
"""

from __future__ import annotations

import codecs
from collections.abc import AsyncIterable, AsyncIterator

NEWLINE = "\n"


class LineFramer:
    """Incremental newline framer.

    Usage:
        framer = LineFramer()
        for chunk in chunks:
            for line in framer.feed(chunk):
                handle(line)
        for line in framer.flush():
            handle(line)
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    @property
    def pending(self) -> str:
        """Buffered text not yet terminated by a newline."""
        return self._buffer

    def feed(self, chunk: str | bytes) -> list[str]:
        """Add a chunk and return the lines it completed, in order."""
        if isinstance(chunk, (bytes, bytearray)):
            text = self._decoder.decode(bytes(chunk))
        else:
            text = chunk

        if not text:
            return []

        self._buffer += text
        if NEWLINE not in text:
            return []

        *lines, self._buffer = self._buffer.split(NEWLINE)
        return lines

    def flush(self) -> list[str]:
        """Signal end of stream and return the unterminated residual, if any."""
        residual = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        self._decoder.reset()
        if not residual.strip():
            return []
        return [residual]


async def frame_lines(chunks: AsyncIterable[str | bytes]) -> AsyncIterator[str]:
    """Yield complete lines from an async chunk stream, then the residual."""
    framer = LineFramer()
    async for chunk in chunks:
        for line in framer.feed(chunk):
            yield line
    for line in framer.flush():
        yield line
