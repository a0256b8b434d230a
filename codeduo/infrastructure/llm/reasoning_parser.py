"""Separate reasoning-model <think> blocks from visible content in a delta stream."""

import logging
from collections.abc import AsyncIterator
from typing import Literal

logger = logging.getLogger(__name__)

ParsedKind = Literal["thinking", "content"]
THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"


def _partial_tag_suffix(text: str, tag: str) -> int:
    """Length of the longest suffix of text that is a proper prefix of tag."""
    for size in range(min(len(tag) - 1, len(text)), 0, -1):
        if text.endswith(tag[:size]):
            return size
    return 0


class ReasoningFilter:
    """Incremental splitter; tags may be cut anywhere across chunk boundaries.

    Text is passed through untouched (no stripping) so code keeps its layout.
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._in_think = False

    def feed(self, chunk: str) -> list[tuple[ParsedKind, str]]:
        self._buffer += chunk
        emitted: list[tuple[ParsedKind, str]] = []
        while self._buffer:
            kind: ParsedKind = "thinking" if self._in_think else "content"
            tag = THINK_CLOSE if self._in_think else THINK_OPEN
            idx = self._buffer.find(tag)
            if idx == -1:
                held = _partial_tag_suffix(self._buffer, tag)
                ready = self._buffer[: len(self._buffer) - held]
                if ready:
                    emitted.append((kind, ready))
                self._buffer = self._buffer[len(ready) :]
                break
            if idx:
                emitted.append((kind, self._buffer[:idx]))
            self._buffer = self._buffer[idx + len(tag) :]
            self._in_think = not self._in_think
        return emitted

    def flush(self) -> list[tuple[ParsedKind, str]]:
        """Release whatever is still held back at end of stream."""
        rest, self._buffer = self._buffer, ""
        if not rest:
            return []
        return [("thinking" if self._in_think else "content", rest)]


async def strip_reasoning(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield only visible content; reasoning goes to the debug log."""
    parser = ReasoningFilter()
    async for chunk in chunks:
        for kind, text in parser.feed(chunk):
            if kind == "content":
                yield text
            else:
                logger.debug("reasoning: %s", text[:200])
    for kind, text in parser.flush():
        if kind == "content":
            yield text
