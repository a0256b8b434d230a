"""LLM helpers: retried collection and live streaming with callback."""

from collections.abc import Callable

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.ports.llm import CompletionPort, LLMMessage

TRANSIENT_ERRORS = (httpx.TransportError, ConnectionError, TimeoutError)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    reraise=True,
)
async def _collect_impl(
    transport: CompletionPort,
    worker: WorkerConfig,
    messages: list[LLMMessage],
    cancel: CancellationToken | None,
) -> str:
    """Internal: collect with retry."""
    parts: list[str] = []
    async for fragment in transport.stream(worker, messages, cancel):
        parts.append(fragment)
    return "".join(parts)


async def collect_completion(
    transport: CompletionPort,
    worker: WorkerConfig,
    messages: list[LLMMessage],
    cancel: CancellationToken | None = None,
) -> str:
    """Accumulate a whole response, retrying on timeout/connection errors."""
    return await _collect_impl(transport, worker, messages, cancel)


async def stream_with_callback(
    transport: CompletionPort,
    worker: WorkerConfig,
    messages: list[LLMMessage],
    on_chunk: Callable[[str], None] | None,
    cancel: CancellationToken | None = None,
) -> str:
    """Forward each fragment to on_chunk and return the full text. Not retried."""
    parts: list[str] = []
    async for fragment in transport.stream(worker, messages, cancel):
        parts.append(fragment)
        if on_chunk:
            on_chunk(fragment)
    return "".join(parts)
