"""LLM Port - interfaces for language model providers and the completion transport."""

from typing import TYPE_CHECKING, AsyncIterator, Protocol

from pydantic import BaseModel

if TYPE_CHECKING:
    from codeduo.domain.entities.cancellation import CancellationToken
    from codeduo.domain.entities.worker import WorkerConfig


class LLMMessage(BaseModel):
    """Single message in a conversation."""

    role: str  # "system" | "user" | "assistant"
    content: str
    name: str | None = None  # speaker tag: w1, w2, debaterA, moderator...


class LLMPort(Protocol):
    """Interface for a single provider (OpenAI API, Ollama)."""

    async def generate_stream(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
    ) -> AsyncIterator[str]:
        """Generate response with streaming (yields content chunks)."""
        ...


class CompletionPort(Protocol):
    """Provider-agnostic delta stream used by every pipeline stage."""

    def stream(
        self,
        worker: "WorkerConfig",
        messages: list[LLMMessage],
        cancel: "CancellationToken | None" = None,
    ) -> AsyncIterator[str]:
        """Yield visible text deltas for the worker's model."""
        ...
