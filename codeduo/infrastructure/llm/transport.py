"""Completion transport - one delta-stream interface over every provider."""

import logging
from collections.abc import Mapping
from typing import AsyncIterator

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import ProviderConfigError
from codeduo.domain.ports.llm import LLMMessage, LLMPort
from codeduo.infrastructure.llm.reasoning_parser import strip_reasoning

logger = logging.getLogger(__name__)

KEYED_PROVIDERS = frozenset({"openai"})


class CompletionTransport:
    """Dispatch a worker's request to its provider adapter and yield visible text."""

    def __init__(self, adapters: Mapping[str, LLMPort], temperature: float = 0.7) -> None:
        self._adapters = dict(adapters)
        self._temperature = temperature

    def _adapter_for(self, worker: WorkerConfig) -> LLMPort:
        adapter = self._adapters.get(worker.provider)
        if adapter is None:
            raise ProviderConfigError(f"Unsupported provider: {worker.provider}")
        if worker.provider in KEYED_PROVIDERS and not worker.api_key:
            raise ProviderConfigError(
                f"API key for provider '{worker.provider}' (model {worker.model}) is missing"
            )
        return adapter

    async def stream(
        self,
        worker: WorkerConfig,
        messages: list[LLMMessage],
        cancel: CancellationToken | None = None,
    ) -> AsyncIterator[str]:
        """Yield text fragments; raises PipelineCancelledError once cancel is set."""
        adapter = self._adapter_for(worker)
        if cancel is not None:
            cancel.raise_if_cancelled()
        logger.debug(
            "completion_request provider=%s model=%s messages=%d",
            worker.provider,
            worker.model,
            len(messages),
        )
        raw = adapter.generate_stream(
            messages,
            model=worker.model,
            temperature=self._temperature,
            api_key=worker.api_key,
        )
        visible = strip_reasoning(raw)
        try:
            async for fragment in visible:
                if cancel is not None:
                    cancel.raise_if_cancelled()
                yield fragment
        finally:
            await visible.aclose()
            aclose = getattr(raw, "aclose", None)
            if aclose is not None:
                await aclose()
