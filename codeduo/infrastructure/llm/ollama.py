"""Ollama adapter - local daemon streamed as newline-delimited JSON."""

import logging
from typing import AsyncIterator

import httpx
from ollama import AsyncClient

from codeduo.domain.ports.config import OllamaConfig
from codeduo.domain.ports.llm import LLMMessage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3"
DEFAULT_CONNECT_TIMEOUT = 5.0


class OllamaAdapter:
    """Ollama implementation of LLMPort."""

    def __init__(self, config: OllamaConfig, client: AsyncClient | None = None) -> None:
        self._config = config
        if client is None:
            read_timeout = float(config.timeout) if config.timeout else 120.0
            timeout = httpx.Timeout(
                connect=DEFAULT_CONNECT_TIMEOUT,
                read=read_timeout,
                write=read_timeout,
                pool=30.0,
            )
            client = AsyncClient(host=config.host, timeout=timeout)
        self._client = client

    def _ollama_options(self, temperature: float) -> dict:
        """Build options dict: temperature + optional num_ctx, num_predict from config."""
        opts: dict = {"temperature": temperature}
        if self._config.num_ctx is not None:
            opts["num_ctx"] = self._config.num_ctx
        if self._config.num_predict is not None:
            opts["num_predict"] = self._config.num_predict
        return opts

    async def generate_stream(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
    ) -> AsyncIterator[str]:
        """Generate response with streaming (yields content chunks). The daemon takes no key."""
        stream = await self._client.chat(
            model=model or DEFAULT_MODEL,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            options=self._ollama_options(temperature),
            stream=True,
        )
        async for chunk in stream:
            if chunk.message and chunk.message.content:
                yield chunk.message.content

    async def is_available(self) -> bool:
        """Check if Ollama server is available. Fail-fast, no stale cache."""
        try:
            async with httpx.AsyncClient(timeout=DEFAULT_CONNECT_TIMEOUT) as client:
                resp = await client.get(f"{self._config.host.rstrip('/')}/api/tags")
                return resp.status_code == 200
        except httpx.HTTPError as e:
            logger.debug("Ollama availability check failed: %s", e)
            return False

    async def list_models(self) -> list[str]:
        """List available models from Ollama."""
        try:
            resp = await self._client.list()
        except (httpx.HTTPError, ConnectionError) as e:
            logger.debug("Ollama list_models failed (unreachable): %s", e)
            return []
        names = (getattr(m, "model", None) or getattr(m, "name", None) for m in resp.models or [])
        return [name for name in names if name]
