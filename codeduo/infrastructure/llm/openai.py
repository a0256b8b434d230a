"""OpenAI adapter - chat completions streamed as server-sent events."""

import json
import logging
from typing import AsyncIterator

import httpx

from codeduo.domain.ports.config import OpenAIConfig
from codeduo.domain.ports.llm import LLMMessage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIAdapter:
    """Implements LLMPort via POST {base_url}/chat/completions with stream=true."""

    def __init__(self, config: OpenAIConfig) -> None:
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client (call during app shutdown)."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self, api_key: str | None) -> dict[str, str]:
        key = api_key or self._config.api_key
        return {"Authorization": f"Bearer {key}"} if key else {}

    def _chat_body(self, model: str, messages: list[LLMMessage], temperature: float) -> dict:
        """Build request body; optional max_tokens from config."""
        wire_messages = []
        for m in messages:
            item = {"role": m.role, "content": m.content}
            if m.name:
                item["name"] = m.name
            wire_messages.append(item)
        body: dict = {
            "model": model,
            "messages": wire_messages,
            "temperature": temperature,
            "stream": True,
        }
        if self._config.max_tokens is not None:
            body["max_tokens"] = self._config.max_tokens
        return body

    async def generate_stream(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
    ) -> AsyncIterator[str]:
        """Generate response with streaming."""
        body = self._chat_body(model or DEFAULT_MODEL, messages, temperature)
        client = self._get_client()
        async with client.stream(
            "POST",
            f"{self._base_url}/chat/completions",
            json=body,
            headers=self._headers(api_key),
        ) as resp:
            if resp.status_code >= 400:
                err_body = await resp.aread()
                err_text = err_body.decode("utf-8", errors="replace")
                logger.error("OpenAI API error %s: %s", resp.status_code, err_text[:500])
                raise httpx.HTTPStatusError(
                    f"OpenAI API error {resp.status_code}: {err_text[:200]}",
                    request=resp.request,
                    response=resp,
                )
            async for line in resp.aiter_lines():
                if not line.startswith("data:"):
                    continue
                chunk = line[5:].strip()
                if chunk == "[DONE]":
                    break
                try:
                    data = json.loads(chunk)
                except json.JSONDecodeError:
                    logger.debug("Malformed JSON chunk in stream: %s", chunk[:100])
                    continue
                choices = data.get("choices") or [{}]
                if content := (choices[0].get("delta") or {}).get("content"):
                    yield content
