"""Health endpoint integration test."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from codeduo.main import app


@pytest.mark.asyncio
async def test_health_returns_ok():
    """Health endpoint returns status and local daemon availability."""
    with patch(
        "codeduo.infrastructure.llm.ollama.OllamaAdapter.is_available",
        new=AsyncMock(return_value=False),
    ):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data == {"status": "ok", "service": "codeduo", "ollama_available": False}
