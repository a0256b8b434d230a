"""Tests for local model discovery."""

import subprocess
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from codeduo.infrastructure.services.local_models import discover_local_models, parse_ollama_list

LIST_OUTPUT = """NAME                    ID              SIZE      MODIFIED
llama3:8b               365c0bd3c000    4.7 GB    2 days ago
qwen2.5-coder:7b        2b0496514337    4.7 GB    3 weeks ago
"""


def _completed(stdout: str = "", returncode: int = 0):
    return subprocess.CompletedProcess(args=["ollama"], returncode=returncode, stdout=stdout, stderr="")


class TestParseOllamaList:
    def test_parses_names(self):
        assert parse_ollama_list(LIST_OUTPUT) == ["llama3:8b", "qwen2.5-coder:7b"]

    def test_header_only(self):
        assert parse_ollama_list("NAME ID SIZE MODIFIED\n") == []


class TestDiscoverLocalModels:
    @pytest.mark.asyncio
    async def test_uses_cli_when_present(self):
        with patch(
            "codeduo.infrastructure.services.local_models.subprocess.run",
            side_effect=[_completed("ollama version 0.3.0"), _completed(LIST_OUTPUT)],
        ):
            result = await discover_local_models()

        assert result.installed is True
        assert result.models == ["llama3:8b", "qwen2.5-coder:7b"]

    @pytest.mark.asyncio
    async def test_falls_back_to_daemon(self):
        adapter = MagicMock()
        adapter.is_available = AsyncMock(return_value=True)
        adapter.list_models = AsyncMock(return_value=["mistral:7b"])

        with patch(
            "codeduo.infrastructure.services.local_models.subprocess.run",
            side_effect=FileNotFoundError("ollama"),
        ):
            result = await discover_local_models(adapter)

        assert result.installed is True
        assert result.models == ["mistral:7b"]

    @pytest.mark.asyncio
    async def test_not_installed(self):
        adapter = MagicMock()
        adapter.is_available = AsyncMock(return_value=False)

        with patch(
            "codeduo.infrastructure.services.local_models.subprocess.run",
            side_effect=FileNotFoundError("ollama"),
        ):
            result = await discover_local_models(adapter)

        assert result.installed is False
        assert result.models == []
