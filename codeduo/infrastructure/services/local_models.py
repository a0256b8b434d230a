"""Local model discovery - which Ollama models are installed on this machine."""

import asyncio
import logging
import subprocess
from dataclasses import dataclass, field

from codeduo.infrastructure.llm.ollama import OllamaAdapter

logger = logging.getLogger(__name__)

CLI_TIMEOUT = 10


@dataclass
class LocalModels:
    installed: bool
    models: list[str] = field(default_factory=list)


def _run_ollama(*args: str) -> subprocess.CompletedProcess | None:
    """Run the ollama CLI; None when it is missing or fails."""
    try:
        result = subprocess.run(
            ["ollama", *args],
            capture_output=True,
            text=True,
            timeout=CLI_TIMEOUT,
            check=False,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as e:
        logger.debug("ollama %s failed: %s", " ".join(args), e)
        return None
    if result.returncode != 0:
        logger.debug("ollama %s exited %s: %s", " ".join(args), result.returncode, result.stderr[:200])
        return None
    return result


def parse_ollama_list(output: str) -> list[str]:
    """Model names from `ollama list` output (header row skipped)."""
    models = []
    for line in output.splitlines()[1:]:
        parts = line.split()
        if parts:
            models.append(parts[0])
    return models


async def discover_local_models(adapter: OllamaAdapter | None = None) -> LocalModels:
    """CLI first; falls back to the daemon's HTTP API when the CLI is absent."""
    if await asyncio.to_thread(_run_ollama, "--version") is not None:
        listing = await asyncio.to_thread(_run_ollama, "list")
        models = parse_ollama_list(listing.stdout) if listing is not None else []
        return LocalModels(installed=True, models=models)

    if adapter is not None and await adapter.is_available():
        return LocalModels(installed=True, models=await adapter.list_models())
    return LocalModels(installed=False)
