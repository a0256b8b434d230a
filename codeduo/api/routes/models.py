"""Models API - locally installed Ollama models."""

from fastapi import APIRouter, Depends, Request

from codeduo.api.dependencies import get_ollama_adapter, limiter
from codeduo.infrastructure.llm.ollama import OllamaAdapter
from codeduo.infrastructure.services.local_models import discover_local_models

router = APIRouter(prefix="/models", tags=["models"])


@router.get("/ollama")
@limiter.limit("60/minute")
async def list_ollama_models(
    request: Request,
    adapter: OllamaAdapter = Depends(get_ollama_adapter),
) -> dict:
    """Installed local models, and whether the Ollama runtime is present at all."""
    result = await discover_local_models(adapter)
    return {"models": result.models, "installed": result.installed}
