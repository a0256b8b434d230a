"""FastAPI dependencies - resolved through the DI container."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from codeduo.api.container import get_container
from codeduo.application.collaboration.use_case import CollaborationUseCase
from codeduo.domain.ports.config import AppConfig
from codeduo.infrastructure.llm.ollama import OllamaAdapter

limiter = Limiter(key_func=get_remote_address)


def get_config() -> AppConfig:
    """Config is loaded once by the container."""
    return get_container().config


def get_collaboration_use_case() -> CollaborationUseCase:
    return get_container().collaboration_use_case


def get_ollama_adapter() -> OllamaAdapter:
    return get_container().ollama
