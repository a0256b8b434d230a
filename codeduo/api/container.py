"""Dependency Injection Container - centralized service management."""

from functools import cached_property
from typing import TYPE_CHECKING

from codeduo.domain.ports.config import AppConfig
from codeduo.infrastructure.config import load_config

if TYPE_CHECKING:
    from codeduo.application.collaboration.credentials import CredentialResolver
    from codeduo.application.collaboration.use_case import CollaborationUseCase
    from codeduo.infrastructure.llm.ollama import OllamaAdapter
    from codeduo.infrastructure.llm.openai import OpenAIAdapter
    from codeduo.infrastructure.llm.transport import CompletionTransport


class Container:
    """Dependency Injection Container with lazy initialization.

    All dependencies are created on first access and cached. Only stateless
    services live here; pipeline state is created per request.
    """

    def __init__(self, config: AppConfig | None = None):
        """Initialize container with optional config override."""
        self._config_override = config

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def ollama(self) -> "OllamaAdapter":
        """Local daemon adapter."""
        from codeduo.infrastructure.llm.ollama import OllamaAdapter

        return OllamaAdapter(self.config.ollama)

    @cached_property
    def openai(self) -> "OpenAIAdapter":
        """Cloud chat-completions adapter."""
        from codeduo.infrastructure.llm.openai import OpenAIAdapter

        return OpenAIAdapter(self.config.openai)

    @cached_property
    def transport(self) -> "CompletionTransport":
        """Provider-dispatching completion transport."""
        from codeduo.infrastructure.llm.transport import CompletionTransport

        return CompletionTransport(
            {"openai": self.openai, "ollama": self.ollama},
            temperature=self.config.pipeline.temperature,
        )

    @cached_property
    def credentials(self) -> "CredentialResolver":
        """Fills missing worker API keys from config."""
        from codeduo.application.collaboration.credentials import CredentialResolver

        return CredentialResolver(openai_api_key=self.config.openai.api_key)

    @cached_property
    def collaboration_use_case(self) -> "CollaborationUseCase":
        """Collaboration pipeline use case."""
        from codeduo.application.collaboration.use_case import CollaborationUseCase

        return CollaborationUseCase(
            transport=self.transport,
            settings=self.config.pipeline,
            credentials=self.credentials,
        )

    async def aclose(self) -> None:
        """Close HTTP clients that were actually created."""
        if "openai" in self.__dict__:
            await self.openai.close()

    def reset(self) -> None:
        """Reset all cached instances (useful for testing)."""
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)


_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
