"""Credential resolution for worker configs."""

from codeduo.domain.entities.worker import WorkerConfig


class CredentialResolver:
    """Fill missing API keys from configuration. The only place keys are defaulted."""

    def __init__(self, openai_api_key: str | None = None) -> None:
        self._keys = {"openai": openai_api_key}

    def resolve(self, worker: WorkerConfig) -> WorkerConfig:
        if worker.api_key:
            return worker
        key = self._keys.get(worker.provider)
        return worker.with_api_key(key) if key else worker
