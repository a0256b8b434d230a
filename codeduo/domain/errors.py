"""Domain exceptions raised by stages, transport and the pipeline."""


class CollaborationError(Exception):
    """Base class for collaboration pipeline failures."""


class ProviderConfigError(CollaborationError):
    """A worker's provider is unknown or missing required credentials."""


class StageFailedError(CollaborationError):
    """A pipeline stage could not produce a result."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage


class InstallStageError(StageFailedError):
    """Dependency analysis failed. The pipeline continues past this one."""

    def __init__(self, message: str) -> None:
        super().__init__("install", message)


class PipelineCancelledError(CollaborationError):
    """The run was interrupted through its cancellation token."""
