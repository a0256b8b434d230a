"""Worker configuration - which provider and model an agent role runs on."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Provider = Literal["openai", "ollama"]


class WorkerConfig(BaseModel):
    """Provider, model and optional API key for one agent role."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    provider: Provider
    model: str = Field(..., min_length=1, max_length=255)
    api_key: str | None = Field(None, repr=False)

    @field_validator("provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value):
        """Accept display names such as "OpenAI" or "Ollama"."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def with_api_key(self, api_key: str | None) -> "WorkerConfig":
        return self.model_copy(update={"api_key": api_key})


@dataclass(frozen=True)
class DebateParams:
    """Agents taking part in the optional planning debate."""

    debater_a: WorkerConfig
    debater_b: WorkerConfig
    summarizer: WorkerConfig
    max_turns_per_agent: int = 2


@dataclass(frozen=True)
class PipelineParams:
    """Everything one collaboration run needs, resolved before it starts."""

    prompt: str
    refiner: WorkerConfig
    worker1: WorkerConfig
    worker2: WorkerConfig
    filename: str
    max_turns: int
    project_type: str | None = None
    debate: DebateParams | None = None
    scaffold: bool = False
    history_tail: int = 6
    # <= 0 disables the cap
    max_revisions_per_turn: int = 5
