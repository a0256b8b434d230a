"""Collaboration DTOs - the invocation contract (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codeduo.domain.entities.worker import WorkerConfig


class DebateRequest(BaseModel):
    """Optional planning debate. Unset debaters fall back to the worker configs."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    debater_a: WorkerConfig | None = None
    debater_b: WorkerConfig | None = None
    summarizer: WorkerConfig | None = None
    max_turns_per_agent: int | None = Field(None, ge=1, le=10)


class CollaborationRequest(BaseModel):
    """Request to run one collaboration pipeline."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str = Field(..., min_length=1, max_length=50_000)
    refiner_config: WorkerConfig | None = None  # defaults to worker1Config
    worker1_config: WorkerConfig
    worker2_config: WorkerConfig
    project_type: str | None = Field(None, max_length=100)
    filename: str | None = Field(None, max_length=1024)
    max_turns: int | None = Field(None, ge=0, le=50)
    debate: DebateRequest | None = None
    scaffold: bool = False
