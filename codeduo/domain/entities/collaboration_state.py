"""Collaboration state - owned by one pipeline run for its whole lifetime."""

from enum import Enum
from typing import TypedDict

from codeduo.domain.entities.stage_results import CodegenResult, ReviewStatus
from codeduo.domain.entities.worker import PipelineParams
from codeduo.domain.ports.llm import LLMMessage

DEFAULT_FILENAME = "app/page.tsx"


class Stage(str, Enum):
    INITIAL = "initial"
    REFINING_PROMPT = "refining_prompt"
    DEBATING_PLAN = "debating_plan"
    SCAFFOLDING = "scaffolding"
    INSTALLING_DEPS = "installing_deps"
    CODING_TURN = "coding_turn"
    REVIEWING_TURN = "reviewing_turn"
    PROCESSING_TURN = "processing_turn"
    ERROR = "error"
    DONE = "done"


TERMINAL_STAGES = frozenset({Stage.DONE, Stage.ERROR})


class Worker(str, Enum):
    W1 = "w1"
    W2 = "w2"


class CollaborationState(TypedDict, total=False):
    """State passed between graph nodes."""

    # Input
    initial_prompt: str
    project_type: str | None
    filename: str
    max_turns: int

    # Progress
    stage: Stage
    refined_prompt: str
    agreed_plan: str | None
    current_turn: int
    current_worker: Worker
    revision_count: int
    last_codegen: CodegenResult | None
    last_verdict: ReviewStatus | None
    last_error: str | None

    # Artifacts
    project_files: dict[str, str]
    required_packages: list[str]
    conversation_history: list[LLMMessage]


def initial_state(params: PipelineParams) -> CollaborationState:
    """Fresh state for one run. Never shared between runs."""
    return CollaborationState(
        initial_prompt=params.prompt,
        project_type=params.project_type,
        filename=params.filename or DEFAULT_FILENAME,
        max_turns=params.max_turns,
        stage=Stage.INITIAL,
        refined_prompt="",
        agreed_plan=None,
        current_turn=0,
        current_worker=Worker.W1,
        revision_count=0,
        last_codegen=None,
        last_verdict=None,
        last_error=None,
        project_files={},
        required_packages=[],
        conversation_history=[],
    )
