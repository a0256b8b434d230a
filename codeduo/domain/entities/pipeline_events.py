"""Pipeline events - closed set of typed events streamed to the caller."""

from enum import Enum
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codeduo.domain.entities.collaboration_state import Stage
from codeduo.domain.entities.stage_results import ReviewStatus
from codeduo.domain.ports.llm import LLMMessage


class PipelineEventType(str, Enum):
    PIPELINE_START = "pipeline_start"
    STAGE_CHANGE = "stage_change"
    STATUS_UPDATE = "status_update"
    PROMPT_REFINED = "prompt_refined"
    DEBATE_AGENT_CHUNK = "debate_agent_chunk"
    DEBATE_AGENT_MESSAGE_COMPLETE = "debate_agent_message_complete"
    DEBATE_SUMMARY_CHUNK = "debate_summary_chunk"
    DEBATE_RESULT_SUMMARY = "debate_result_summary"
    FOLDER_CREATE = "folder_create"
    FILE_CREATE = "file_create"
    FILE_UPDATE = "file_update"
    ASSISTANT_CHUNK = "assistant_chunk"
    ASSISTANT_DONE = "assistant_done"
    REVIEW_RESULT = "review_result"
    INSTALL_COMMAND = "install_command"
    INSTALL_ANALYSIS_COMPLETE = "install_analysis_complete"
    INSTALL_NO_ACTIONS_NEEDED = "install_no_actions_needed"
    PIPELINE_ERROR = "pipeline_error"
    PIPELINE_INTERRUPTED = "pipeline_interrupted"
    PIPELINE_FINISH = "pipeline_finish"


class _Event(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def payload(self) -> dict[str, Any]:
        """Wire payload: camelCase fields, without the type tag and unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude={"type"}, exclude_none=True)


class PipelineStart(_Event):
    type: Literal[PipelineEventType.PIPELINE_START] = PipelineEventType.PIPELINE_START
    initial_prompt: str
    max_turns: int


class StageChange(_Event):
    type: Literal[PipelineEventType.STAGE_CHANGE] = PipelineEventType.STAGE_CHANGE
    new_stage: Stage
    message: str | None = None


class StatusUpdate(_Event):
    type: Literal[PipelineEventType.STATUS_UPDATE] = PipelineEventType.STATUS_UPDATE
    message: str
    worker: str | None = None


class PromptRefined(_Event):
    type: Literal[PipelineEventType.PROMPT_REFINED] = PipelineEventType.PROMPT_REFINED
    refined_prompt: str


class DebateAgentChunk(_Event):
    type: Literal[PipelineEventType.DEBATE_AGENT_CHUNK] = PipelineEventType.DEBATE_AGENT_CHUNK
    agent: str
    chunk: str


class DebateAgentMessageComplete(_Event):
    type: Literal[PipelineEventType.DEBATE_AGENT_MESSAGE_COMPLETE] = (
        PipelineEventType.DEBATE_AGENT_MESSAGE_COMPLETE
    )
    agent: str
    full_text: str
    turn: int


class DebateSummaryChunk(_Event):
    type: Literal[PipelineEventType.DEBATE_SUMMARY_CHUNK] = PipelineEventType.DEBATE_SUMMARY_CHUNK
    chunk: str


class DebateResultSummary(_Event):
    type: Literal[PipelineEventType.DEBATE_RESULT_SUMMARY] = PipelineEventType.DEBATE_RESULT_SUMMARY
    summary_text: str
    full_transcript: list[LLMMessage]
    agreed_plan: str | None = None
    options: list[str] = Field(default_factory=list)
    requires_resolution: bool = True


class FolderCreate(_Event):
    type: Literal[PipelineEventType.FOLDER_CREATE] = PipelineEventType.FOLDER_CREATE
    path: str


class FileCreate(_Event):
    type: Literal[PipelineEventType.FILE_CREATE] = PipelineEventType.FILE_CREATE
    path: str
    content: str


class FileUpdate(_Event):
    type: Literal[PipelineEventType.FILE_UPDATE] = PipelineEventType.FILE_UPDATE
    filename: str
    content: str


class AssistantChunk(_Event):
    type: Literal[PipelineEventType.ASSISTANT_CHUNK] = PipelineEventType.ASSISTANT_CHUNK
    worker: str
    chunk: str


class AssistantDone(_Event):
    type: Literal[PipelineEventType.ASSISTANT_DONE] = PipelineEventType.ASSISTANT_DONE
    worker: str


class ReviewResult(_Event):
    """Verdict fields keep the reviewer's snake_case names on the wire."""

    model_config = ConfigDict(alias_generator=None, frozen=True)

    type: Literal[PipelineEventType.REVIEW_RESULT] = PipelineEventType.REVIEW_RESULT
    status: ReviewStatus
    key_issues: list[str] = Field(default_factory=list)
    next_action_for_w1: str = ""


class InstallCommand(_Event):
    type: Literal[PipelineEventType.INSTALL_COMMAND] = PipelineEventType.INSTALL_COMMAND
    command: str


class InstallAnalysisComplete(_Event):
    type: Literal[PipelineEventType.INSTALL_ANALYSIS_COMPLETE] = (
        PipelineEventType.INSTALL_ANALYSIS_COMPLETE
    )
    commands: list[str]


class InstallNoActionsNeeded(_Event):
    type: Literal[PipelineEventType.INSTALL_NO_ACTIONS_NEEDED] = (
        PipelineEventType.INSTALL_NO_ACTIONS_NEEDED
    )


class PipelineError(_Event):
    type: Literal[PipelineEventType.PIPELINE_ERROR] = PipelineEventType.PIPELINE_ERROR
    message: str


class PipelineInterrupted(_Event):
    type: Literal[PipelineEventType.PIPELINE_INTERRUPTED] = PipelineEventType.PIPELINE_INTERRUPTED
    message: str


class PipelineFinish(_Event):
    type: Literal[PipelineEventType.PIPELINE_FINISH] = PipelineEventType.PIPELINE_FINISH
    project_files: dict[str, str]
    required_packages: list[str]


PipelineEvent = Annotated[
    Union[
        PipelineStart,
        StageChange,
        StatusUpdate,
        PromptRefined,
        DebateAgentChunk,
        DebateAgentMessageComplete,
        DebateSummaryChunk,
        DebateResultSummary,
        FolderCreate,
        FileCreate,
        FileUpdate,
        AssistantChunk,
        AssistantDone,
        ReviewResult,
        InstallCommand,
        InstallAnalysisComplete,
        InstallNoActionsNeeded,
        PipelineError,
        PipelineInterrupted,
        PipelineFinish,
    ],
    Field(discriminator="type"),
]

EventSink = Callable[[PipelineEvent], None]
