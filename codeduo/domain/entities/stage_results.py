"""Values produced by pipeline stages and handed back to the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codeduo.domain.ports.llm import LLMMessage

ERROR_NO_JSON_FOUND = "ERROR_NO_JSON_FOUND"
ERROR_PARSING_JSON = "ERROR_PARSING_JSON"


class ReviewStatus(str, Enum):
    APPROVED = "APPROVED"
    REVISION_NEEDED = "REVISION_NEEDED"
    NEEDS_CLARIFICATION = "NEEDS_CLARIFICATION"
    UNKNOWN = "UNKNOWN"


class ReviewVerdict(BaseModel):
    """Structured verdict of one review call. Never merged with earlier verdicts."""

    status: ReviewStatus
    key_issues: list[str] = Field(default_factory=list)
    next_action_for_w1: str = ""

    @property
    def requests_changes(self) -> bool:
        return self.status in (ReviewStatus.REVISION_NEEDED, ReviewStatus.NEEDS_CLARIFICATION)

    def history_note(self) -> str:
        issues = "; ".join(self.key_issues) if self.key_issues else "none"
        return (
            f"Worker 2 Review Parsed: Status - {self.status.value}, "
            f"Action - {self.next_action_for_w1}, Issues - {issues}"
        )


class DebateSummary(BaseModel):
    """Decision distilled from a debate transcript by the summarizer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary_text: str
    agreed_plan: str | None = None
    options: list[str] = Field(default_factory=list)
    requires_resolution: bool = True

    @property
    def adopted_plan(self) -> str | None:
        """The plan coding should follow, or None when the debate left it open."""
        if self.agreed_plan and not self.requires_resolution:
            return self.agreed_plan
        return None

    def history_note(self) -> str:
        if self.adopted_plan:
            return f"Debate outcome: agreed plan adopted.\n{self.adopted_plan}"
        options = "; ".join(self.options) if self.options else "none"
        return (
            f"Debate outcome: unresolved. Summary: {self.summary_text}\n"
            f"Open options: {options}"
        )


class ScaffoldItem(BaseModel):
    type: Literal["folder", "file"]
    path: str
    content: str | None = None


@dataclass
class RefineResult:
    refined_prompt: str
    messages: list[LLMMessage]


@dataclass
class CodegenResult:
    """Coder output for one turn. The full text is reviewed along with the code."""

    filename: str
    code: str
    full_text: str
    messages: list[LLMMessage] = field(default_factory=list)
    used_fallback: bool = False


@dataclass
class ReviewOutcome:
    full_text: str
    verdict: ReviewVerdict
    messages: list[LLMMessage] = field(default_factory=list)


@dataclass
class DebateOutcome:
    summary: DebateSummary
    transcript: list[LLMMessage]
