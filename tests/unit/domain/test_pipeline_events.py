"""Tests for pipeline event models."""

from typing import get_args

from pydantic import TypeAdapter

from codeduo.domain.entities.collaboration_state import Stage
from codeduo.domain.entities.pipeline_events import (
    DebateResultSummary,
    InstallNoActionsNeeded,
    PipelineEvent,
    PipelineEventType,
    PipelineFinish,
    ReviewResult,
    StageChange,
    StatusUpdate,
)
from codeduo.domain.entities.stage_results import ReviewStatus
from codeduo.domain.ports.llm import LLMMessage


class TestEventPayloads:
    def test_camel_case_payload_without_type(self):
        event = PipelineFinish(project_files={"app/page.tsx": "x"}, required_packages=["pnpm add zod"])

        assert event.type is PipelineEventType.PIPELINE_FINISH
        assert event.payload() == {
            "projectFiles": {"app/page.tsx": "x"},
            "requiredPackages": ["pnpm add zod"],
        }

    def test_stage_change_serializes_stage_value(self):
        payload = StageChange(new_stage=Stage.CODING_TURN, message="Turn 1").payload()
        assert payload == {"newStage": "coding_turn", "message": "Turn 1"}

    def test_optional_fields_are_omitted(self):
        assert StatusUpdate(message="working").payload() == {"message": "working"}
        assert InstallNoActionsNeeded().payload() == {}

    def test_review_result_keeps_snake_case(self):
        payload = ReviewResult(
            status=ReviewStatus.REVISION_NEEDED,
            key_issues=["a"],
            next_action_for_w1="fix a",
        ).payload()

        assert payload == {
            "status": "REVISION_NEEDED",
            "key_issues": ["a"],
            "next_action_for_w1": "fix a",
        }

    def test_debate_summary_without_plan(self):
        payload = DebateResultSummary(
            summary_text="No agreement",
            full_transcript=[LLMMessage(role="user", name="moderator", content="go")],
            options=["A", "B"],
            requires_resolution=True,
        ).payload()

        assert "agreedPlan" not in payload
        assert payload["requiresResolution"] is True
        assert payload["fullTranscript"] == [{"role": "user", "content": "go", "name": "moderator"}]


class TestEventUnion:
    def test_discriminated_by_type(self):
        adapter = TypeAdapter(PipelineEvent)
        event = adapter.validate_python({"type": "status_update", "message": "hi", "worker": "w1"})

        assert isinstance(event, StatusUpdate)
        assert event.worker == "w1"

    def test_every_type_has_a_model(self):
        members = get_args(get_args(PipelineEvent)[0])
        types = {member.model_fields["type"].default for member in members}
        assert types == set(PipelineEventType)
