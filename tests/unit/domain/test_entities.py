"""Tests for worker config, stage results and cancellation."""

import pytest
from pydantic import ValidationError

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.stage_results import DebateSummary, ReviewStatus, ReviewVerdict
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import PipelineCancelledError


class TestWorkerConfig:
    def test_accepts_camel_case(self):
        config = WorkerConfig.model_validate({"provider": "openai", "model": "gpt-4o", "apiKey": "sk-1"})
        assert config.api_key == "sk-1"

    def test_normalizes_provider_display_name(self):
        assert WorkerConfig(provider="Ollama", model="llama3").provider == "ollama"

    def test_rejects_unknown_provider(self):
        with pytest.raises(ValidationError):
            WorkerConfig(provider="anthropic", model="x")

    def test_api_key_hidden_from_repr(self):
        config = WorkerConfig(provider="openai", model="gpt-4o", api_key="sk-secret")
        assert "sk-secret" not in repr(config)

    def test_with_api_key_returns_copy(self):
        config = WorkerConfig(provider="openai", model="gpt-4o")
        keyed = config.with_api_key("sk-2")
        assert keyed.api_key == "sk-2"
        assert config.api_key is None


class TestDebateSummary:
    def test_plan_adopted_only_when_resolved(self):
        resolved = DebateSummary(summary_text="ok", agreed_plan="Do X", requires_resolution=False)
        open_ = DebateSummary(summary_text="ok", agreed_plan="Do X", requires_resolution=True)

        assert resolved.adopted_plan == "Do X"
        assert open_.adopted_plan is None

    def test_history_note_mentions_options_when_unresolved(self):
        note = DebateSummary(summary_text="split", options=["SSR", "SPA"]).history_note()
        assert "unresolved" in note
        assert "SSR; SPA" in note


class TestReviewVerdict:
    def test_requests_changes(self):
        assert ReviewVerdict(status=ReviewStatus.REVISION_NEEDED).requests_changes
        assert ReviewVerdict(status=ReviewStatus.NEEDS_CLARIFICATION).requests_changes
        assert not ReviewVerdict(status=ReviewStatus.APPROVED).requests_changes
        assert not ReviewVerdict(status=ReviewStatus.UNKNOWN).requests_changes

    def test_history_note(self):
        verdict = ReviewVerdict(
            status=ReviewStatus.REVISION_NEEDED,
            key_issues=["a", "b"],
            next_action_for_w1="fix",
        )
        assert verdict.history_note() == (
            "Worker 2 Review Parsed: Status - REVISION_NEEDED, Action - fix, Issues - a; b"
        )


class TestCancellationToken:
    def test_not_cancelled_initially(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled()

    def test_cancel_raises_with_reason(self):
        token = CancellationToken()
        token.cancel("User pressed stop")

        assert token.cancelled
        with pytest.raises(PipelineCancelledError, match="User pressed stop"):
            token.raise_if_cancelled()

    def test_first_reason_wins(self):
        token = CancellationToken()
        token.cancel("first")
        token.cancel("second")
        assert token.reason == "first"
