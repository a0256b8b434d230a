"""Tests for the bounded history view."""

from codeduo.domain.ports.llm import LLMMessage
from codeduo.domain.services.history_window import HISTORY_TAIL, truncate_history

REFINED = "Build a todo app with add and delete."


def _history(n: int, anchor_at: int | None = None) -> list[LLMMessage]:
    messages = []
    for i in range(n):
        content = f"message {i}"
        if i == anchor_at:
            content = f"Refined: {REFINED}"
        messages.append(LLMMessage(role="user" if i % 2 else "assistant", content=content))
    return messages


class TestTruncateHistory:
    def test_empty_history(self):
        assert truncate_history([], REFINED) == []

    def test_short_history_is_returned_unchanged(self):
        for n in range(1, 8):
            history = _history(n, anchor_at=min(2, n - 1))
            assert truncate_history(history, REFINED) == history

    def test_keeps_first_anchor_and_tail(self):
        history = _history(20, anchor_at=2)
        result = truncate_history(history, REFINED)

        assert result[0] is history[0]
        assert result[1] is history[2]
        assert result[2:] == history[-HISTORY_TAIL:]
        assert len(result) == 2 + HISTORY_TAIL

    def test_never_exceeds_bound(self):
        for n in range(0, 40):
            result = truncate_history(_history(n, anchor_at=n // 2 if n else None), REFINED)
            assert len(result) <= 2 + HISTORY_TAIL

    def test_anchor_inside_tail_is_not_duplicated(self):
        history = _history(12, anchor_at=10)
        result = truncate_history(history, REFINED)

        assert result == [history[0], *history[-HISTORY_TAIL:]]

    def test_without_anchor_keeps_first_and_tail(self):
        history = _history(15)
        result = truncate_history(history, REFINED)

        assert result == [history[0], *history[-HISTORY_TAIL:]]

    def test_does_not_mutate_input(self):
        history = _history(15, anchor_at=3)
        snapshot = list(history)
        truncate_history(history, REFINED)
        assert history == snapshot

    def test_custom_tail(self):
        history = _history(10)
        result = truncate_history(history, "", tail=2)
        assert result == [history[0], history[8], history[9]]
