"""Bounded view of conversation history for stage prompts."""

from codeduo.domain.ports.llm import LLMMessage

HISTORY_TAIL = 6


def truncate_history(
    history: list[LLMMessage],
    refined_prompt: str,
    tail: int = HISTORY_TAIL,
) -> list[LLMMessage]:
    """Keep the framing message, the refined-prompt anchor and the most recent tail.

    Returns a new list in original order; the stored history is never modified.
    """
    if not history:
        return []

    keep = {0}
    if refined_prompt:
        anchor = next(
            (i for i, message in enumerate(history) if refined_prompt in message.content),
            None,
        )
        if anchor is not None:
            keep.add(anchor)
    if tail > 0:
        keep.update(range(max(len(history) - tail, 0), len(history)))
    return [history[i] for i in sorted(keep)]
