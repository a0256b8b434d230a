"""Pytest configuration and shared fixtures."""

import pytest

from codeduo.domain.entities.worker import WorkerConfig

CODE_REPLY = (
    "Here is the page component.\n"
    "```tsx\n"
    "export default function Page() {\n"
    "  return <main>Todo</main>;\n"
    "}\n"
    "```\n"
)

APPROVED_REPLY = (
    "Looks complete.\n"
    "```json\n"
    '{"status": "APPROVED", "key_issues": [], "next_action_for_w1": "Proceed to the next file."}\n'
    "```"
)

REVISION_REPLY = (
    "The form is missing.\n"
    "```json\n"
    '{"status": "REVISION_NEEDED", "key_issues": ["No input field"], '
    '"next_action_for_w1": "Add an input field for new todos."}\n'
    "```"
)

# Opening words of each stage's system prompt
STAGE_MARKERS = (
    ("refine", "You are an AI prompt refiner"),
    ("debater_a", "You are Debater A"),
    ("debater_b", "You are Debater B"),
    ("summarizer", "You are a Debate Summarizer"),
    ("scaffold", "You are an AI file structure generator"),
    ("codegen", "You are Worker 1"),
    ("review", "You are Worker 2"),
    ("install", "You are an expert build assistant"),
)


def stage_of(messages) -> str:
    system = messages[0].content if messages else ""
    for stage, marker in STAGE_MARKERS:
        if system.startswith(marker):
            return stage
    return "unknown"


class ScriptedTransport:
    """CompletionPort fake answering per stage from a script.

    Each script entry is a reply string, an exception to raise, or a callable
    taking the cancellation token and returning the reply. The last entry of a
    script repeats.
    """

    def __init__(self, scripts: dict, chunk_size: int = 16):
        self.scripts = {stage: list(replies) for stage, replies in scripts.items()}
        self.chunk_size = chunk_size
        self.calls: list[tuple[str, WorkerConfig, list]] = []

    def calls_for(self, stage: str) -> list:
        return [call for call in self.calls if call[0] == stage]

    async def stream(self, worker, messages, cancel=None):
        stage = stage_of(messages)
        self.calls.append((stage, worker, list(messages)))
        script = self.scripts.get(stage)
        if not script:
            raise AssertionError(f"No scripted reply for stage {stage}")
        reply = script.pop(0) if len(script) > 1 else script[0]
        if cancel is not None:
            cancel.raise_if_cancelled()
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(cancel)
        for start in range(0, len(reply), self.chunk_size):
            if cancel is not None:
                cancel.raise_if_cancelled()
            yield reply[start : start + self.chunk_size]


@pytest.fixture
def scripted_transport():
    """Factory for ScriptedTransport."""
    return ScriptedTransport


@pytest.fixture
def refiner_config():
    return WorkerConfig(provider="ollama", model="refiner-model")


@pytest.fixture
def coder_config():
    return WorkerConfig(provider="ollama", model="coder-model")


@pytest.fixture
def reviewer_config():
    return WorkerConfig(provider="openai", model="reviewer-model", api_key="sk-test")


@pytest.fixture
def happy_scripts():
    """Replies for a run where every review approves on first try."""
    return {
        "refine": ["Build a todo app with Next.js and Tailwind: add, toggle and delete todos."],
        "codegen": [CODE_REPLY],
        "review": [APPROVED_REPLY],
        "install": ["[]"],
    }


@pytest.fixture
def replies():
    """Canned model replies keyed by kind."""
    return {"code": CODE_REPLY, "approved": APPROVED_REPLY, "revision": REVISION_REPLY}
