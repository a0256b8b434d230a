"""Review stage - Worker 2 issues a structured verdict on the latest file."""

import logging
from collections.abc import Callable

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.stage_results import ReviewOutcome
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import PipelineCancelledError, StageFailedError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.parsing.review_parser import parse_review_output
from codeduo.infrastructure.stages.llm_helpers import stream_with_callback
from codeduo.infrastructure.stages.prompts import REVIEW_SYSTEM_PROMPT, review_user_prompt

logger = logging.getLogger(__name__)


async def review_stage(
    *,
    filename: str,
    refined_prompt: str,
    history: list[LLMMessage],
    project_files: dict[str, str],
    coder_response: str,
    worker: WorkerConfig,
    transport: CompletionPort,
    on_chunk: Callable[[str], None] | None = None,
    agreed_plan: str | None = None,
    cancel: CancellationToken | None = None,
) -> ReviewOutcome:
    """An unparseable verdict is returned as UNKNOWN; only transport failures raise."""
    messages = [
        LLMMessage(role="system", content=REVIEW_SYSTEM_PROMPT),
        *history,
        LLMMessage(
            role="user",
            content=review_user_prompt(filename, refined_prompt, project_files, coder_response, agreed_plan),
        ),
    ]
    try:
        full_text = await stream_with_callback(transport, worker, messages, on_chunk, cancel)
    except PipelineCancelledError:
        raise
    except Exception as e:
        raise StageFailedError("review", f"Review of {filename} failed: {e}") from e

    verdict = parse_review_output(full_text)
    logger.info("Review verdict for %s: %s", filename, verdict.status.value)
    return ReviewOutcome(full_text=full_text, verdict=verdict, messages=messages)
