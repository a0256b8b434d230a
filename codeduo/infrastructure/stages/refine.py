"""Refine stage - raw user prompt to actionable task description."""

import logging

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.stage_results import RefineResult
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import PipelineCancelledError, StageFailedError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.stages.llm_helpers import collect_completion
from codeduo.infrastructure.stages.prompts import REFINER_SYSTEM_PROMPT, refine_user_prompt

logger = logging.getLogger(__name__)


async def refine_stage(
    raw_prompt: str,
    worker: WorkerConfig,
    transport: CompletionPort,
    cancel: CancellationToken | None = None,
) -> RefineResult:
    """One non-streamed call. The returned messages are the exact triple used."""
    messages = [
        LLMMessage(role="system", content=REFINER_SYSTEM_PROMPT),
        LLMMessage(role="user", content=refine_user_prompt(raw_prompt)),
    ]
    try:
        refined = await collect_completion(transport, worker, messages, cancel)
    except PipelineCancelledError:
        raise
    except Exception as e:
        logger.error("Refiner call failed: %s", e)
        raise StageFailedError("refine", f"Refinement failed: {e}") from e

    refined = refined.strip()
    if not refined:
        logger.warning("Refiner returned empty content, falling back to the raw prompt")
        refined = f"Task: {raw_prompt} (refinement produced no content)."

    messages.append(LLMMessage(role="assistant", name="refiner", content=refined))
    return RefineResult(refined_prompt=refined, messages=messages)
