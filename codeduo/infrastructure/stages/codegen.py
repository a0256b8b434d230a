"""Codegen stage - Worker 1 (re)writes one file per turn."""

import logging
from collections.abc import Callable

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.stage_results import CodegenResult
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import PipelineCancelledError, StageFailedError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.parsing.markdown import extract_code_from_markdown, languages_for
from codeduo.infrastructure.stages.llm_helpers import stream_with_callback
from codeduo.infrastructure.stages.prompts import CODEGEN_SYSTEM_PROMPT, codegen_user_prompt

logger = logging.getLogger(__name__)


async def codegen_stage(
    *,
    filename: str,
    refined_prompt: str,
    history: list[LLMMessage],
    current_code: str,
    worker: WorkerConfig,
    transport: CompletionPort,
    on_chunk: Callable[[str], None] | None = None,
    project_type: str | None = None,
    agreed_plan: str | None = None,
    cancel: CancellationToken | None = None,
) -> CodegenResult:
    """Stream the coder's answer live and pull the file out of its code block.

    Without a matching fence the whole response becomes the file content.
    """
    messages = [
        LLMMessage(role="system", content=CODEGEN_SYSTEM_PROMPT),
        *history,
        LLMMessage(
            role="user",
            content=codegen_user_prompt(filename, refined_prompt, current_code, project_type, agreed_plan),
        ),
    ]
    try:
        full_text = await stream_with_callback(transport, worker, messages, on_chunk, cancel)
    except PipelineCancelledError:
        raise
    except Exception as e:
        raise StageFailedError("codegen", f"Code generation for {filename} failed: {e}") from e

    code = extract_code_from_markdown(full_text, languages_for(filename))
    used_fallback = code is None
    if used_fallback:
        logger.warning("No fenced code block for %s, using the raw response", filename)
        code = full_text.strip()

    return CodegenResult(
        filename=filename,
        code=code,
        full_text=full_text,
        messages=messages,
        used_fallback=used_fallback,
    )
