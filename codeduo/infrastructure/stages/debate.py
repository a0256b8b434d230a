"""Debate stage - proposer and critic alternate, then a summarizer decides.

The debaters only argue; the summarizer only extracts. A malformed summary
degrades to a fallback object and never touches the transcript.
"""

import json
import logging

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.pipeline_events import (
    DebateAgentChunk,
    DebateAgentMessageComplete,
    DebateResultSummary,
    DebateSummaryChunk,
    EventSink,
    StatusUpdate,
)
from codeduo.domain.entities.stage_results import DebateOutcome, DebateSummary
from codeduo.domain.entities.worker import DebateParams, WorkerConfig
from codeduo.domain.errors import PipelineCancelledError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.parsing.json_extractor import extract_json_string
from codeduo.infrastructure.stages.llm_helpers import stream_with_callback
from codeduo.infrastructure.stages.prompts import (
    DEBATER_A_SYSTEM_PROMPT,
    DEBATER_B_SYSTEM_PROMPT,
    SUMMARIZER_SYSTEM_PROMPT,
    debate_opening,
    summarizer_user_prompt,
)

logger = logging.getLogger(__name__)

DEBATER_A = "debaterA"
DEBATER_B = "debaterB"
MODERATOR = "moderator"
SUMMARIZER = "summarizer"


def _fallback_summary(note: str) -> DebateSummary:
    return DebateSummary(summary_text=note, agreed_plan=None, options=[], requires_resolution=True)


def parse_debate_summary(raw: str) -> DebateSummary:
    """DebateSummary from the summarizer's output, or a fallback carrying the raw text."""
    candidate = extract_json_string(raw)
    if candidate is None:
        logger.warning("Debate summarizer returned no JSON")
        return _fallback_summary(f"Summarizer Error: No JSON extracted. Raw output: {raw}")

    data = json.loads(candidate)
    if (
        not isinstance(data, dict)
        or not isinstance(data.get("summaryText"), str)
        or not isinstance(data.get("requiresResolution"), bool)
        or not isinstance(data.get("options"), list)
    ):
        logger.warning("Debate summary JSON has unexpected structure: %s", candidate[:200])
        return _fallback_summary(f"Summarizer Error: Unexpected JSON structure. Raw output: {raw}")

    plan = data.get("agreedPlan")
    return DebateSummary(
        summary_text=data["summaryText"],
        agreed_plan=plan if isinstance(plan, str) and plan.strip() else None,
        options=[str(option) for option in data["options"] if option is not None],
        requires_resolution=data["requiresResolution"],
    )


def _view_for(agent: str, transcript: list[LLMMessage]) -> list[LLMMessage]:
    """Transcript as one debater sees it: own turns as assistant, everything else as user."""
    view = []
    for message in transcript:
        role = "assistant" if message.name == agent else "user"
        view.append(LLMMessage(role=role, name=message.name, content=message.content))
    return view


def _render_transcript(transcript: list[LLMMessage]) -> str:
    return "\n\n".join(f"{m.name or m.role}: {m.content}" for m in transcript)


async def _summarize(
    refined_prompt: str,
    transcript: list[LLMMessage],
    summarizer: WorkerConfig,
    transport: CompletionPort,
    emit: EventSink,
    cancel: CancellationToken | None,
) -> DebateSummary:
    emit(StatusUpdate(message="Summarizing debate...", worker=SUMMARIZER))
    messages = [
        LLMMessage(role="system", content=SUMMARIZER_SYSTEM_PROMPT),
        LLMMessage(
            role="user",
            name=MODERATOR,
            content=summarizer_user_prompt(refined_prompt, _render_transcript(transcript)),
        ),
    ]
    try:
        raw = await stream_with_callback(
            transport,
            summarizer,
            messages,
            on_chunk=lambda chunk: emit(DebateSummaryChunk(chunk=chunk)),
            cancel=cancel,
        )
    except PipelineCancelledError:
        raise
    except Exception as e:
        logger.warning("Debate summarization failed: %s", e)
        emit(StatusUpdate(message=f"Error during debate summarization: {e}", worker="system"))
        return _fallback_summary(f"Debate summarization failed: {e}. The transcript is available.")
    return parse_debate_summary(raw)


async def debate_stage(
    refined_prompt: str,
    params: DebateParams,
    transport: CompletionPort,
    emit: EventSink,
    cancel: CancellationToken | None = None,
) -> DebateOutcome:
    """Run 2 x max_turns_per_agent alternating turns, then summarize.

    A transport error mid-debate ends the debate early; whatever transcript
    exists is still summarized.
    """
    transcript = [LLMMessage(role="user", name=MODERATOR, content=debate_opening(refined_prompt))]
    total_turns = params.max_turns_per_agent * 2
    agents = (
        (DEBATER_A, params.debater_a, DEBATER_A_SYSTEM_PROMPT, "proposer"),
        (DEBATER_B, params.debater_b, DEBATER_B_SYSTEM_PROMPT, "critic"),
    )
    emit(StatusUpdate(message="Debate stage started.", worker="system"))

    turn = 0
    try:
        for _ in range(params.max_turns_per_agent):
            for agent, config, system_template, label in agents:
                turn += 1
                emit(
                    StatusUpdate(
                        message=f"Debate turn {turn}/{total_turns}: {agent} ({label}) is formulating...",
                        worker="system",
                    )
                )
                messages = [
                    LLMMessage(role="system", content=system_template.format(refined_prompt=refined_prompt)),
                    *_view_for(agent, transcript),
                ]
                full_text = await stream_with_callback(
                    transport,
                    config,
                    messages,
                    on_chunk=lambda chunk, name=agent: emit(DebateAgentChunk(agent=name, chunk=chunk)),
                    cancel=cancel,
                )
                emit(DebateAgentMessageComplete(agent=agent, full_text=full_text, turn=turn))
                transcript.append(LLMMessage(role="assistant", name=agent, content=full_text))
    except PipelineCancelledError:
        raise
    except Exception as e:
        logger.warning("Debate interrupted at turn %d: %s", turn, e)
        emit(StatusUpdate(message=f"Error during debate: {e}. Summarizing what we have.", worker="system"))

    summary = await _summarize(refined_prompt, transcript, params.summarizer, transport, emit, cancel)
    emit(
        DebateResultSummary(
            summary_text=summary.summary_text,
            full_transcript=transcript,
            agreed_plan=summary.agreed_plan,
            options=summary.options,
            requires_resolution=summary.requires_resolution,
        )
    )
    emit(StatusUpdate(message="Debate stage completed.", worker="system"))
    return DebateOutcome(summary=summary, transcript=transcript)
