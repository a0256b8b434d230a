"""Graph nodes - one per pipeline stage, each deciding fatal vs non-fatal failure.

Every node emits its stage_change on entry and returns the full next state.
Cancellation is never caught here; it unwinds to the pipeline runner.
"""

from dataclasses import dataclass

import structlog

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.collaboration_state import (
    DEFAULT_FILENAME,
    CollaborationState,
    Stage,
    Worker,
)
from codeduo.domain.entities.pipeline_events import (
    AssistantChunk,
    AssistantDone,
    EventSink,
    FileUpdate,
    PipelineError,
    PromptRefined,
    ReviewResult,
    StageChange,
    StatusUpdate,
)
from codeduo.domain.entities.stage_results import ReviewStatus
from codeduo.domain.entities.worker import PipelineParams
from codeduo.domain.errors import InstallStageError, PipelineCancelledError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.domain.services.history_window import truncate_history
from codeduo.infrastructure.stages.codegen import codegen_stage
from codeduo.infrastructure.stages.debate import debate_stage
from codeduo.infrastructure.stages.install import install_stage
from codeduo.infrastructure.stages.refine import refine_stage
from codeduo.infrastructure.stages.review import review_stage
from codeduo.infrastructure.stages.scaffold import scaffold_stage

log = structlog.get_logger()


@dataclass
class NodeContext:
    """Per-run dependencies shared by all nodes of one graph."""

    params: PipelineParams
    transport: CompletionPort
    emit: EventSink
    cancel: CancellationToken | None = None

    def history_view(self, state: CollaborationState) -> list[LLMMessage]:
        return truncate_history(
            state.get("conversation_history", []),
            state.get("refined_prompt", ""),
            tail=self.params.history_tail,
        )


def _enter(
    ctx: NodeContext,
    state: CollaborationState,
    stage: Stage,
    message: str | None = None,
) -> CollaborationState:
    ctx.emit(StageChange(new_stage=stage, message=message))
    return {**state, "stage": stage}


def _fail(ctx: NodeContext, state: CollaborationState, message: str) -> CollaborationState:
    log.warning("stage_failed", stage=state.get("stage"), error=message)
    ctx.emit(PipelineError(message=message))
    return {**state, "stage": Stage.ERROR, "last_error": message}


def _filename(state: CollaborationState) -> str:
    return state.get("filename") or DEFAULT_FILENAME


async def refine_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    state = _enter(ctx, state, Stage.REFINING_PROMPT, "Refining prompt...")
    ctx.emit(StatusUpdate(message="Refiner is working on the prompt...", worker="refiner"))
    try:
        result = await refine_stage(state["initial_prompt"], ctx.params.refiner, ctx.transport, ctx.cancel)
    except PipelineCancelledError:
        raise
    except Exception as e:
        return _fail(ctx, state, f"Prompt refinement failed: {e}")

    ctx.emit(PromptRefined(refined_prompt=result.refined_prompt))
    ctx.emit(StatusUpdate(message="Refined prompt accepted.", worker="system"))
    return {
        **state,
        "refined_prompt": result.refined_prompt,
        "conversation_history": [*state["conversation_history"], *result.messages],
    }


async def debate_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    state = _enter(ctx, state, Stage.DEBATING_PLAN, "Debating the implementation plan...")
    outcome = await debate_stage(
        state["refined_prompt"],
        ctx.params.debate,
        ctx.transport,
        ctx.emit,
        ctx.cancel,
    )
    summary = outcome.summary
    if summary.adopted_plan:
        ctx.emit(StatusUpdate(message="Debate reached an agreed plan; coding will follow it.", worker="system"))
    note = LLMMessage(role="system", content=summary.history_note())
    return {
        **state,
        "agreed_plan": summary.adopted_plan,
        "conversation_history": [*state["conversation_history"], note],
    }


async def scaffold_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    state = _enter(ctx, state, Stage.SCAFFOLDING, "Generating project scaffold...")
    try:
        items = await scaffold_stage(
            state["refined_prompt"],
            ctx.params.worker1,
            ctx.transport,
            ctx.emit,
            project_type=state.get("project_type"),
            agreed_plan=state.get("agreed_plan"),
            cancel=ctx.cancel,
        )
    except PipelineCancelledError:
        raise
    except Exception as e:
        log.warning("scaffold_skipped", error=str(e))
        ctx.emit(StatusUpdate(message=f"Scaffold skipped: {e}", worker="system"))
        return state

    files = dict(state["project_files"])
    for item in items:
        if item.type == "file":
            files[item.path] = item.content or ""
    ctx.emit(StatusUpdate(message=f"Scaffold created {len(items)} item(s).", worker="system"))
    return {**state, "project_files": files}


async def coding_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    filename = _filename(state)
    turn = state["current_turn"] + 1
    state = _enter(
        ctx,
        {**state, "current_worker": Worker.W1},
        Stage.CODING_TURN,
        f"Turn {turn}/{state['max_turns']}: Worker 1 coding {filename}",
    )
    ctx.emit(StatusUpdate(message=f"Worker 1 is writing {filename}...", worker=Worker.W1.value))
    try:
        result = await codegen_stage(
            filename=filename,
            refined_prompt=state["refined_prompt"],
            history=ctx.history_view(state),
            current_code=state["project_files"].get(filename, ""),
            worker=ctx.params.worker1,
            transport=ctx.transport,
            on_chunk=lambda chunk: ctx.emit(AssistantChunk(worker=Worker.W1.value, chunk=chunk)),
            project_type=state.get("project_type"),
            agreed_plan=state.get("agreed_plan"),
            cancel=ctx.cancel,
        )
    except PipelineCancelledError:
        raise
    except Exception as e:
        return _fail(ctx, state, f"Worker 1 (Codegen) turn failed: {e}")

    if result.used_fallback:
        ctx.emit(
            StatusUpdate(
                message=f"No code block found for {filename}; using the full response.",
                worker="system",
            )
        )
    ctx.emit(FileUpdate(filename=filename, content=result.code))
    history = [
        *state["conversation_history"],
        LLMMessage(role="assistant", name=Worker.W1.value, content=result.full_text),
    ]
    ctx.emit(AssistantDone(worker=Worker.W1.value))
    return {
        **state,
        "project_files": {**state["project_files"], filename: result.code},
        "conversation_history": history,
        "last_codegen": result,
        "current_worker": Worker.W2,
    }


async def reviewing_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    filename = _filename(state)
    turn = state["current_turn"] + 1
    state = _enter(
        ctx,
        {**state, "current_worker": Worker.W2, "last_verdict": None},
        Stage.REVIEWING_TURN,
        f"Turn {turn}/{state['max_turns']}: Worker 2 reviewing {filename}",
    )
    ctx.emit(StatusUpdate(message=f"Worker 2 is reviewing {filename}...", worker=Worker.W2.value))
    codegen = state.get("last_codegen")
    try:
        outcome = await review_stage(
            filename=filename,
            refined_prompt=state["refined_prompt"],
            history=ctx.history_view(state),
            project_files=state["project_files"],
            coder_response=codegen.full_text if codegen else "",
            worker=ctx.params.worker2,
            transport=ctx.transport,
            on_chunk=lambda chunk: ctx.emit(AssistantChunk(worker=Worker.W2.value, chunk=chunk)),
            agreed_plan=state.get("agreed_plan"),
            cancel=ctx.cancel,
        )
    except PipelineCancelledError:
        raise
    except Exception as e:
        return _fail(ctx, state, f"Worker 2 (Review) turn failed: {e}")

    verdict = outcome.verdict
    ctx.emit(AssistantDone(worker=Worker.W2.value))
    state = {
        **state,
        "last_verdict": verdict.status,
        "conversation_history": [
            *state["conversation_history"],
            LLMMessage(role="assistant", name=Worker.W2.value, content=outcome.full_text),
            LLMMessage(role="system", content=verdict.history_note()),
        ],
    }
    ctx.emit(
        ReviewResult(
            status=verdict.status,
            key_issues=verdict.key_issues,
            next_action_for_w1=verdict.next_action_for_w1,
        )
    )
    ctx.emit(
        StatusUpdate(
            message=f"Review outcome: {verdict.status.value}. Action: {verdict.next_action_for_w1}",
            worker="system",
        )
    )

    if verdict.status is ReviewStatus.APPROVED:
        return {**state, "revision_count": 0}

    if verdict.requests_changes:
        revisions = state.get("revision_count", 0) + 1
        limit = ctx.params.max_revisions_per_turn
        if limit > 0 and revisions > limit:
            return _fail(
                ctx,
                state,
                f"Worker 2 requested more than {limit} revisions of {filename} without approval",
            )
        return {
            **state,
            "revision_count": revisions,
            "current_worker": Worker.W1,
            "stage": Stage.CODING_TURN,
        }

    return _fail(
        ctx,
        state,
        f"Worker 2 review parsing error or unknown status: "
        f"{verdict.status.value} - {verdict.next_action_for_w1}",
    )


async def install_node(state: CollaborationState, ctx: NodeContext) -> CollaborationState:
    state = _enter(ctx, state, Stage.INSTALLING_DEPS, "Checking for missing packages...")
    packages = list(state["required_packages"])
    try:
        commands = await install_stage(
            refined_prompt=state["refined_prompt"],
            history=ctx.history_view(state),
            project_files=state["project_files"],
            worker=ctx.params.worker1,
            transport=ctx.transport,
            emit=ctx.emit,
            project_type=state.get("project_type"),
            agreed_plan=state.get("agreed_plan"),
            cancel=ctx.cancel,
        )
    except InstallStageError as e:
        log.warning("install_stage_failed", error=str(e))
        ctx.emit(PipelineError(message=str(e)))
    else:
        packages.extend(command for command in commands if command not in packages)

    current_turn = state["current_turn"] + 1
    return {
        **state,
        "required_packages": packages,
        "current_turn": current_turn,
        "current_worker": Worker.W1,
        "last_verdict": None,
        "stage": Stage.DONE if current_turn >= state["max_turns"] else Stage.CODING_TURN,
    }
