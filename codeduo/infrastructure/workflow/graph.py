"""LangGraph workflow - refine -> [debate] -> [scaffold] -> (coding <-> reviewing -> install)*."""

from typing import Literal

from langgraph.graph import END, START, StateGraph

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.collaboration_state import (
    TERMINAL_STAGES,
    CollaborationState,
    Stage,
    Worker,
)
from codeduo.domain.entities.pipeline_events import EventSink
from codeduo.domain.entities.stage_results import ReviewStatus
from codeduo.domain.entities.worker import PipelineParams
from codeduo.domain.ports.llm import CompletionPort
from codeduo.infrastructure.workflow.nodes import (
    NodeContext,
    coding_node,
    debate_node,
    install_node,
    refine_node,
    reviewing_node,
    scaffold_node,
)

TurnRoute = Literal["coding", "reviewing", "end"]


def route_turn(state: CollaborationState) -> TurnRoute:
    """Inside the turn loop: whoever owns the turn runs next, until done or error."""
    if state.get("stage") in TERMINAL_STAGES:
        return "end"
    if state.get("current_turn", 0) >= state.get("max_turns", 0):
        return "end"
    return "reviewing" if state.get("current_worker") == Worker.W2 else "coding"


def _after_review(state: CollaborationState) -> Literal["install", "coding", "reviewing", "end"]:
    if state.get("stage") == Stage.ERROR:
        return "end"
    if state.get("last_verdict") == ReviewStatus.APPROVED:
        return "install"
    return route_turn(state)


def recursion_limit(params: PipelineParams) -> int:
    """Upper bound on graph steps for one run."""
    if params.max_revisions_per_turn <= 0:
        return 10_000
    per_turn = 2 * (params.max_revisions_per_turn + 1) + 1
    return 10 + params.max_turns * per_turn


def build_collaboration_graph(
    params: PipelineParams,
    transport: CompletionPort,
    emit: EventSink,
    cancel: CancellationToken | None = None,
) -> StateGraph:
    """Build the collaboration graph with injected dependencies."""
    ctx = NodeContext(params=params, transport=transport, emit=emit, cancel=cancel)
    debate_enabled = params.debate is not None

    def _after_refine(state: CollaborationState) -> Literal["debate", "scaffold", "coding", "reviewing", "end"]:
        if state.get("stage") == Stage.ERROR:
            return "end"
        if debate_enabled:
            return "debate"
        if params.scaffold:
            return "scaffold"
        return route_turn(state)

    def _after_debate(state: CollaborationState) -> Literal["scaffold", "coding", "reviewing", "end"]:
        if params.scaffold:
            return "scaffold"
        return route_turn(state)

    async def refine_wrapper(state: CollaborationState) -> CollaborationState:
        return await refine_node(state, ctx)

    async def debate_wrapper(state: CollaborationState) -> CollaborationState:
        return await debate_node(state, ctx)

    async def scaffold_wrapper(state: CollaborationState) -> CollaborationState:
        return await scaffold_node(state, ctx)

    async def coding_wrapper(state: CollaborationState) -> CollaborationState:
        return await coding_node(state, ctx)

    async def reviewing_wrapper(state: CollaborationState) -> CollaborationState:
        return await reviewing_node(state, ctx)

    async def install_wrapper(state: CollaborationState) -> CollaborationState:
        return await install_node(state, ctx)

    turn_paths = {"coding": "coding", "reviewing": "reviewing", "end": END}

    builder = StateGraph(CollaborationState)
    builder.add_node("refine", refine_wrapper)
    builder.add_node("coding", coding_wrapper)
    builder.add_node("reviewing", reviewing_wrapper)
    builder.add_node("install", install_wrapper)
    if debate_enabled:
        builder.add_node("debate", debate_wrapper)
    if params.scaffold:
        builder.add_node("scaffold", scaffold_wrapper)

    builder.add_edge(START, "refine")

    refine_paths = dict(turn_paths)
    if debate_enabled:
        refine_paths["debate"] = "debate"
        debate_paths = dict(turn_paths)
        if params.scaffold:
            debate_paths["scaffold"] = "scaffold"
        builder.add_conditional_edges("debate", _after_debate, path_map=debate_paths)
    if params.scaffold:
        refine_paths["scaffold"] = "scaffold"
        builder.add_conditional_edges("scaffold", route_turn, path_map=turn_paths)
    builder.add_conditional_edges("refine", _after_refine, path_map=refine_paths)

    builder.add_conditional_edges("coding", route_turn, path_map=turn_paths)
    builder.add_conditional_edges(
        "reviewing",
        _after_review,
        path_map={**turn_paths, "install": "install"},
    )
    builder.add_conditional_edges("install", route_turn, path_map=turn_paths)

    return builder


def compile_collaboration_graph(builder: StateGraph):
    """Compile without a checkpointer; each run owns its state and nothing outlives it."""
    return builder.compile()
