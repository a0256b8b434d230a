"""Collaboration use case - runs the LangGraph pipeline and streams its events."""

import asyncio
from collections.abc import AsyncIterator

import structlog

from codeduo.application.collaboration.credentials import CredentialResolver
from codeduo.application.collaboration.dto import CollaborationRequest
from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.collaboration_state import (
    DEFAULT_FILENAME,
    CollaborationState,
    Stage,
    initial_state,
)
from codeduo.domain.entities.pipeline_events import (
    EventSink,
    PipelineError,
    PipelineEvent,
    PipelineFinish,
    PipelineInterrupted,
    PipelineStart,
    StageChange,
)
from codeduo.domain.entities.worker import DebateParams, PipelineParams
from codeduo.domain.errors import PipelineCancelledError
from codeduo.domain.ports.config import PipelineConfig
from codeduo.domain.ports.llm import CompletionPort
from codeduo.infrastructure.workflow import build_collaboration_graph, compile_collaboration_graph
from codeduo.infrastructure.workflow.graph import recursion_limit

log = structlog.get_logger()

_END = object()


class CollaborationPipeline:
    """One pipeline run. Owns its state; never shared between requests."""

    def __init__(
        self,
        params: PipelineParams,
        transport: CompletionPort,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._params = params
        self._transport = transport
        self.cancel_token = cancel or CancellationToken()
        self.interrupted = False
        self.state: CollaborationState = initial_state(params)

    async def _run(self, emit: EventSink) -> None:
        params = self._params
        log.info(
            "pipeline_start",
            max_turns=params.max_turns,
            filename=params.filename,
            debate=params.debate is not None,
            scaffold=params.scaffold,
        )
        emit(PipelineStart(initial_prompt=params.prompt, max_turns=params.max_turns))

        builder = build_collaboration_graph(params, self._transport, emit, self.cancel_token)
        graph = compile_collaboration_graph(builder)
        config = {"recursion_limit": recursion_limit(params)}

        try:
            async for values in graph.astream(self.state, config=config, stream_mode="values"):
                self.state = values
        except PipelineCancelledError as e:
            self.interrupted = True
            log.info("pipeline_interrupted", reason=str(e))
            emit(PipelineInterrupted(message=str(e) or "Pipeline interrupted"))
        except Exception as e:
            log.exception("pipeline_crashed")
            message = f"Critical pipeline error: {e}"
            self.state = {**self.state, "stage": Stage.ERROR, "last_error": message}
            emit(PipelineError(message=message))

        if not self.interrupted and self.state.get("stage") != Stage.ERROR:
            self.state = {**self.state, "stage": Stage.DONE}
            emit(StageChange(new_stage=Stage.DONE, message="Collaboration cycle complete."))

        log.info(
            "pipeline_finish",
            stage=self.state.get("stage"),
            interrupted=self.interrupted,
            turns=self.state.get("current_turn"),
            files=len(self.state.get("project_files", {})),
        )
        emit(
            PipelineFinish(
                project_files=dict(self.state.get("project_files", {})),
                required_packages=list(self.state.get("required_packages", [])),
            )
        )

    async def events(self) -> AsyncIterator[PipelineEvent]:
        """Run the pipeline, yielding events until pipeline_finish.

        Closing the iterator early cancels the run.
        """
        queue: asyncio.Queue = asyncio.Queue()

        async def drive() -> None:
            try:
                await self._run(queue.put_nowait)
            finally:
                queue.put_nowait(_END)

        task = asyncio.create_task(drive())
        try:
            while True:
                event = await queue.get()
                if event is _END:
                    break
                yield event
        finally:
            if not task.done():
                self.cancel_token.cancel("Event stream closed by the caller")
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass


class CollaborationUseCase:
    """Builds per-request pipeline parameters and runs one pipeline per request."""

    def __init__(
        self,
        transport: CompletionPort,
        settings: PipelineConfig,
        credentials: CredentialResolver,
    ) -> None:
        self._transport = transport
        self._settings = settings
        self._credentials = credentials

    def build_params(self, request: CollaborationRequest) -> PipelineParams:
        resolve = self._credentials.resolve
        worker1 = resolve(request.worker1_config)
        worker2 = resolve(request.worker2_config)
        refiner = resolve(request.refiner_config) if request.refiner_config else worker1

        debate = None
        if request.debate is not None and request.debate.enabled:
            d = request.debate
            debate = DebateParams(
                debater_a=resolve(d.debater_a) if d.debater_a else worker1,
                debater_b=resolve(d.debater_b) if d.debater_b else worker2,
                summarizer=resolve(d.summarizer) if d.summarizer else refiner,
                max_turns_per_agent=d.max_turns_per_agent or self._settings.debate_turns_per_agent,
            )

        max_turns = request.max_turns if request.max_turns is not None else self._settings.max_turns
        return PipelineParams(
            prompt=request.prompt,
            refiner=refiner,
            worker1=worker1,
            worker2=worker2,
            filename=request.filename or self._settings.default_filename or DEFAULT_FILENAME,
            max_turns=max_turns,
            project_type=request.project_type or self._settings.project_type,
            debate=debate,
            scaffold=request.scaffold,
            history_tail=self._settings.history_tail,
            max_revisions_per_turn=self._settings.max_revisions_per_turn,
        )

    def start(
        self,
        request: CollaborationRequest,
        cancel: CancellationToken | None = None,
    ) -> CollaborationPipeline:
        """Fresh pipeline with its own state."""
        return CollaborationPipeline(self.build_params(request), self._transport, cancel)

    async def execute_stream(
        self,
        request: CollaborationRequest,
        cancel: CancellationToken | None = None,
    ) -> AsyncIterator[PipelineEvent]:
        """Run the pipeline, stream events."""
        pipeline = self.start(request, cancel)
        async for event in pipeline.events():
            yield event
