"""Collaboration API - runs the pipeline and streams its events as SSE."""

import json
import logging

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from codeduo.api.dependencies import get_collaboration_use_case, get_config, limiter
from codeduo.application.collaboration.dto import CollaborationRequest
from codeduo.application.collaboration.use_case import CollaborationUseCase
from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.pipeline_events import PipelineError, PipelineFinish

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collaboration", tags=["collaboration"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "X-Accel-Buffering": "no",
}


def to_sse(event) -> dict:
    """One SSE frame: event name line plus a JSON data line."""
    return {"event": event.type.value, "data": json.dumps(event.payload())}


def _rate_limit() -> str:
    return f"{get_config().security.rate_limit_requests_per_minute}/minute"


@router.post("", response_model=None)
@limiter.limit(_rate_limit)
async def collaborate(
    request: Request,
    collaboration_request: CollaborationRequest,
    use_case: CollaborationUseCase = Depends(get_collaboration_use_case),
) -> EventSourceResponse:
    """Run one collaboration; the stream stays open until pipeline_finish."""
    cancel = CancellationToken()
    pipeline = use_case.start(collaboration_request, cancel)

    async def event_generator():
        finished = False
        try:
            async for event in pipeline.events():
                finished = isinstance(event, PipelineFinish)
                yield to_sse(event)
        except Exception:
            logger.exception("Collaboration stream failed")
            if not finished:
                yield to_sse(PipelineError(message="Collaboration stream failed"))
                state = pipeline.state
                yield to_sse(
                    PipelineFinish(
                        project_files=dict(state.get("project_files", {})),
                        required_packages=list(state.get("required_packages", [])),
                    )
                )
        finally:
            if not finished:
                cancel.cancel("Client disconnected")

    return EventSourceResponse(event_generator(), headers=STREAM_HEADERS)
