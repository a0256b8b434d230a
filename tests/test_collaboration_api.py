"""Collaboration API integration tests - SSE framing over a scripted transport."""

import json

import pytest
from httpx import ASGITransport, AsyncClient
from sse_starlette.sse import AppStatus

from codeduo.api.dependencies import get_collaboration_use_case
from codeduo.application.collaboration.credentials import CredentialResolver
from codeduo.application.collaboration.use_case import CollaborationUseCase
from codeduo.domain.ports.config import PipelineConfig
from codeduo.main import app


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps a loop-bound exit event between apps."""
    AppStatus.should_exit_event = None
    yield
    AppStatus.should_exit_event = None


@pytest.fixture
def override_use_case(scripted_transport, happy_scripts):
    transport = scripted_transport(happy_scripts)
    app.dependency_overrides[get_collaboration_use_case] = lambda: CollaborationUseCase(
        transport, PipelineConfig(), CredentialResolver()
    )
    yield transport
    app.dependency_overrides.pop(get_collaboration_use_case, None)


def parse_sse(body: str) -> list[tuple[str, dict]]:
    """(event name, decoded data) per frame."""
    frames = []
    event = None
    for line in body.splitlines():
        if line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:") and event is not None:
            frames.append((event, json.loads(line[len("data:"):].strip())))
            event = None
    return frames


REQUEST = {
    "prompt": "build a todo app",
    "worker1Config": {"provider": "ollama", "model": "coder"},
    "worker2Config": {"provider": "OpenAI", "model": "gpt-4o", "apiKey": "sk-test"},
    "maxTurns": 1,
}


@pytest.mark.asyncio
async def test_collaboration_streams_events(override_use_case):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/collaboration", json=REQUEST)

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.headers["cache-control"].startswith("no-cache")

    frames = parse_sse(resp.text)
    names = [name for name, _ in frames]
    assert names[0] == "pipeline_start"
    assert names[-1] == "pipeline_finish"
    assert "pipeline_error" not in names
    assert frames[0][1] == {"initialPrompt": "build a todo app", "maxTurns": 1}

    file_updates = [data for name, data in frames if name == "file_update"]
    assert len(file_updates) == 1
    assert file_updates[0]["filename"] == "app/page.tsx"

    review = next(data for name, data in frames if name == "review_result")
    assert review["status"] == "APPROVED"
    assert "next_action_for_w1" in review

    finish = frames[-1][1]
    assert list(finish["projectFiles"]) == ["app/page.tsx"]
    assert finish["requiredPackages"] == []
    assert "sk-test" not in resp.text


@pytest.mark.asyncio
async def test_collaboration_stage_failure_still_finishes(override_use_case):
    override_use_case.scripts["codegen"] = [RuntimeError("model crashed")]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/collaboration", json=REQUEST)

    names = [name for name, _ in parse_sse(resp.text)]
    assert names[-2:] == ["pipeline_error", "pipeline_finish"]
    assert "file_update" not in names


@pytest.mark.asyncio
async def test_collaboration_validates_request(override_use_case):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        missing = await client.post("/collaboration", json={"prompt": "x"})
        bad_provider = await client.post(
            "/collaboration",
            json={**REQUEST, "worker1Config": {"provider": "anthropic", "model": "m"}},
        )
        bad_turns = await client.post("/collaboration", json={**REQUEST, "maxTurns": -1})

    assert missing.status_code == 422
    assert bad_provider.status_code == 422
    assert bad_turns.status_code == 422
    assert override_use_case.calls == []
