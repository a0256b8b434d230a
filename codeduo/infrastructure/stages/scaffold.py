"""Scaffold stage - initial folders and files for the project skeleton."""

import json
import logging
from pathlib import PurePosixPath

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.pipeline_events import EventSink, FileCreate, FolderCreate, StatusUpdate
from codeduo.domain.entities.stage_results import ScaffoldItem
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.parsing.json_extractor import extract_json_string
from codeduo.infrastructure.stages.llm_helpers import collect_completion
from codeduo.infrastructure.stages.prompts import SCAFFOLD_SYSTEM_PROMPT, scaffold_user_prompt

logger = logging.getLogger(__name__)


def _clean_path(raw: object) -> str | None:
    """Relative forward-slash path, or None when unusable."""
    if not isinstance(raw, str):
        return None
    path = raw.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.rstrip("/")
    if not path or path.startswith("/") or ".." in PurePosixPath(path).parts:
        return None
    return path


def _to_item(raw: object) -> ScaffoldItem | None:
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    path = _clean_path(raw.get("path"))
    if path is None:
        return None
    if kind == "folder":
        return ScaffoldItem(type="folder", path=path)
    if kind == "file" and isinstance(raw.get("content"), str):
        return ScaffoldItem(type="file", path=path, content=raw["content"])
    return None


def parse_scaffold_items(raw: str) -> tuple[list[ScaffoldItem], int]:
    """Valid items and the number rejected. No recoverable array gives ([], 0)."""
    candidate = extract_json_string(raw)
    if candidate is None:
        logger.warning("Scaffold response contained no JSON")
        return [], 0
    data = json.loads(candidate)
    if not isinstance(data, list):
        logger.warning("Scaffold JSON is not an array")
        return [], 0
    items = [item for item in (_to_item(entry) for entry in data) if item is not None]
    return items, len(data) - len(items)


async def scaffold_stage(
    topic: str,
    worker: WorkerConfig,
    transport: CompletionPort,
    emit: EventSink,
    project_type: str | None = None,
    agreed_plan: str | None = None,
    cancel: CancellationToken | None = None,
) -> list[ScaffoldItem]:
    """Emit one create event per valid item. Transport errors propagate."""
    emit(StatusUpdate(message="Generating project scaffold...", worker="w1"))
    messages = [
        LLMMessage(role="system", content=SCAFFOLD_SYSTEM_PROMPT),
        LLMMessage(role="user", content=scaffold_user_prompt(topic, project_type, agreed_plan)),
    ]
    raw = await collect_completion(transport, worker, messages, cancel)
    items, rejected = parse_scaffold_items(raw)
    if rejected:
        logger.warning("Scaffold: %d invalid item(s) dropped", rejected)
        emit(StatusUpdate(message=f"Scaffold: ignored {rejected} invalid item(s).", worker="system"))

    for item in items:
        if item.type == "folder":
            emit(FolderCreate(path=item.path))
        else:
            emit(FileCreate(path=item.path, content=item.content or ""))
    return items
