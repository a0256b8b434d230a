"""Install stage - find packages the generated code needs but the project lacks."""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from codeduo.domain.entities.cancellation import CancellationToken
from codeduo.domain.entities.pipeline_events import (
    EventSink,
    InstallAnalysisComplete,
    InstallCommand,
    InstallNoActionsNeeded,
)
from codeduo.domain.entities.worker import WorkerConfig
from codeduo.domain.errors import InstallStageError, PipelineCancelledError
from codeduo.domain.ports.llm import CompletionPort, LLMMessage
from codeduo.infrastructure.parsing.json_extractor import extract_json_string
from codeduo.infrastructure.stages.llm_helpers import collect_completion
from codeduo.infrastructure.stages.prompts import INSTALL_SYSTEM_PROMPT, install_user_prompt

logger = logging.getLogger(__name__)

# npm scopes, extras and version pins are accepted; shell metacharacters are not
_PACKAGE_SPEC = re.compile(r"^(@[a-z0-9][\w.-]*/)?[A-Za-z0-9][\w.-]*(\[[\w,.-]+\])?([=<>~^!@][\w.*<>=!~^-]*)?$")

MANIFEST_FILES = ("package.json", "pyproject.toml", "requirements.txt")


@dataclass(frozen=True)
class PackageManager:
    name: str
    add_verb: str

    def command(self, package: str) -> str:
        return f"{self.name} {self.add_verb} {package}"


DEFAULT_PACKAGE_MANAGER = PackageManager("pnpm", "add")

# First marker found wins
MARKER_FILES: tuple[tuple[str, PackageManager], ...] = (
    ("pnpm-lock.yaml", PackageManager("pnpm", "add")),
    ("yarn.lock", PackageManager("yarn", "add")),
    ("package-lock.json", PackageManager("npm", "install")),
    ("bun.lockb", PackageManager("bun", "add")),
    ("uv.lock", PackageManager("uv", "add")),
    ("poetry.lock", PackageManager("poetry", "add")),
    ("requirements.txt", PackageManager("pip", "install")),
)


def detect_package_manager(project_files: dict[str, str]) -> PackageManager:
    """Pick the manager from lockfiles present anywhere in the project."""
    basenames = {PurePosixPath(path).name for path in project_files}
    for marker, manager in MARKER_FILES:
        if marker in basenames:
            return manager
    return DEFAULT_PACKAGE_MANAGER


def _manifests(project_files: dict[str, str]) -> dict[str, str]:
    return {
        path: content
        for path, content in project_files.items()
        if PurePosixPath(path).name in MANIFEST_FILES
    }


def parse_package_names(raw: str) -> list[str]:
    """Deduplicated package names; anything but a JSON array of strings yields []."""
    candidate = extract_json_string(raw)
    if candidate is None:
        logger.info("Install analysis returned no JSON")
        return []
    data = json.loads(candidate)
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        logger.warning("Install analysis JSON is not an array of strings: %s", candidate[:200])
        return []

    names: list[str] = []
    for item in data:
        name = item.strip()
        if not name or name in names:
            continue
        if not _PACKAGE_SPEC.match(name):
            logger.warning("Dropping invalid package name %r", name)
            continue
        names.append(name)
    return names


async def install_stage(
    *,
    refined_prompt: str,
    history: list[LLMMessage],
    project_files: dict[str, str],
    worker: WorkerConfig,
    transport: CompletionPort,
    emit: EventSink,
    project_type: str | None = None,
    agreed_plan: str | None = None,
    cancel: CancellationToken | None = None,
) -> list[str]:
    """Emit install commands for missing packages and return them.

    Failures of the analysis call are raised as InstallStageError.
    """
    manager = detect_package_manager(project_files)
    messages = [
        LLMMessage(
            role="system",
            content=INSTALL_SYSTEM_PROMPT.format(
                project_type=project_type or "general web project",
                package_manager=manager.name,
            ),
        ),
        *history,
        LLMMessage(
            role="user",
            content=install_user_prompt(
                refined_prompt, list(project_files), _manifests(project_files), agreed_plan
            ),
        ),
    ]
    try:
        raw = await collect_completion(transport, worker, messages, cancel)
    except PipelineCancelledError:
        raise
    except Exception as e:
        raise InstallStageError(f"Install stage failed during analysis: {e}") from e

    names = parse_package_names(raw)
    if not names:
        emit(InstallNoActionsNeeded())
        return []

    commands = []
    for name in names:
        command = manager.command(name)
        commands.append(command)
        emit(InstallCommand(command=command))
    emit(InstallAnalysisComplete(commands=commands))
    return commands
