"""Fenced code block extraction."""

import re
from collections.abc import Iterator
from pathlib import PurePosixPath

_FENCE = re.compile(r"```([^\n`]*)\n(.*?)```", re.DOTALL)
_INFO_SPLIT = re.compile(r"[\s:{]")

EXTENSION_LANGUAGES: dict[str, tuple[str, ...]] = {
    ".tsx": ("tsx", "typescript", "ts", "jsx"),
    ".ts": ("ts", "typescript"),
    ".jsx": ("jsx", "javascript", "js"),
    ".js": ("js", "javascript"),
    ".mjs": ("js", "javascript"),
    ".py": ("python", "py"),
    ".css": ("css",),
    ".scss": ("scss", "css"),
    ".html": ("html",),
    ".json": ("json",),
    ".md": ("markdown", "md"),
    ".go": ("go", "golang"),
    ".rs": ("rust", "rs"),
    ".java": ("java",),
    ".rb": ("ruby", "rb"),
    ".sh": ("bash", "sh", "shell"),
    ".yml": ("yaml", "yml"),
    ".yaml": ("yaml", "yml"),
    ".toml": ("toml",),
    ".sql": ("sql",),
    ".vue": ("vue", "html"),
    ".svelte": ("svelte", "html"),
}


def languages_for(filename: str) -> tuple[str, ...]:
    """Fence language tags expected for a file, from its extension."""
    return EXTENSION_LANGUAGES.get(PurePosixPath(filename).suffix.lower(), ())


def iter_fenced_blocks(markdown: str) -> Iterator[tuple[str, str]]:
    """Yield (language tag, body) for each fenced block; the tag is lowercased or empty."""
    for match in _FENCE.finditer(markdown):
        info = match.group(1).strip()
        tag = _INFO_SPLIT.split(info, maxsplit=1)[0].lower() if info else ""
        yield tag, match.group(2)


def extract_code_from_markdown(
    markdown: str,
    languages: tuple[str, ...] | list[str] | None = None,
    allow_untagged: bool = True,
) -> str | None:
    """Body of the first fenced block whose tag matches, or None.

    With no languages given, any block matches. Untagged fences match
    when allow_untagged is set.
    """
    wanted = {lang.lower() for lang in languages or ()}
    for tag, body in iter_fenced_blocks(markdown):
        if not wanted or tag in wanted or (allow_untagged and not tag):
            return body.strip()
    return None
