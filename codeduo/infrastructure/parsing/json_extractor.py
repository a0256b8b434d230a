"""Recover a JSON payload embedded in free-form model output.

Models wrap JSON in prose or markdown no matter how strictly they are told
not to. Each strategy below is independent and returns a candidate string
that is already known to parse, or None; `extract_json_string` runs them
in order and returns the first hit.
"""

import json
import re
from collections.abc import Callable

_JSON_FENCE = re.compile(r"```[ \t]*(?:json5?|jsonc)\b[^\n]*\n?(.*?)```", re.IGNORECASE | re.DOTALL)

Strategy = Callable[[str], "str | None"]


def _parses(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except (ValueError, RecursionError):
        return False
    return True


def from_fenced_block(text: str) -> str | None:
    """Content of the first ```json fence that parses."""
    for match in _JSON_FENCE.finditer(text):
        candidate = match.group(1).strip()
        if candidate and _parses(candidate):
            return candidate
    return None


def from_whole_text(text: str) -> str | None:
    """The trimmed text itself, when it is a bare object or array."""
    candidate = text.strip()
    if not candidate:
        return None
    if (candidate[0], candidate[-1]) not in (("{", "}"), ("[", "]")):
        return None
    return candidate if _parses(candidate) else None


def from_brace_span(text: str) -> str | None:
    """Substring from the first '{' to the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    candidate = text[start : end + 1]
    return candidate if _parses(candidate) else None


STRATEGIES: tuple[Strategy, ...] = (from_fenced_block, from_whole_text, from_brace_span)


def extract_json_string(text: str | None) -> str | None:
    """Return the first syntactically valid JSON candidate in text, or None. Never raises."""
    if not text:
        return None
    for strategy in STRATEGIES:
        candidate = strategy(text)
        if candidate is not None:
            return candidate
    return None


def has_json_candidate(text: str | None) -> bool:
    """Whether text was meant to be JSON: a ```json fence, or a bare object or array.

    Braces inside prose (JSX, code snippets) do not count.
    """
    if not text:
        return False
    if _JSON_FENCE.search(text):
        return True
    stripped = text.strip()
    return bool(stripped) and (stripped[0], stripped[-1]) in (("{", "}"), ("[", "]"))
