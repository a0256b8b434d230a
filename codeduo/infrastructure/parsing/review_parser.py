"""Parse the reviewer's structured verdict."""

import json
import logging

from codeduo.domain.entities.stage_results import (
    ERROR_NO_JSON_FOUND,
    ERROR_PARSING_JSON,
    ReviewStatus,
    ReviewVerdict,
)
from codeduo.infrastructure.parsing.json_extractor import extract_json_string, has_json_candidate

logger = logging.getLogger(__name__)

_STATUS_ALIASES = {
    "REVISON_NEEDED": ReviewStatus.REVISION_NEEDED,
    "REVISIONS_NEEDED": ReviewStatus.REVISION_NEEDED,
    "NEEDS_REVISION": ReviewStatus.REVISION_NEEDED,
}


def normalize_status(raw: object) -> ReviewStatus:
    """Map a free-form status string onto ReviewStatus; anything unrecognised is UNKNOWN."""
    if not isinstance(raw, str):
        return ReviewStatus.UNKNOWN
    key = raw.strip().upper().replace(" ", "_").replace("-", "_")
    if key in _STATUS_ALIASES:
        return _STATUS_ALIASES[key]
    try:
        return ReviewStatus(key)
    except ValueError:
        return ReviewStatus.UNKNOWN


def _unknown(action: str) -> ReviewVerdict:
    return ReviewVerdict(status=ReviewStatus.UNKNOWN, key_issues=[], next_action_for_w1=action)


def parse_review_output(response: str) -> ReviewVerdict:
    """Verdict from the reviewer's raw text. Malformed output becomes an UNKNOWN verdict."""
    candidate = extract_json_string(response)
    if candidate is None:
        if has_json_candidate(response):
            logger.warning("Review JSON present but unparseable: %s", response[:200])
            return _unknown(ERROR_PARSING_JSON)
        logger.warning("No JSON found in review response: %s", response[:200])
        return _unknown(ERROR_NO_JSON_FOUND)

    data = json.loads(candidate)
    if not isinstance(data, dict):
        return _unknown(ERROR_PARSING_JSON)

    status = data.get("status")
    issues = data.get("key_issues")
    action = data.get("next_action_for_w1")
    if not isinstance(status, str) or not status.strip():
        return _unknown(ERROR_PARSING_JSON)
    if not isinstance(issues, list) or not isinstance(action, str) or not action.strip():
        return _unknown(ERROR_PARSING_JSON)

    return ReviewVerdict(
        status=normalize_status(status),
        key_issues=[str(issue) for issue in issues if issue is not None and str(issue).strip()],
        next_action_for_w1=action.strip(),
    )
