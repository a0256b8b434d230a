"""Tests for structured-output extraction."""

import json

import pytest

from codeduo.infrastructure.parsing.json_extractor import (
    extract_json_string,
    from_brace_span,
    from_fenced_block,
    from_whole_text,
    has_json_candidate,
)


class TestExtractJsonString:
    @pytest.mark.parametrize(
        "clean",
        [
            '{"a":1,"b":[1,2]}',
            '[{"type":"file","path":"x"}]',
            json.dumps({"status": "APPROVED", "key_issues": []}, indent=2),
            "[]",
        ],
    )
    def test_idempotent_on_clean_json(self, clean):
        assert extract_json_string(clean) == clean.strip()
        assert extract_json_string(f"\n  {clean}  \n") == clean.strip()

    def test_prefers_fenced_block(self):
        text = 'Intro {"ignored": true}\n```json\n{"status": "APPROVED"}\n```\nbye'
        assert extract_json_string(text) == '{"status": "APPROVED"}'

    def test_falls_back_to_brace_span(self):
        text = 'Sure! Here it is: {"summaryText": "x", "options": []} Hope that helps.'
        assert json.loads(extract_json_string(text)) == {"summaryText": "x", "options": []}

    def test_skips_invalid_fence_for_later_valid_one(self):
        text = '```json\n{"a":}\n```\n```json\n["ok"]\n```'
        assert extract_json_string(text) == '["ok"]'

    @pytest.mark.parametrize("text", ["", None, "no json here", "just [brackets", '{"a":}', "{not json}"])
    def test_returns_none_without_valid_candidate(self, text):
        assert extract_json_string(text) is None


class TestStrategies:
    def test_fenced_block_is_case_insensitive(self):
        assert from_fenced_block('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_fenced_block_ignores_other_languages(self):
        assert from_fenced_block('```tsx\n{"a": 1}\n```') is None

    def test_whole_text_requires_matching_delimiters(self):
        assert from_whole_text('{"a": 1}') == '{"a": 1}'
        assert from_whole_text('{"a": 1} trailing') is None
        assert from_whole_text("[1, 2]") == "[1, 2]"

    def test_brace_span(self):
        assert from_brace_span('x {"a": {"b": 2}} y') == '{"a": {"b": 2}}'
        assert from_brace_span("} backwards {") is None


class TestHasJsonCandidate:
    def test_detects_malformed_fence(self):
        assert has_json_candidate('```json\n{"status": "APPROVED",}\n```')

    def test_plain_prose(self):
        assert not has_json_candidate("Looks good to me, ship it.")

    def test_braces_inside_prose_are_not_json(self):
        text = "The component `() => { return <div>{items}</div> }` looks fine. I approve."
        assert not has_json_candidate(text)

    @pytest.mark.parametrize("text", ['{"status": "APPROVED",}', "  [1, 2,]  "])
    def test_bare_malformed_object_or_array(self, text):
        assert has_json_candidate(text)
