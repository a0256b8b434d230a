"""Tests for fenced code block extraction."""

from codeduo.infrastructure.parsing.markdown import (
    extract_code_from_markdown,
    iter_fenced_blocks,
    languages_for,
)


class TestLanguagesFor:
    def test_known_extensions(self):
        assert "tsx" in languages_for("app/page.tsx")
        assert languages_for("main.py") == ("python", "py")
        assert languages_for("STYLE.CSS") == ("css",)

    def test_unknown_extension(self):
        assert languages_for("Makefile") == ()


class TestExtractCode:
    def test_matching_language(self):
        text = "Explanation\n```tsx\nconst a = 1;\n```\n"
        assert extract_code_from_markdown(text, languages_for("page.tsx")) == "const a = 1;"

    def test_skips_non_matching_blocks(self):
        text = "```bash\nnpm i\n```\n```python\nprint('hi')\n```"
        assert extract_code_from_markdown(text, ("python",)) == "print('hi')"

    def test_untagged_fence_accepted(self):
        assert extract_code_from_markdown("```\nx = 1\n```", ("python",)) == "x = 1"

    def test_untagged_fence_rejected_when_disallowed(self):
        assert extract_code_from_markdown("```\nx = 1\n```", ("python",), allow_untagged=False) is None

    def test_info_string_with_filename(self):
        text = "```tsx:app/page.tsx\nexport {};\n```"
        assert extract_code_from_markdown(text, ("tsx",)) == "export {};"

    def test_any_block_without_languages(self):
        assert extract_code_from_markdown("```go\npackage main\n```") == "package main"

    def test_no_block(self):
        assert extract_code_from_markdown("no code at all", ("tsx",)) is None

    def test_iter_blocks(self):
        text = "```JS\na\n```\n```\nb\n```"
        assert list(iter_fenced_blocks(text)) == [("js", "a\n"), ("", "b\n")]
