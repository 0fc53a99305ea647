"""Tests for generator prompt helpers."""

from uipatch.prompt import MAX_PROMPT_LENGTH, SYSTEM_PROMPT, build_messages, sanitize_prompt


class TestSanitizePrompt:
    def test_truncates(self):
        assert sanitize_prompt("x" * 500) == "x" * MAX_PROMPT_LENGTH

    def test_short_prompt_unchanged(self):
        assert sanitize_prompt("Create a login form") == "Create a login form"

    def test_coerces(self):
        assert sanitize_prompt(None) == ""
        assert sanitize_prompt(123) == "123"

    def test_custom_length(self):
        assert sanitize_prompt("abcdef", 2) == "ab"


class TestBuildMessages:
    def test_system_then_user(self):
        messages = build_messages("hello")
        assert messages == [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "hello"},
        ]

    def test_system_prompt_describes_patches(self):
        assert '"op":"set","path":"/root"' in SYSTEM_PROMPT
        assert "/elements/" in SYSTEM_PROMPT
