# tests/test_prompt_builder.py
"""Tests for techlingo.services.prompt_builder"""

import tempfile
from pathlib import Path

from techlingo.services.prompt_builder import DEFAULT_TARGET_LANGUAGE, PromptBuilder


class TestPromptBuilderDefaults:
    """Tests for the built-in templates"""

    def test_default_language(self):
        builder = PromptBuilder()
        assert builder.target_language == DEFAULT_TARGET_LANGUAGE
        assert DEFAULT_TARGET_LANGUAGE in builder.system_prompt()

    def test_empty_language_falls_back(self):
        assert PromptBuilder("").target_language == DEFAULT_TARGET_LANGUAGE

    def test_no_placeholders_left(self):
        builder = PromptBuilder("German")
        for prompt in (builder.system_prompt(), builder.build_text_prompt("x"), builder.build_image_prompt()):
            assert "{target_language}" not in prompt
            assert "{input_text}" not in prompt
            assert "German" in prompt

    def test_system_prompt_keeps_code_rules(self):
        prompt = PromptBuilder().system_prompt()
        assert "```c" in prompt
        assert "ONE SINGLE PAGE" in prompt

    def test_text_prompt_with_braces(self):
        """Code braces in page text are inserted verbatim"""
        text = "int main(void) { return {0}; } {target_language}"
        prompt = PromptBuilder("French").build_text_prompt(text)
        assert "int main(void) { return {0}; }" in prompt


class TestPromptBuilderTemplates:
    """Tests for prompt files in prompts_dir"""

    def test_custom_templates_loaded(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            prompts_dir = Path(tmpdir)
            (prompts_dir / "system_prompt.txt").write_text("Translate to {target_language}.", encoding="utf-8")
            (prompts_dir / "page_text.txt").write_text("TEXT: {input_text}", encoding="utf-8")

            builder = PromptBuilder("Italian", prompts_dir)

            assert builder.system_prompt() == "Translate to Italian."
            assert builder.build_text_prompt("abc") == "TEXT: abc"
            # page_image.txt missing -> default
            assert "Analyze this image" in builder.build_image_prompt()

    def test_missing_directory_uses_defaults(self, tmp_path):
        builder = PromptBuilder(prompts_dir=tmp_path / "missing")
        assert builder.system_prompt() == PromptBuilder().system_prompt()
