# techlingo/services/prompt_builder.py
"""
Builds page prompts for TechLingo.

Prompt file structure (all optional, under prompts_dir):
- system_prompt.txt: System instruction for every page
- page_text.txt: Prompt for a page of extracted PDF text ({input_text})
- page_image.txt: Prompt sent alongside a page image

Every template may use the {target_language} placeholder. Missing files
fall back to the built-in defaults below.
"""

import logging
from pathlib import Path
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)

DEFAULT_TARGET_LANGUAGE = "Brazilian Portuguese"

DEFAULT_SYSTEM_PROMPT = """You are an expert in OCR, technical document formatting and translation (English -> {target_language}).
Your task is to rebuild the content of one technical document page with perfect structure.

GOLDEN RULES:
1. Code preservation
   - Identify ALL code blocks (C, C++, etc.).
   - Keep them in ENGLISH. Never translate identifiers, functions or comments inside code.
   - Wrap code in triple-backtick Markdown fences (```c ... ```).
   - Fix the indentation to K&R or Allman style with 4 spaces, aligning braces and scopes the way an IDE would.

2. Text and translation
   - Translate the explanatory text into formal, fluent technical {target_language}.
   - Fix OCR errors (broken spacing such as "v a l u e", garbage characters).
   - Keep the paragraph structure. Never break lines in the middle of a sentence; join lines that belong to the same paragraph.

3. Conciseness and layout
   - The translated text must fit on ONE SINGLE PAGE.
   - Be concise without losing meaning.
   - Use a blank line ONLY between paragraphs or before/after code blocks.

4. Clean output
   - Do not add headers such as "Translation:" or "Page X".
   - Output only the formatted Markdown content.
"""

DEFAULT_PAGE_TEXT_TEMPLATE = """Original text:
{input_text}

Task: clean up, format and translate this text into {target_language}, preserving C/C++ code."""

DEFAULT_PAGE_IMAGE_TEMPLATE = (
    "Analyze this image. Extract the text, clean it up and translate it into "
    "{target_language}, preserving C/C++ code."
)


class PromptBuilder:
    """
    Builds the system instruction and per-page prompts for the AI backend.
    """

    def __init__(
        self,
        target_language: str = DEFAULT_TARGET_LANGUAGE,
        prompts_dir: Optional[Path] = None,
    ):
        self.target_language = target_language or DEFAULT_TARGET_LANGUAGE
        self.prompts_dir = prompts_dir
        self._system_template = self._load_template("system_prompt.txt", DEFAULT_SYSTEM_PROMPT)
        self._text_template = self._load_template("page_text.txt", DEFAULT_PAGE_TEXT_TEMPLATE)
        self._image_template = self._load_template("page_image.txt", DEFAULT_PAGE_IMAGE_TEMPLATE)

    def _load_template(self, filename: str, default: str) -> str:
        """Load a template from prompts_dir, falling back to the default."""
        if self.prompts_dir:
            template_file = self.prompts_dir / filename
            if template_file.exists():
                logger.debug("Loaded prompt template: %s", template_file)
                return template_file.read_text(encoding='utf-8')
        return default

    def _apply_placeholders(self, template: str, input_text: str = "") -> str:
        # str.replace, not str.format: page text and code contain braces
        return (
            template
            .replace("{target_language}", self.target_language)
            .replace("{input_text}", input_text)
        )

    def system_prompt(self) -> str:
        """System instruction shared by every page request."""
        return self._apply_placeholders(self._system_template)

    def build_text_prompt(self, raw_text: str) -> str:
        """Prompt for a page of extracted PDF text."""
        return self._apply_placeholders(self._text_template, raw_text)

    def build_image_prompt(self) -> str:
        """Prompt sent together with a page image."""
        return self._apply_placeholders(self._image_template)
