# techlingo/processors/pdf_font_manager.py
"""
PDF font management for TechLingo.

Output pages use the PDF base-14 fonts only, so nothing is embedded and
metrics come straight from PyMuPDF's built-in font programs.

Features:
- (family, style) -> base-14 font code mapping
- Cached PyMuPDF Font objects and per-character widths
- Word-aware line wrapping with real font metrics
"""

import logging
from typing import Any, Optional

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Lazy Imports
# =============================================================================
_pymupdf = None


def _get_pymupdf():
    """Lazy import PyMuPDF"""
    global _pymupdf
    if _pymupdf is None:
        import pymupdf
        _pymupdf = pymupdf
    return _pymupdf


# =============================================================================
# Base-14 Font Table
# =============================================================================
FONT_STYLES = ("normal", "bold", "italic", "bolditalic")

# family -> style -> PyMuPDF base-14 font code
BASE14_FONTS = {
    "times": {
        "normal": "tiro",        # Times-Roman
        "bold": "tibo",          # Times-Bold
        "italic": "tiit",        # Times-Italic
        "bolditalic": "tibi",    # Times-BoldItalic
    },
    "courier": {
        "normal": "cour",        # Courier
        "bold": "cobo",          # Courier-Bold
        "italic": "coit",        # Courier-Oblique
        "bolditalic": "cobi",    # Courier-BoldOblique
    },
    "helvetica": {
        "normal": "helv",        # Helvetica
        "bold": "hebo",          # Helvetica-Bold
        "italic": "heit",        # Helvetica-Oblique
        "bolditalic": "hebi",    # Helvetica-BoldOblique
    },
}


DEFAULT_FONT_SIZE = 11.0
# Normalized advance used when a font reports no width for a character
FALLBACK_CHAR_WIDTH = 0.5


class FontRegistry:
    """
    Base-14 font lookup and text metrics.

    Widths are cached normalized (em units) per (font code, char) and scaled
    by the font size at lookup time.
    """

    def __init__(self):
        self._font_objects: dict[str, Any] = {}
        # (font_code, char) -> normalized width (multiply by font_size)
        self._char_width_cache: dict[tuple[str, str], float] = {}

    def get_font_code(self, family: str, style: str = "normal") -> str:
        """
        Resolve a font family and style to a base-14 font code.

        Raises:
            ValueError: Unknown family or style
        """
        styles = BASE14_FONTS.get(family.lower())
        if styles is None:
            raise ValueError(
                f"Unknown font family: {family!r} (expected one of {', '.join(BASE14_FONTS)})"
            )
        code = styles.get(style.lower())
        if code is None:
            raise ValueError(
                f"Unknown font style: {style!r} (expected one of {', '.join(FONT_STYLES)})"
            )
        return code

    def get_font(self, font_code: str):
        """Get (and cache) the PyMuPDF Font object for a base-14 code."""
        font = self._font_objects.get(font_code)
        if font is None:
            pymupdf = _get_pymupdf()
            font = pymupdf.Font(fontname=font_code)
            self._font_objects[font_code] = font
            logger.debug("Loaded base-14 font: %s", font_code)
        return font

    def get_char_width(self, font_code: str, char: str, font_size: float) -> float:
        """
        Get character width in points for the specified font and size.

        Args:
            font_code: Base-14 font code (see get_font_code)
            char: Single character
            font_size: Font size in points

        Returns:
            Character width in points
        """
        cache_key = (font_code, char)
        if cache_key in self._char_width_cache:
            return self._char_width_cache[cache_key] * font_size

        normalized_width: Optional[float] = None
        try:
            advance = self.get_font(font_code).glyph_advance(ord(char))
            if advance:
                normalized_width = advance
        except (RuntimeError, ValueError, TypeError) as e:
            logger.debug("Error getting char width for '%s' (%s): %s", char, font_code, e)

        if normalized_width is None:
            normalized_width = FALLBACK_CHAR_WIDTH

        self._char_width_cache[cache_key] = normalized_width
        return normalized_width * font_size

    def get_text_width(self, text: str, font_code: str, font_size: float) -> float:
        """Width of text in points (sum of character advances)."""
        return sum(self.get_char_width(font_code, char, font_size) for char in text)


def _tokenize_for_line_wrap(text: str) -> list[str]:
    """
    Tokenize text for line wrapping.

    Splits by spaces, keeping each space with the preceding word so a
    break never starts a line with the separator. Newlines are separate
    tokens.

    Examples:
        "Hello world" -> ["Hello ", "world"]
        "a\\nb" -> ["a", "\\n", "b"]
    """
    if not text:
        return []

    tokens = []
    current_token: list[str] = []

    for char in text:
        if char == '\n':
            if current_token:
                tokens.append(''.join(current_token))
                current_token = []
            tokens.append('\n')
        elif char == ' ':
            current_token.append(char)
            tokens.append(''.join(current_token))
            current_token = []
        else:
            current_token.append(char)

    if current_token:
        tokens.append(''.join(current_token))

    return tokens


def split_text_into_lines_with_font(
    text: str,
    box_width: float,
    font_size: float,
    font_code: str,
    font_registry: FontRegistry,
) -> list[str]:
    """
    Split text into lines using actual font metrics.

    Word-aware: a word that does not fit moves to the next line, and only
    a word wider than the whole line is broken between characters.
    Explicit newlines always break. Empty text yields one empty line.

    Args:
        text: Text to split
        box_width: Maximum width per line
        font_size: Font size in points
        font_code: Base-14 font code for width lookup
        font_registry: FontRegistry instance

    Returns:
        Non-empty list of lines that fit within box_width
    """
    if not text:
        return ['']

    if box_width <= 0:
        return text.split('\n')
    if font_size <= 0:
        font_size = DEFAULT_FONT_SIZE

    tokens = _tokenize_for_line_wrap(text)

    lines = []
    current_line_tokens: list[str] = []
    current_width = 0.0

    for token in tokens:
        if token == '\n':
            lines.append(''.join(current_line_tokens).rstrip(' '))
            current_line_tokens = []
            current_width = 0.0
            continue

        # Trailing spaces never decide whether a word fits
        word = token.rstrip(' ')
        word_width = font_registry.get_text_width(word, font_code, font_size)

        if current_width + word_width <= box_width:
            current_line_tokens.append(token)
            current_width += font_registry.get_text_width(token, font_code, font_size)
            continue

        if current_line_tokens:
            # Word doesn't fit - start new line (indent-only prefix is dropped)
            pending = ''.join(current_line_tokens).rstrip(' ')
            if pending:
                lines.append(pending)
            token = token.lstrip(' ')
            current_line_tokens = []
            current_width = 0.0
            if not token:
                continue
            word = token.rstrip(' ')
            word_width = font_registry.get_text_width(word, font_code, font_size)
            if word_width <= box_width:
                current_line_tokens = [token]
                current_width = font_registry.get_text_width(token, font_code, font_size)
                continue

        # Word wider than the line - break it between characters
        chars_added: list[str] = []
        char_width_sum = 0.0
        for char in word:
            char_width = font_registry.get_char_width(font_code, char, font_size)
            if char_width_sum + char_width > box_width and chars_added:
                lines.append(''.join(chars_added))
                chars_added = [char]
                char_width_sum = char_width
            else:
                chars_added.append(char)
                char_width_sum += char_width
        spaces = token[len(word):]
        current_line_tokens = [''.join(chars_added) + spaces]
        current_width = char_width_sum + font_registry.get_text_width(spaces, font_code, font_size)

    if current_line_tokens or not lines or tokens[-1] == '\n':
        lines.append(''.join(current_line_tokens).rstrip(' '))

    return lines
