# tests/test_pdf_font_manager.py
"""Tests for techlingo.processors.pdf_font_manager"""

import pytest

from techlingo.processors.pdf_font_manager import (
    FALLBACK_CHAR_WIDTH,
    FontRegistry,
    _tokenize_for_line_wrap,
    split_text_into_lines_with_font,
)


@pytest.fixture
def font_registry():
    """FontRegistry instance"""
    return FontRegistry()


class TestFontRegistry:
    """Tests for FontRegistry"""

    @pytest.mark.parametrize("family,style,expected", [
        ("times", "normal", "tiro"),
        ("times", "bold", "tibo"),
        ("courier", "normal", "cour"),
        ("courier", "bolditalic", "cobi"),
        ("Helvetica", "Italic", "heit"),
    ])
    def test_get_font_code(self, font_registry, family, style, expected):
        assert font_registry.get_font_code(family, style) == expected

    def test_unknown_family(self, font_registry):
        with pytest.raises(ValueError, match="Unknown font family"):
            font_registry.get_font_code("comic sans")

    def test_unknown_style(self, font_registry):
        with pytest.raises(ValueError, match="Unknown font style"):
            font_registry.get_font_code("times", "heavy")

    def test_font_object_cached(self, font_registry):
        assert font_registry.get_font("cour") is font_registry.get_font("cour")

    def test_courier_is_monospaced(self, font_registry):
        assert font_registry.get_char_width("cour", "i", 10.0) == pytest.approx(6.0)
        assert font_registry.get_char_width("cour", "W", 10.0) == pytest.approx(6.0)

    def test_width_scales_with_size(self, font_registry):
        small = font_registry.get_char_width("tiro", "m", 10.0)
        large = font_registry.get_char_width("tiro", "m", 20.0)
        assert large == pytest.approx(2 * small)
        assert small > 0

    def test_width_cached_normalized(self, font_registry):
        font_registry.get_char_width("tiro", "a", 12.0)
        assert ("tiro", "a") in font_registry._char_width_cache
        assert font_registry._char_width_cache[("tiro", "a")] < 1.0

    def test_text_width_is_sum_of_chars(self, font_registry):
        width = font_registry.get_text_width("abc", "cour", 10.0)
        assert width == pytest.approx(18.0)

    def test_fallback_width_for_missing_glyph(self, font_registry):
        font_registry._font_objects["cour"] = _ZeroAdvanceFont()
        assert font_registry.get_char_width("cour", "x", 10.0) == pytest.approx(
            FALLBACK_CHAR_WIDTH * 10.0
        )


class _ZeroAdvanceFont:
    def glyph_advance(self, codepoint):
        return 0.0


class TestTokenizeForLineWrap:
    """Tests for _tokenize_for_line_wrap()"""

    def test_spaces_stay_with_preceding_word(self):
        assert _tokenize_for_line_wrap("Hello world") == ["Hello ", "world"]

    def test_newlines_are_tokens(self):
        assert _tokenize_for_line_wrap("a\nb") == ["a", "\n", "b"]

    def test_empty(self):
        assert _tokenize_for_line_wrap("") == []


class TestSplitTextIntoLinesWithFont:
    """Tests for split_text_into_lines_with_font() (Courier: 6pt per char at 10pt)"""

    def _split(self, registry, text, width):
        return split_text_into_lines_with_font(text, width, 10.0, "cour", registry)

    def test_empty_text_gives_one_empty_line(self, font_registry):
        assert self._split(font_registry, "", 100.0) == ['']

    def test_fits_on_one_line(self, font_registry):
        assert self._split(font_registry, "Hello world", 100.0) == ["Hello world"]

    def _width(self, registry, text):
        return registry.get_text_width(text, "cour", 10.0)

    def test_word_wrap(self, font_registry):
        width = self._width(font_registry, "aaaa bbbb") + 1
        assert self._split(font_registry, "aaaa bbbb cccc", width) == ["aaaa bbbb", "cccc"]

    def test_long_word_broken_by_character(self, font_registry):
        width = self._width(font_registry, "x" * 10) + 1
        assert self._split(font_registry, "x" * 25, width) == ["x" * 10, "x" * 10, "x" * 5]

    def test_word_fits_without_its_trailing_space(self, font_registry):
        """The separator after a word must not push that word to the next line"""
        width = self._width(font_registry, "aaaa") + 1
        assert self._split(font_registry, "aaaa bbbb cccc", width) == ["aaaa", "bbbb", "cccc"]

    def test_no_blank_lines_invented(self, font_registry):
        text = "one two three four five six seven eight nine ten"
        for extra in (0.5, 1, 3, 7, 13):
            for word in ("three", "seven", "one two"):
                width = self._width(font_registry, word) + extra
                lines = self._split(font_registry, text, width)
                assert "" not in lines
                assert " ".join(lines).split() == text.split()

    def test_long_word_after_indent_emits_no_blank_line(self, font_registry):
        width = self._width(font_registry, "x" * 5) + 1
        assert self._split(font_registry, "  " + "x" * 8, width) == ["x" * 5, "x" * 3]

    def test_long_word_keeps_following_text(self, font_registry):
        width = self._width(font_registry, "x" * 6) + 1
        assert self._split(font_registry, "x" * 8 + " yy", width) == ["x" * 6, "xx yy"]

    def test_explicit_newlines(self, font_registry):
        assert self._split(font_registry, "one\n\ntwo", 100.0) == ["one", "", "two"]

    def test_trailing_newline_gives_final_empty_line(self, font_registry):
        assert self._split(font_registry, "a\n", 100.0) == ["a", ""]

    def test_no_width_splits_on_newlines_only(self, font_registry):
        assert self._split(font_registry, "a b\nc", 0) == ["a b", "c"]

    def test_lines_never_exceed_width(self, font_registry):
        text = "The quick brown fox jumps over the lazy dog " * 5
        for line in split_text_into_lines_with_font(text, 120.0, 11.0, "tiro", font_registry):
            assert font_registry.get_text_width(line, "tiro", 11.0) <= 120.0 + 1e-6

    def test_no_text_lost(self, font_registry):
        text = "alpha beta gamma delta epsilon zeta eta theta"
        lines = self._split(font_registry, text, 70.0)
        assert " ".join(lines).split() == text.split()
