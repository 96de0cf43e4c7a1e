# tests/test_code_tokenizer.py
"""Tests for techlingo.processors.code_tokenizer"""

import pytest

from techlingo.models.types import ColorClass, Token
from techlingo.processors.code_tokenizer import color_for, tokenize_line, tokenize_lines


def _pairs(line: str) -> list[tuple[str, ColorClass]]:
    return [(t.text, t.color_class) for t in tokenize_line(line)]


class TestTokenizeLine:
    """Tests for tokenize_line()"""

    def test_declaration_with_comment(self):
        assert _pairs("int x = 5; // five") == [
            ("int", ColorClass.KEYWORD),
            (" ", ColorClass.DEFAULT),
            ("x", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("=", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("5", ColorClass.NUMBER_LITERAL),
            (";", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("// five", ColorClass.COMMENT),
        ]

    def test_include_with_angle_header(self):
        assert _pairs("#include <stdio.h>") == [
            ("#include", ColorClass.KEYWORD),
            (" ", ColorClass.DEFAULT),
            ("<stdio.h>", ColorClass.STRING_LITERAL),
        ]

    def test_include_with_quoted_header(self):
        assert _pairs('#include "local.h"') == [
            ("#include", ColorClass.KEYWORD),
            (" ", ColorClass.DEFAULT),
            ('"local.h"', ColorClass.STRING_LITERAL),
        ]

    def test_define_directive(self):
        assert _pairs("#define MAX 10") == [
            ("#define", ColorClass.KEYWORD),
            (" ", ColorClass.DEFAULT),
            ("MAX", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("10", ColorClass.NUMBER_LITERAL),
        ]

    def test_escaped_quote_does_not_close_string(self):
        line = '"a\\"b"'
        assert _pairs(line) == [(line, ColorClass.STRING_LITERAL)]

    def test_unterminated_string_runs_to_line_end(self):
        assert _pairs("c = 'abc") == [
            ("c", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("=", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("'abc", ColorClass.STRING_LITERAL),
        ]

    def test_function_call(self):
        assert _pairs('printf("hi");') == [
            ("printf", ColorClass.FUNCTION_NAME),
            ("(", ColorClass.DEFAULT),
            ('"hi"', ColorClass.STRING_LITERAL),
            (")", ColorClass.DEFAULT),
            (";", ColorClass.DEFAULT),
        ]

    def test_function_name_before_spaced_paren(self):
        tokens = tokenize_line("int main (void)")
        assert Token("main", ColorClass.FUNCTION_NAME) in tokens
        assert Token("void", ColorClass.KEYWORD) in tokens

    def test_keyword_wins_over_function_heuristic(self):
        assert tokenize_line("while (1)")[0] == Token("while", ColorClass.KEYWORD)

    def test_hex_number(self):
        assert tokenize_line("0x1F")[0] == Token("0x1F", ColorClass.NUMBER_LITERAL)

    def test_identifier_with_digits(self):
        assert _pairs("x1") == [("x1", ColorClass.DEFAULT)]

    def test_block_comment_start_runs_to_line_end(self):
        assert _pairs("a; /* note") == [
            ("a", ColorClass.DEFAULT),
            (";", ColorClass.DEFAULT),
            (" ", ColorClass.DEFAULT),
            ("/* note", ColorClass.COMMENT),
        ]

    def test_division_is_not_comment(self):
        tokens = tokenize_line("a / b")
        assert Token("/", ColorClass.DEFAULT) in tokens

    def test_empty_line(self):
        assert tokenize_line("") == []

    @pytest.mark.parametrize("line", [
        "int x = 5; // five",
        "#include <stdio.h>",
        '#include <unterminated',
        'printf("%d\\n", x);',
        "std::vector<int> v{1, 2, 3};",
        "    return a->b[0] * 3.14f;",
        "'\\'' \"",
        "#",
        "\\",
        "café = 1;",
    ])
    def test_tokens_concatenate_to_line(self, line):
        assert "".join(t.text for t in tokenize_line(line)) == line


class TestTokenizeLines:
    """Tests for tokenize_lines()"""

    def test_no_state_across_lines(self):
        """A string opened on one line does not continue on the next"""
        first, second = tokenize_lines(['s = "open', "int y;"])
        assert first[-1] == Token('"open', ColorClass.STRING_LITERAL)
        assert second[0] == Token("int", ColorClass.KEYWORD)


class TestColorFor:
    """Tests for color_for()"""

    def test_fixed_palette(self):
        assert color_for(ColorClass.KEYWORD) == (0, 0, 204)
        assert color_for(ColorClass.FUNCTION_NAME) == (128, 0, 128)
        assert color_for(ColorClass.STRING_LITERAL) == (0, 102, 0)
        assert color_for(ColorClass.NUMBER_LITERAL) == (204, 0, 0)
        assert color_for(ColorClass.COMMENT) == (102, 102, 102)
        assert color_for(ColorClass.DEFAULT) == (0, 0, 0)
