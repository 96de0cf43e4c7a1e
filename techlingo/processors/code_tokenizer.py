# techlingo/processors/code_tokenizer.py
"""
Single-line lexer for syntax colouring of C/C++ code.

Best-effort by design: each line is scanned on its own, left to right, with
one character of lookahead. No state is carried between lines, so a block
comment or string that spans lines only colours its first line.

Rules, first match wins at each position:
1. "//" or "/*"      -> rest of the line is a comment
2. '"' or "'"        -> string literal up to the closing quote or line end
3. "#"               -> preprocessor directive (keyword), with
                        "#include <header>" colouring <header> as a string
4. ASCII digit       -> number literal ([0-9.xXa-fA-F]*)
5. [A-Za-z_]         -> keyword, function name (followed by "(") or identifier
6. anything else     -> single default-coloured character
"""

from typing import Iterable

from techlingo.models.types import ColorClass, Token


# C/C++ keywords, qualifiers, literal names and a few standard-library names
C_KEYWORDS = frozenset({
    # C
    'auto', 'break', 'case', 'char', 'const', 'continue', 'default', 'do',
    'double', 'else', 'enum', 'extern', 'float', 'for', 'goto', 'if', 'int',
    'long', 'register', 'return', 'short', 'signed', 'sizeof', 'static',
    'struct', 'switch', 'typedef', 'union', 'unsigned', 'void', 'volatile',
    'while',
    # C++
    'bool', 'catch', 'class', 'const_cast', 'delete', 'dynamic_cast',
    'explicit', 'export', 'false', 'friend', 'inline', 'mutable', 'namespace',
    'new', 'operator', 'private', 'protected', 'public', 'reinterpret_cast',
    'static_cast', 'template', 'this', 'throw', 'true', 'try', 'typeid',
    'typename', 'using', 'virtual', 'wchar_t', 'nullptr',
    # Standard library
    'std', 'vector', 'string', 'map', 'list',
})

_IDENT_START = frozenset('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_')
_IDENT_CHARS = _IDENT_START | frozenset('0123456789')
_DIGITS = frozenset('0123456789')
_NUMBER_CHARS = _DIGITS | frozenset('.xXabcdefABCDEF')


def color_for(color_class: ColorClass) -> tuple[int, int, int]:
    """Get the RGB ink colour for a token class."""
    return color_class.rgb


def _scan_while(line: str, start: int, allowed: frozenset) -> int:
    """Return the first index at or after start whose char is not allowed."""
    i = start
    length = len(line)
    while i < length and line[i] in allowed:
        i += 1
    return i


def _skip_whitespace(line: str, start: int) -> int:
    i = start
    length = len(line)
    while i < length and line[i].isspace():
        i += 1
    return i


def _scan_string(line: str, start: int) -> int:
    """
    Return the end index (exclusive) of the string literal opening at start.

    A backslash escapes the next character, so an escaped quote never
    closes the literal. Unterminated literals run to the end of the line.
    """
    quote = line[start]
    i = start + 1
    length = len(line)
    while i < length:
        char = line[i]
        if char == '\\':
            i += 2
            continue
        i += 1
        if char == quote:
            return i
    return length


def _scan_directive(line: str, start: int, tokens: list[Token]) -> int:
    """Tokenize a "#" directive starting at start; return the next index."""
    end = _scan_while(line, start + 1, _IDENT_CHARS)
    directive = line[start:end]

    if directive == '#include':
        header_start = _skip_whitespace(line, end)
        if header_start < len(line) and line[header_start] == '<':
            tokens.append(Token(directive, ColorClass.KEYWORD))
            if header_start > end:
                tokens.append(Token(line[end:header_start], ColorClass.DEFAULT))
            close = line.find('>', header_start)
            header_end = close + 1 if close != -1 else len(line)
            tokens.append(Token(line[header_start:header_end], ColorClass.STRING_LITERAL))
            return header_end

    tokens.append(Token(directive, ColorClass.KEYWORD))
    return end


def _classify_word(line: str, word: str, end: int) -> ColorClass:
    if word in C_KEYWORDS:
        return ColorClass.KEYWORD
    # Call/declaration heuristic: next non-space character is "("
    next_index = _skip_whitespace(line, end)
    if next_index < len(line) and line[next_index] == '(':
        return ColorClass.FUNCTION_NAME
    return ColorClass.DEFAULT


def tokenize_line(line: str) -> list[Token]:
    """
    Split one line of code into coloured tokens.

    Never raises. The token texts always concatenate back to the input line.

    Args:
        line: A single line of code (no newline)

    Returns:
        Tokens in line order
    """
    tokens: list[Token] = []
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        next_char = line[i + 1] if i + 1 < length else ''

        if char == '/' and next_char in ('/', '*'):
            tokens.append(Token(line[i:], ColorClass.COMMENT))
            i = length
        elif char == '"' or char == "'":
            end = _scan_string(line, i)
            tokens.append(Token(line[i:end], ColorClass.STRING_LITERAL))
            i = end
        elif char == '#':
            i = _scan_directive(line, i, tokens)
        elif char in _DIGITS:
            end = _scan_while(line, i + 1, _NUMBER_CHARS)
            tokens.append(Token(line[i:end], ColorClass.NUMBER_LITERAL))
            i = end
        elif char in _IDENT_START:
            end = _scan_while(line, i + 1, _IDENT_CHARS)
            word = line[i:end]
            tokens.append(Token(word, _classify_word(line, word, end)))
            i = end
        else:
            tokens.append(Token(char, ColorClass.DEFAULT))
            i += 1

    return tokens


def tokenize_lines(lines: Iterable[str]) -> list[list[Token]]:
    """Tokenize each line independently (no state crosses line boundaries)."""
    return [tokenize_line(line) for line in lines]
