# techlingo/processors/text_cleaner.py
"""
Text cleanup for page text returned by the AI backend.

Decodes the HTML character references models tend to emit and strips
invisible formatting noise. Must run before segmentation so that entity
text can never be mistaken for fence syntax.
"""

import re

# Named references that are decoded. Anything else is left as-is.
NAMED_ENTITIES = {
    "nbsp": " ",
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "#39": "'",
}

# Single pass over every reference form: named, decimal, hex
_RE_ENTITY = re.compile(r"&(?:(nbsp|amp|lt|gt|quot|#39)|#(\d+)|#[xX]([0-9a-fA-F]+));")

# BOM, zero-width space/non-joiner/joiner, word joiner
_RE_INVISIBLE = re.compile("[\ufeff\u200b\u200c\u200d\u2060]")

_MAX_CODE_POINT = 0x10FFFF


def _decode_code_point(value: int) -> str | None:
    """Return the character for a numeric reference, or None if invalid."""
    if value == 0 or value > _MAX_CODE_POINT:
        return None
    if 0xD800 <= value <= 0xDFFF:  # Surrogates
        return None
    return chr(value)


def _replace_entity(match: re.Match) -> str:
    name, decimal, hexadecimal = match.groups()
    if name is not None:
        return NAMED_ENTITIES[name]
    try:
        value = int(decimal) if decimal is not None else int(hexadecimal, 16)
    except ValueError:
        return match.group(0)
    char = _decode_code_point(value)
    return char if char is not None else match.group(0)


def decode_entities(text: str) -> str:
    """
    Decode the supported HTML character references.

    The replacement output is never re-scanned, so "&amp;lt;" decodes to
    "&lt;" rather than "<".
    """
    if "&" not in text:
        return text
    # One regex pass. Chained str.replace calls would turn "&amp;lt;" into "<",
    # and already-escaped markup in the page must survive as written.
    return _RE_ENTITY.sub(_replace_entity, text)


def clean(raw: str) -> str:
    """
    Clean raw page text.

    - Decodes HTML character references (see decode_entities)
    - Normalizes CRLF / CR line endings to LF
    - Removes BOM and zero-width characters

    Never raises; unknown entities and other content are kept untouched.

    Args:
        raw: Page text as returned by the translation backend

    Returns:
        Cleaned text
    """
    if not raw:
        return ""
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    text = _RE_INVISIBLE.sub("", text)
    return decode_entities(text)
