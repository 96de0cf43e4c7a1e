# techlingo/processors/content_segmenter.py
"""
Splits cleaned page text into ordered prose / code blocks.

Code is delimited by triple-backtick fences with an optional language tag:

    ```c
    int main(void) { return 0; }
    ```

Everything outside a complete fence is prose. An unterminated fence never
matches, so its marker and content stay in the surrounding prose block
instead of being dropped.
"""

import logging
import re

from techlingo.models.types import BlockKind, ContentBlock
from .text_cleaner import clean

# Module logger
logger = logging.getLogger(__name__)

CODE_TAB_WIDTH = 4

# ``` + optional tag + optional horizontal whitespace + newline, lazy content, ```
_RE_FENCE = re.compile(r"```([\w+#.-]+)?[ \t]*\n(.*?)```", re.DOTALL)


def _strip_blank_edge_lines(code: str) -> str:
    """Drop leading/trailing whitespace-only lines, keeping indentation."""
    lines = code.split("\n")
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def normalize_code(code: str) -> str:
    """
    Normalize fenced code content.

    Tabs become CODE_TAB_WIDTH spaces so indentation width is deterministic;
    blank edge lines are removed while inner blank lines are preserved.
    """
    return _strip_blank_edge_lines(code.replace("\t", " " * CODE_TAB_WIDTH))


def _prose_block(segment: str) -> ContentBlock | None:
    text = segment.strip()
    if not text:
        return None
    return ContentBlock(kind=BlockKind.PROSE, raw_text=text)


def segment(text: str) -> list[ContentBlock]:
    """
    Split page text into typed blocks in discovery order.

    Args:
        text: Raw page text (HTML entities are decoded first)

    Returns:
        Ordered list of non-empty ContentBlock
    """
    cleaned = clean(text)
    blocks: list[ContentBlock] = []
    last_index = 0

    for match in _RE_FENCE.finditer(cleaned):
        prose = _prose_block(cleaned[last_index:match.start()])
        if prose is not None:
            blocks.append(prose)

        code = normalize_code(match.group(2))
        if code:
            blocks.append(ContentBlock(
                kind=BlockKind.CODE,
                raw_text=code,
                language=match.group(1),
            ))
        else:
            logger.debug("Dropping empty code fence at offset %d", match.start())

        last_index = match.end()

    prose = _prose_block(cleaned[last_index:])
    if prose is not None:
        blocks.append(prose)

    if "```" in cleaned[last_index:]:
        logger.debug("Unterminated code fence kept as prose text")

    logger.debug(
        "Segmented page: %d blocks (%d code)",
        len(blocks), sum(1 for b in blocks if b.is_code)
    )
    return blocks
