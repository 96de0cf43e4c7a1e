# techlingo/processors/page_compositor.py
"""
Draws fitted pages onto a DocumentWriter.

Layout per page, top to bottom from the top margin:
- Prose: Times, slate ink, one left-aligned run of wrapped lines
- Code: light panel with a thin border, Courier, token-by-token colouring
- Footer: centred page number in small grey Times

compose_document() drives the whole pipeline for a document: one output
page per input text, each segmented, fitted and drawn in order.
"""

import logging
from typing import Callable, Optional, Sequence, TYPE_CHECKING

from techlingo.models.types import LayoutPlan, MeasuredBlock
from .code_tokenizer import tokenize_line
from .content_segmenter import segment
from .document_writer import (
    BASELINE_OFFSET, CODE_FONT_FAMILY, PROSE_FONT_FAMILY,
    DocumentWriter, make_measure_fn,
)
from .layout_fitter import LayoutConfig, fit

if TYPE_CHECKING:
    from techlingo.config.settings import AppSettings

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Page Style
# =============================================================================
DEFAULT_PAGE_MARGIN = 71.0              # ~25mm on every side

PROSE_TEXT_COLOR = (15, 23, 42)         # Slate-900

CODE_PANEL_FILL = (248, 250, 252)       # Slate-50
CODE_PANEL_BORDER = (226, 232, 240)     # Slate-200
CODE_PANEL_PADDING_X = 6.0
CODE_PANEL_PADDING_TOP = 4.0
CODE_PANEL_PADDING_Y = 8.0              # Total vertical growth of the panel

FOOTER_FONT_SIZE = 9.0
FOOTER_TEXT_COLOR = (150, 150, 150)
FOOTER_OFFSET = 30.0                    # Baseline distance from page bottom


def _draw_prose_block(writer: DocumentWriter, block: MeasuredBlock, plan: LayoutPlan,
                      x: float, y: float) -> None:
    writer.set_font(PROSE_FONT_FAMILY, "normal")
    writer.set_font_size(block.font_size)
    writer.set_text_color(*PROSE_TEXT_COLOR)
    writer.draw_text_lines(block.wrapped_lines, x, y, plan.line_height_factor, block.font_size)


def _draw_code_block(writer: DocumentWriter, block: MeasuredBlock, plan: LayoutPlan,
                     x: float, y: float) -> None:
    writer.set_fill_color(*CODE_PANEL_FILL)
    writer.set_draw_color(*CODE_PANEL_BORDER)
    writer.draw_rect(
        x - CODE_PANEL_PADDING_X,
        y - CODE_PANEL_PADDING_TOP,
        plan.content_width + 2 * CODE_PANEL_PADDING_X,
        block.rendered_height + CODE_PANEL_PADDING_Y,
        "FD",
    )

    size = block.font_size
    pitch = size * plan.line_height_factor
    writer.set_font(CODE_FONT_FAMILY, "normal")
    writer.set_font_size(size)

    for i, line in enumerate(block.wrapped_lines):
        baseline = y + i * pitch + size * BASELINE_OFFSET
        cursor = x
        for token in tokenize_line(line):
            writer.set_text_color(*token.color_class.rgb)
            writer.draw_text(token.text, cursor, baseline)
            cursor += writer.get_text_width(token.text)


def _draw_footer(writer: DocumentWriter, page_number: int) -> None:
    writer.set_font(PROSE_FONT_FAMILY, "normal")
    writer.set_font_size(FOOTER_FONT_SIZE)
    writer.set_text_color(*FOOTER_TEXT_COLOR)
    writer.draw_text(
        str(page_number),
        writer.page_width / 2,
        writer.page_height - FOOTER_OFFSET,
        align="center",
    )


def compose_page(
    writer: DocumentWriter,
    plan: LayoutPlan,
    *,
    page_number: int,
    margin: float = DEFAULT_PAGE_MARGIN,
) -> None:
    """
    Draw one fitted page onto the writer's current page.

    Blocks are drawn in plan order with the plan's spacing between them;
    the footer always shows page_number.

    Args:
        writer: Drawing sink positioned on the page to draw
        plan: LayoutPlan produced by the layout fitter for this page
        page_number: 1-based page number for the footer
        margin: Left and top margin in points
    """
    y = margin
    for block in plan.measured_blocks:
        if block.is_code:
            _draw_code_block(writer, block, plan, margin, y)
        else:
            _draw_prose_block(writer, block, plan, margin, y)
        y += block.rendered_height + plan.inter_block_spacing

    _draw_footer(writer, page_number)


def compose_document(
    writer: DocumentWriter,
    pages_text: Sequence[str],
    settings: Optional["AppSettings"] = None,
    on_page: Optional[Callable[[int, LayoutPlan], None]] = None,
) -> bytes:
    """
    Compose translated page texts into one output document.

    Exactly one output page is produced per input text, in order, even for
    empty pages. Pages are processed strictly sequentially because the
    writer's font state is shared.

    Args:
        writer: Fresh DocumentWriter
        pages_text: Translated Markdown-style text, one entry per page
        settings: Optional AppSettings (margin and layout sizes)
        on_page: Called with (page_number, plan) after each page is drawn

    Returns:
        Serialized document bytes

    Raises:
        MeasurementError: If text measurement fails on any page
    """
    margin = settings.page_margin if settings is not None else DEFAULT_PAGE_MARGIN
    config = LayoutConfig.from_settings(settings)
    content_width = writer.page_width - 2 * margin
    content_height = writer.page_height - 2 * margin
    measure = make_measure_fn(writer, content_width)

    for index, text in enumerate(pages_text):
        page_number = index + 1
        blocks = segment(text)
        plan = fit(blocks, content_width, content_height, measure, config=config)

        writer.add_page()
        compose_page(writer, plan, page_number=page_number, margin=margin)
        logger.info(
            "Composed page %d/%d: %d blocks, scale %.2f",
            page_number, len(pages_text), len(blocks), plan.scale
        )

        if on_page is not None:
            on_page(page_number, plan)

    return writer.output_bytes()
