# techlingo/processors/layout_fitter.py
"""
Fits one page of blocks into a fixed content area.

All blocks share one scale factor applied to the prose and code base font
sizes and to the inter-block spacing. Scales are tried from 1.0 downwards
in fixed steps; the first one whose total height fits wins. Line wrapping
makes height a step function of font size, so this is a bounded linear
sweep rather than a bisection.

When nothing fits, the attempt at the scale floor is used and the overflow
is accepted: readable text is preferred over a strict one-page guarantee.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING

from techlingo.models.types import (
    ContentBlock, LayoutAttempt, LayoutPlan, MeasuredBlock, MeasureFn,
)

if TYPE_CHECKING:
    from techlingo.config.settings import AppSettings

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Layout Constants
# =============================================================================
DEFAULT_PROSE_FONT_SIZE = 11.0     # pt at scale 1.0
DEFAULT_CODE_FONT_SIZE = 9.5       # pt at scale 1.0 (denser than prose)
DEFAULT_LINE_HEIGHT_FACTOR = 1.35
DEFAULT_BLOCK_SPACING = 14.0       # pt at scale 1.0
MIN_SCALE = 0.65
SCALE_STEP = 0.05

_SCALE_EPSILON = 1e-9


class MeasurementError(Exception):
    """Raised when the text measurement oracle fails for a page."""

    def __init__(self, message: str = "Text measurement failed"):
        self.message = message
        super().__init__(self.message)


@dataclass(frozen=True)
class LayoutConfig:
    """Base sizes and scale search bounds."""
    prose_font_size: float = DEFAULT_PROSE_FONT_SIZE
    code_font_size: float = DEFAULT_CODE_FONT_SIZE
    line_height_factor: float = DEFAULT_LINE_HEIGHT_FACTOR
    block_spacing: float = DEFAULT_BLOCK_SPACING
    min_scale: float = MIN_SCALE
    scale_step: float = SCALE_STEP

    @classmethod
    def from_settings(cls, settings: Optional["AppSettings"]) -> "LayoutConfig":
        if settings is None:
            return cls()
        return cls(
            prose_font_size=settings.prose_font_size,
            code_font_size=settings.code_font_size,
            line_height_factor=settings.line_height_factor,
            block_spacing=settings.block_spacing,
            min_scale=settings.min_scale,
            scale_step=settings.scale_step,
        )


def candidate_scales(config: LayoutConfig) -> list[float]:
    """
    Scales to try, from 1.0 down to the floor (inclusive).

    Each scale is computed from its step index rather than by repeated
    subtraction, so float drift can never skip or overshoot the floor.
    """
    floor = min(1.0, config.min_scale)
    steps = int(math.floor((1.0 - floor) / config.scale_step + _SCALE_EPSILON))
    scales = [round(1.0 - k * config.scale_step, 6) for k in range(steps + 1)]
    if scales[-1] > floor + _SCALE_EPSILON:
        scales.append(floor)
    return scales


def _call_measure(measure: MeasureFn, text: str, is_code: bool, font_size: float) -> list[str]:
    try:
        lines = measure(text, is_code, font_size)
    except MeasurementError:
        raise
    except Exception as e:
        raise MeasurementError(
            f"Measurement failed at {font_size:.2f}pt ({'code' if is_code else 'prose'}): {e}"
        ) from e
    return list(lines)


def measure_block(
    block: ContentBlock,
    font_size: float,
    line_height_factor: float,
    measure: MeasureFn,
) -> MeasuredBlock:
    """
    Wrap one block at a font size and compute its height.

    Code wraps each source line on its own so original line breaks are
    never merged; a blank source line keeps one empty output line. Prose
    wraps the whole paragraph.

    Raises:
        MeasurementError: If the oracle fails or returns no lines
    """
    if block.is_code:
        wrapped: list[str] = []
        for source_line in block.raw_text.split('\n'):
            wrapped.extend(_call_measure(measure, source_line, True, font_size) or [''])
    else:
        wrapped = _call_measure(measure, block.raw_text, False, font_size)
        if not wrapped:
            raise MeasurementError(
                f"Measurement returned no lines for a {len(block.raw_text)}-character prose block"
            )

    height = len(wrapped) * font_size * line_height_factor
    return MeasuredBlock(
        block=block,
        wrapped_lines=tuple(wrapped),
        rendered_height=height,
        font_size=font_size,
    )


def attempt_layout(
    blocks: Sequence[ContentBlock],
    scale: float,
    max_height: float,
    measure: MeasureFn,
    config: LayoutConfig,
) -> LayoutAttempt:
    """Measure every block at one scale and total the page height."""
    prose_size = config.prose_font_size * scale
    code_size = config.code_font_size * scale
    spacing = config.block_spacing * scale

    measured = tuple(
        measure_block(
            block,
            code_size if block.is_code else prose_size,
            config.line_height_factor,
            measure,
        )
        for block in blocks
    )
    total = sum(b.rendered_height for b in measured)
    if len(measured) > 1:
        total += spacing * (len(measured) - 1)

    return LayoutAttempt(
        scale=scale,
        measured_blocks=measured,
        total_height=total,
        max_height=max_height,
    )


def fit(
    blocks: Sequence[ContentBlock],
    max_width: float,
    max_height: float,
    measure: MeasureFn,
    settings: Optional["AppSettings"] = None,
    *,
    config: Optional[LayoutConfig] = None,
) -> LayoutPlan:
    """
    Find the largest scale at which the page content fits.

    Args:
        blocks: Page blocks in render order (empty blocks already dropped)
        max_width: Content width that `measure` wraps to
        max_height: Available content height
        measure: Measurement oracle (text, is_code, font_size) -> lines
        settings: Optional AppSettings supplying base sizes and bounds
        config: Explicit LayoutConfig (takes precedence over settings)

    Returns:
        LayoutPlan at the first fitting scale, or at the scale floor with
        `overflow` > 0 when nothing fits

    Raises:
        MeasurementError: If the measurement oracle fails
    """
    if config is None:
        config = LayoutConfig.from_settings(settings)

    attempt: Optional[LayoutAttempt] = None
    for scale in candidate_scales(config):
        attempt = attempt_layout(blocks, scale, max_height, measure, config)
        logger.debug(
            "Layout attempt: scale=%.2f, height=%.1f/%.1f, blocks=%d",
            scale, attempt.total_height, max_height, len(blocks)
        )
        if attempt.fits:
            break

    if not attempt.fits:
        logger.warning(
            "Content exceeds page by %.1fpt at minimum scale %.2f; accepting overflow",
            attempt.overflow, attempt.scale
        )
    elif attempt.scale < 1.0:
        logger.debug("Content fitted at scale %.2f", attempt.scale)

    return LayoutPlan(
        measured_blocks=attempt.measured_blocks,
        prose_font_size=config.prose_font_size * attempt.scale,
        code_font_size=config.code_font_size * attempt.scale,
        line_height_factor=config.line_height_factor,
        inter_block_spacing=config.block_spacing * attempt.scale,
        content_width=max_width,
        scale=attempt.scale,
        overflow=attempt.overflow,
    )
