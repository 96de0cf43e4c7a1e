# techlingo/processors/document_writer.py
"""
Abstract drawing sink for composed pages.

The layout fitter and page compositor only talk to this interface, so the
same layout code can drive the PDF writer or a recording fake in tests.
Coordinates are in points with a top-left origin; text `y` is the baseline.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from techlingo.models.types import MeasureFn

PROSE_FONT_FAMILY = "times"
CODE_FONT_FAMILY = "courier"

# Baseline sits this fraction of the font size below the line top
BASELINE_OFFSET = 0.8


class DocumentWriter(ABC):
    """
    Drawing primitives for a paged document.

    Font, colour and size are stateful and apply to subsequent calls,
    mirroring how PDF content streams work.
    """

    @property
    @abstractmethod
    def page_width(self) -> float:
        """Page width in points"""
        pass

    @property
    @abstractmethod
    def page_height(self) -> float:
        """Page height in points"""
        pass

    @abstractmethod
    def add_page(self) -> None:
        """Start a new page; later drawing goes to it."""
        pass

    @abstractmethod
    def set_font(self, family: str, style: str = "normal") -> None:
        pass

    @abstractmethod
    def set_font_size(self, size: float) -> None:
        pass

    @abstractmethod
    def set_text_color(self, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def set_fill_color(self, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def set_draw_color(self, r: int, g: int, b: int) -> None:
        pass

    @abstractmethod
    def draw_text(self, text: str, x: float, y: float, align: str = "left") -> None:
        """
        Draw one line of text with its baseline at y.

        With align="center", x is the horizontal centre of the text.
        """
        pass

    @abstractmethod
    def draw_rect(self, x: float, y: float, w: float, h: float, mode: str = "S") -> None:
        """
        Draw a rectangle.

        Args:
            mode: "F" fill only, "S" stroke only, "FD" fill and stroke
        """
        pass

    @abstractmethod
    def get_text_width(self, text: str) -> float:
        """Width of text in points with the current font and size."""
        pass

    @abstractmethod
    def split_text_to_size(self, text: str, max_width: float) -> list[str]:
        """Wrap text to max_width with the current font and size."""
        pass

    @abstractmethod
    def output_bytes(self) -> bytes:
        """Serialize the finished document."""
        pass

    def draw_text_lines(
        self,
        lines: Iterable[str],
        x: float,
        y: float,
        line_height_factor: float,
        font_size: float,
    ) -> None:
        """
        Draw lines as one left-aligned run.

        y is the top of the first line; baselines are spaced
        font_size * line_height_factor apart.
        """
        pitch = font_size * line_height_factor
        baseline = y + font_size * BASELINE_OFFSET
        for i, line in enumerate(lines):
            if line:
                self.draw_text(line, x, baseline + i * pitch)


def make_measure_fn(writer: DocumentWriter, max_width: float) -> MeasureFn:
    """
    Adapt a writer to the measurement oracle used by the layout fitter.

    The returned function selects the code or prose font at the requested
    size and wraps to max_width with the writer's own metrics, so layout
    and drawing can never disagree about line breaks.
    """
    def measure(text: str, is_code: bool, font_size: float) -> list[str]:
        writer.set_font(CODE_FONT_FAMILY if is_code else PROSE_FONT_FAMILY, "normal")
        writer.set_font_size(font_size)
        return writer.split_text_to_size(text, max_width)

    return measure
