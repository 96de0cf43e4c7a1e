# techlingo/processors/pdf_writer.py
"""
PyMuPDF implementation of DocumentWriter.

Draws on A4 portrait pages with base-14 fonts. PyMuPDF already uses a
top-left origin and baseline text placement, so coordinates pass through
unchanged.
"""

import logging
from typing import Optional

from .document_writer import DocumentWriter
from .pdf_font_manager import (
    FontRegistry, split_text_into_lines_with_font, _get_pymupdf,
)

# Module logger
logger = logging.getLogger(__name__)

# A4 portrait in points
A4_WIDTH = 595.28
A4_HEIGHT = 841.89

DEFAULT_BORDER_WIDTH = 0.5

_RECT_MODES = {"F", "S", "FD", "DF"}


def _to_unit_rgb(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert 0-255 RGB to the 0.0-1.0 floats PyMuPDF expects."""
    return (r / 255.0, g / 255.0, b / 255.0)


class PdfDocumentWriter(DocumentWriter):
    """
    DocumentWriter backed by an in-memory PyMuPDF document.

    The first page is created lazily by the first drawing call, so a writer
    used only for measurement never produces a page.

    Usage:
        with PdfDocumentWriter() as writer:
            writer.set_font("times")
            writer.draw_text("Hello", 71, 100)
            data = writer.output_bytes()
    """

    def __init__(
        self,
        page_width: float = A4_WIDTH,
        page_height: float = A4_HEIGHT,
        font_registry: Optional[FontRegistry] = None,
    ):
        self._page_width = page_width
        self._page_height = page_height
        self._fonts = font_registry or FontRegistry()
        self._doc = _get_pymupdf().open()
        self._page = None

        self._font_code = self._fonts.get_font_code("times", "normal")
        self._font_size = 11.0
        self._text_color = (0.0, 0.0, 0.0)
        self._fill_color = (1.0, 1.0, 1.0)
        self._draw_color = (0.0, 0.0, 0.0)

    def __enter__(self) -> "PdfDocumentWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def page_width(self) -> float:
        return self._page_width

    @property
    def page_height(self) -> float:
        return self._page_height

    @property
    def page_count(self) -> int:
        return len(self._doc)

    @property
    def font_size(self) -> float:
        return self._font_size

    def add_page(self) -> None:
        self._page = self._doc.new_page(width=self._page_width, height=self._page_height)
        logger.debug("Added page %d", len(self._doc))

    def _current_page(self):
        if self._page is None:
            self.add_page()
        return self._page

    def set_font(self, family: str, style: str = "normal") -> None:
        self._font_code = self._fonts.get_font_code(family, style)

    def set_font_size(self, size: float) -> None:
        if size <= 0:
            raise ValueError(f"Font size must be positive, got {size}")
        self._font_size = size

    def set_text_color(self, r: int, g: int, b: int) -> None:
        self._text_color = _to_unit_rgb(r, g, b)

    def set_fill_color(self, r: int, g: int, b: int) -> None:
        self._fill_color = _to_unit_rgb(r, g, b)

    def set_draw_color(self, r: int, g: int, b: int) -> None:
        self._draw_color = _to_unit_rgb(r, g, b)

    def draw_text(self, text: str, x: float, y: float, align: str = "left") -> None:
        if not text:
            return
        if align == "center":
            x -= self.get_text_width(text) / 2
        elif align == "right":
            x -= self.get_text_width(text)
        elif align != "left":
            raise ValueError(f"Unsupported text alignment: {align!r}")

        pymupdf = _get_pymupdf()
        self._current_page().insert_text(
            pymupdf.Point(x, y),
            text,
            fontname=self._font_code,
            fontsize=self._font_size,
            color=self._text_color,
        )

    def draw_rect(self, x: float, y: float, w: float, h: float, mode: str = "S") -> None:
        mode = mode.upper()
        if mode not in _RECT_MODES:
            raise ValueError(f"Unsupported rectangle mode: {mode!r}")

        pymupdf = _get_pymupdf()
        self._current_page().draw_rect(
            pymupdf.Rect(x, y, x + w, y + h),
            color=self._draw_color if "S" in mode or "D" in mode else None,
            fill=self._fill_color if "F" in mode else None,
            width=DEFAULT_BORDER_WIDTH,
        )

    def get_text_width(self, text: str) -> float:
        return self._fonts.get_text_width(text, self._font_code, self._font_size)

    def split_text_to_size(self, text: str, max_width: float) -> list[str]:
        return split_text_into_lines_with_font(
            text, max_width, self._font_size, self._font_code, self._fonts
        )

    def output_bytes(self) -> bytes:
        """
        Serialize the document (garbage collection + deflate).

        A document with no pages gets one blank page, since PDF files
        cannot be empty.
        """
        if len(self._doc) == 0:
            self.add_page()
        data = self._doc.tobytes(garbage=3, deflate=True)
        logger.debug("Serialized PDF: %d pages, %d bytes", len(self._doc), len(data))
        return data

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
            self._page = None
