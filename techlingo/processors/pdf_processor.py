# techlingo/processors/pdf_processor.py
"""
PDF input and output for TechLingo.

Input side:
- Page count and file info (PyMuPDF)
- Searchable vs. scanned detection and page text extraction (pdfminer.six)
- Page rendering for OCR (pypdfium2 + ImageProcessor)

Output side:
- generate_pdf(): composes translated page texts with PdfDocumentWriter
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional, TYPE_CHECKING

from techlingo.models.types import FileInfo, FileType, LayoutPlan
from .image_processor import ImageProcessor
from .page_compositor import compose_document
from .pdf_font_manager import _get_pymupdf
from .pdf_writer import PdfDocumentWriter

if TYPE_CHECKING:
    from techlingo.config.settings import AppSettings

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Lazy Imports
# =============================================================================
_pypdfium2 = None
_pdfminer = None


def _get_pypdfium2():
    """Lazy import pypdfium2 (for PDF to image conversion)."""
    global _pypdfium2
    if _pypdfium2 is None:
        import pypdfium2 as pdfium
        _pypdfium2 = pdfium
    return _pypdfium2


def _get_pdfminer():
    """
    Lazy import pdfminer.six for text extraction.

    Returns:
        dict of the pdfminer names used by this module
    """
    global _pdfminer
    if _pdfminer is None:
        from pdfminer.high_level import extract_pages
        from pdfminer.layout import LTTextContainer
        from pdfminer.psparser import PSException
        _pdfminer = {
            'extract_pages': extract_pages,
            'LTTextContainer': LTTextContainer,
            'PSException': PSException,
        }
    return _pdfminer


# =============================================================================
# Input Limits
# =============================================================================
MAX_PDF_PAGES = 10
SCAN_CHECK_PAGES = 3
MIN_SEARCHABLE_CHARS = 50    # A page has text when its trimmed text is longer than this
DEFAULT_RENDER_SCALE = 3.0   # 216 DPI


class ScannedPdfError(Exception):
    """Exception raised when a scanned PDF (no embedded text) cannot be OCR'd."""

    def __init__(self, message: str = "Scanned PDF has no embedded text and OCR is disabled"):
        self.message = message
        super().__init__(self.message)


class PageLimitExceededError(Exception):
    """Exception raised when a PDF has more pages than can be translated."""

    def __init__(self, page_count: int, max_pages: int = MAX_PDF_PAGES):
        self.page_count = page_count
        self.max_pages = max_pages
        self.message = f"PDF has {page_count} pages; the maximum is {max_pages}"
        super().__init__(self.message)


class PdfReadError(Exception):
    """Exception raised when a PDF cannot be opened or parsed."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        self.message = f"Cannot read PDF: {path.name}" + (f" ({cause})" if cause else "")
        super().__init__(self.message)


@contextmanager
def _open_pdf_document(pdf_path: Path):
    """
    Context manager for safely opening and closing PDF documents (pypdfium2).

    Raises:
        PdfReadError: If pypdfium2 cannot open the file
    """
    pdfium = _get_pypdfium2()
    try:
        pdf = pdfium.PdfDocument(str(pdf_path))
    except (pdfium.PdfiumError, OSError) as e:
        raise PdfReadError(Path(pdf_path), e) from e
    try:
        yield pdf
    finally:
        pdf.close()


@contextmanager
def _open_pymupdf_document(file_path: Path):
    """
    Context manager for safely opening and closing PyMuPDF documents.

    Raises:
        PdfReadError: If PyMuPDF cannot open the file
    """
    pymupdf = _get_pymupdf()
    try:
        doc = pymupdf.open(str(file_path))
    except (RuntimeError, OSError, ValueError) as e:
        # pymupdf.FileDataError derives from RuntimeError
        raise PdfReadError(Path(file_path), e) from e
    try:
        yield doc
    finally:
        doc.close()


def _check_page_limit(page_count: int, max_pages: int) -> None:
    if page_count > max_pages:
        logger.warning("PDF rejected: %d pages (max %d)", page_count, max_pages)
        raise PageLimitExceededError(page_count, max_pages)


class PdfProcessor:
    """
    Reads input PDFs and writes the translated output PDF.

    Limitations:
    - At most MAX_PDF_PAGES pages per document
    - Output uses base-14 fonts (Latin text)
    """

    def __init__(
        self,
        settings: Optional["AppSettings"] = None,
        image_processor: Optional[ImageProcessor] = None,
    ):
        self.settings = settings
        self.image_processor = image_processor or ImageProcessor()

    def get_page_count(self, file_path: Path) -> int:
        """Get total page count of PDF."""
        with _open_pymupdf_document(file_path) as doc:
            return len(doc)

    def get_file_info(self, file_path: Path) -> FileInfo:
        """Get PDF file info (fast: page count only, no text scanning)."""
        return FileInfo(
            path=file_path,
            file_type=FileType.PDF,
            size_bytes=file_path.stat().st_size,
            page_count=self.get_page_count(file_path),
        )

    def _iter_page_texts(self, file_path: Path, max_pages: int):
        """Yield (page_index, text) for up to max_pages pages via pdfminer."""
        pdfminer = _get_pdfminer()
        extract_pages = pdfminer['extract_pages']
        LTTextContainer = pdfminer['LTTextContainer']
        try:
            for page_idx, layout in enumerate(extract_pages(str(file_path), maxpages=max_pages)):
                text = ''.join(
                    element.get_text() for element in layout
                    if isinstance(element, LTTextContainer)
                )
                yield page_idx, text
        except (pdfminer['PSException'], OSError) as e:
            raise PdfReadError(file_path, e) from e

    def is_searchable(self, file_path: Path) -> bool:
        """
        Check whether the PDF carries embedded text.

        Only the first SCAN_CHECK_PAGES pages are examined; one page with
        more than MIN_SEARCHABLE_CHARS characters of text is enough, which
        handles image-only cover pages.

        Raises:
            PdfReadError: If the PDF cannot be parsed
        """
        for page_idx, text in self._iter_page_texts(file_path, SCAN_CHECK_PAGES):
            char_count = len(text.strip())
            if char_count > MIN_SEARCHABLE_CHARS:
                logger.debug(
                    "Scan check: page %d has %d characters - PDF has embedded text",
                    page_idx + 1, char_count
                )
                return True
            logger.debug("Scan check: page %d has no usable text (%d chars)", page_idx + 1, char_count)

        logger.info("Scanned PDF detected: first pages have no embedded text")
        return False

    def extract_page_texts(self, file_path: Path, max_pages: int = MAX_PDF_PAGES) -> list[str]:
        """
        Extract the embedded text of every page.

        Returns:
            One string per page, in page order (possibly empty)

        Raises:
            PageLimitExceededError: More than max_pages pages
            PdfReadError: If the PDF cannot be parsed
        """
        page_count = self.get_page_count(file_path)
        _check_page_limit(page_count, max_pages)

        texts = [text for _, text in self._iter_page_texts(file_path, page_count)]
        # One entry per page even if pdfminer yielded fewer layouts
        if len(texts) < page_count:
            texts.extend([''] * (page_count - len(texts)))

        logger.info(
            "Extracted text from %d pages (%d chars)",
            page_count, sum(len(t) for t in texts)
        )
        return texts

    def render_pages_to_images(
        self,
        file_path: Path,
        scale: Optional[float] = None,
        max_pages: int = MAX_PDF_PAGES,
    ) -> list[bytes]:
        """
        Render every page to a preprocessed JPEG for OCR.

        Args:
            file_path: Path to PDF file
            scale: Render scale (1.0 = 72 DPI); defaults to the settings value
            max_pages: Page limit

        Returns:
            JPEG bytes per page, in page order

        Raises:
            PageLimitExceededError: More than max_pages pages
            PdfReadError: If the PDF cannot be opened
        """
        if scale is None:
            scale = self.settings.render_scale if self.settings else DEFAULT_RENDER_SCALE

        images = []
        with _open_pdf_document(file_path) as pdf:
            page_count = len(pdf)
            _check_page_limit(page_count, max_pages)

            for page_idx in range(page_count):
                page = pdf[page_idx]
                try:
                    bitmap = page.render(scale=scale)
                    rgb = bitmap.to_pil().convert('RGB')
                finally:
                    page.close()
                binary = self.image_processor.process_array(rgb)
                images.append(self.image_processor.encode_jpeg(binary))
                logger.debug("Rendered page %d/%d for OCR", page_idx + 1, page_count)

        logger.info("Rendered %d pages at scale %.1f", len(images), scale)
        return images

    def generate_pdf(
        self,
        pages_text: list[str],
        output_path: Optional[Path] = None,
        on_page: Optional[Callable[[int, LayoutPlan], None]] = None,
    ) -> bytes:
        """
        Compose translated page texts into the output PDF.

        Args:
            pages_text: Translated text, one entry per output page
            output_path: Optional path to write the PDF to
            on_page: Called with (page_number, plan) after each page

        Returns:
            PDF bytes
        """
        with PdfDocumentWriter() as writer:
            data = compose_document(writer, pages_text, self.settings, on_page=on_page)

        if output_path is not None:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
            logger.info("Saved PDF: %s (%d pages)", output_path, len(pages_text))

        return data
