# techlingo/services/translation_service.py
"""
End-to-end document translation.

Flow:
1. Inputs are validated (one PDF, or up to MAX_IMAGES images)
2. Page content is obtained: embedded text for searchable PDFs, rendered and
   binarized images for scanned PDFs and photos (OCR)
3. Pages are sent to the AI translator concurrently
4. Results are reassembled in page order and composed into the output PDF
   (strictly sequential, one output page per input page)
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union

from techlingo.config.settings import AppSettings
from techlingo.models.types import (
    LayoutPlan, ProcessingMode, ProgressCallback, TranslationPhase,
    TranslationProgress, TranslationResult, TranslationStatus,
)
from techlingo.processors.layout_fitter import MeasurementError
from techlingo.processors.pdf_processor import (
    MAX_PDF_PAGES, PageLimitExceededError, PdfProcessor, PdfReadError, ScannedPdfError,
)
from .exceptions import PageTranslationError, TranslationBackendError, TranslationCancelledError

# Module logger
logger = logging.getLogger(__name__)

MAX_IMAGES = 10

# Supported image extensions -> MIME type
IMAGE_MIME_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.webp': 'image/webp',
}
PDF_EXTENSION = '.pdf'

# Preprocessed images and rendered pages are always sent as JPEG
OCR_MIME_TYPE = 'image/jpeg'


class PageTranslator(Protocol):
    """Anything that can translate one page (see GeminiPageTranslator)."""

    def process_page(self, content: Union[str, bytes], is_image: bool,
                     mime_type: str = OCR_MIME_TYPE,
                     page_number: Optional[int] = None) -> str:
        ...


@dataclass(frozen=True)
class PageInput:
    """One page ready for the translator."""
    page_number: int                 # 1-based
    content: Union[str, bytes]       # Extracted text or JPEG bytes
    is_image: bool
    mime_type: str = OCR_MIME_TYPE


def _is_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_MIME_TYPES


def _is_pdf(path: Path) -> bool:
    return path.suffix.lower() == PDF_EXTENSION


class TranslationService:
    """
    Main translation service.
    Coordinates the PDF/image input side, the AI translator and PDF output.
    """

    def __init__(
        self,
        translator: PageTranslator,
        settings: AppSettings,
        pdf_processor: Optional[PdfProcessor] = None,
    ):
        self.translator = translator
        self.config = settings
        self.pdf_processor = pdf_processor or PdfProcessor(settings)
        # Thread-safe cancellation using Event instead of bool flag
        self._cancel_event = threading.Event()
        self._pages_done = 0
        self._pages_lock = threading.Lock()

    def cancel(self) -> None:
        """Request cancellation of current operation (thread-safe)"""
        logger.info("Translation cancellation requested")
        self._cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def is_supported_file(self, file_path: Path) -> bool:
        """Check if file type is supported"""
        return _is_pdf(file_path) or _is_image(file_path)

    def get_supported_extensions(self) -> list[str]:
        """Get list of supported file extensions"""
        return [PDF_EXTENSION, *IMAGE_MIME_TYPES]

    def detect_mode(self, file_path: Path) -> ProcessingMode:
        """
        Decide how page content is obtained.

        Images always need OCR; PDFs use their embedded text when searchable.

        Raises:
            ValueError: Unsupported file type
            PdfReadError: If the PDF cannot be parsed
        """
        if _is_image(file_path):
            return ProcessingMode.OCR
        if _is_pdf(file_path):
            if self.pdf_processor.is_searchable(file_path):
                return ProcessingMode.TEXT_EXTRACTION
            return ProcessingMode.OCR
        raise ValueError(f"Unsupported file type: {file_path.suffix}")

    def validate_inputs(self, input_paths: Sequence[Path]) -> None:
        """
        Check the input combination.

        Raises:
            ValueError: No input, unsupported type, PDF mixed with other
                files, or too many images
            FileNotFoundError: An input does not exist
        """
        if not input_paths:
            raise ValueError("No input files given")

        for path in input_paths:
            if not self.is_supported_file(path):
                raise ValueError(
                    f"Unsupported file type: {path.name} "
                    f"(supported: {', '.join(self.get_supported_extensions())})"
                )
            if not path.is_file():
                raise FileNotFoundError(f"Input file not found: {path}")

        pdf_count = sum(1 for p in input_paths if _is_pdf(p))
        if pdf_count and len(input_paths) > 1:
            raise ValueError("A PDF must be translated on its own (no other files)")
        if len(input_paths) > MAX_IMAGES:
            raise ValueError(f"Too many images: {len(input_paths)} (maximum {MAX_IMAGES})")

    def _prepare_pdf_pages(
        self, pdf_path: Path, allow_ocr: bool
    ) -> tuple[ProcessingMode, list[PageInput]]:
        mode = self.detect_mode(pdf_path)
        if mode is ProcessingMode.TEXT_EXTRACTION:
            texts = self.pdf_processor.extract_page_texts(pdf_path, MAX_PDF_PAGES)
            pages = [
                PageInput(page_number=i + 1, content=text, is_image=False)
                for i, text in enumerate(texts)
            ]
            return mode, pages

        if not allow_ocr:
            raise ScannedPdfError()
        images = self.pdf_processor.render_pages_to_images(
            pdf_path, self.config.render_scale, MAX_PDF_PAGES
        )
        pages = [
            PageInput(page_number=i + 1, content=data, is_image=True)
            for i, data in enumerate(images)
        ]
        return mode, pages

    def _prepare_image_pages(self, image_paths: Sequence[Path]) -> list[PageInput]:
        image_processor = self.pdf_processor.image_processor
        pages = []
        for i, path in enumerate(image_paths):
            data = image_processor.process_image(path.read_bytes())
            pages.append(PageInput(page_number=i + 1, content=data, is_image=True))
            logger.debug("Prepared image %d/%d: %s", i + 1, len(image_paths), path.name)
        return pages

    def _translate_page(self, page: PageInput) -> str:
        # Pages not yet started when cancel() is called are skipped
        if self._cancel_event.is_set():
            raise TranslationCancelledError()
        return self.translator.process_page(
            page.content, page.is_image, mime_type=page.mime_type, page_number=page.page_number
        )

    def _translate_pages(
        self,
        pages: Sequence[PageInput],
        on_progress: Optional[ProgressCallback],
    ) -> list[str]:
        """
        Translate pages concurrently and return results in page order.

        Raises:
            TranslationCancelledError: If cancel() was called
            PageTranslationError: If any page fails
        """
        total = len(pages)
        results: list[Optional[str]] = [None] * total
        workers = max(1, min(self.config.max_workers, total))

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="techlingo-page")
        try:
            futures = {executor.submit(self._translate_page, page): index
                       for index, page in enumerate(pages)}
            for future in as_completed(futures):
                index = futures[future]
                results[index] = future.result()
                with self._pages_lock:
                    self._pages_done += 1
                    done = self._pages_done
                logger.info("Translated page %d (%d/%d)", index + 1, done, total)
                if on_progress:
                    on_progress(TranslationProgress(
                        current=done,
                        total=total,
                        status=f"Translated page {index + 1}",
                        phase=TranslationPhase.TRANSLATING,
                        phase_detail=f"Page {done}/{total}",
                    ))
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        if self._cancel_event.is_set():
            raise TranslationCancelledError()
        return [text or "" for text in results]

    def translate_file(
        self,
        input_paths: Union[Path, Sequence[Path]],
        output_path: Optional[Path] = None,
        *,
        allow_ocr: bool = True,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> TranslationResult:
        """
        Translate one PDF or a set of page images into one output PDF.

        Args:
            input_paths: A PDF path, or image paths (one page each, in order)
            output_path: Output PDF path (default: <stem>_translated.pdf)
            allow_ocr: Allow OCR when a PDF has no embedded text
            progress_callback: Callback for progress updates

        Returns:
            TranslationResult (FAILED / CANCELLED results carry the reason;
            nothing raises for expected errors)
        """
        start_time = time.time()
        self._cancel_event.clear()  # Reset cancellation at start
        with self._pages_lock:
            self._pages_done = 0

        if isinstance(input_paths, (str, Path)):
            input_paths = [input_paths]
        paths = [Path(p) for p in input_paths]
        pages_total = 0
        mode: Optional[ProcessingMode] = None

        try:
            self.validate_inputs(paths)
            if output_path is None:
                output_path = self.config.get_output_path(paths[0])
            output_path = Path(output_path)

            if progress_callback:
                progress_callback(TranslationProgress(
                    current=0,
                    total=len(paths),
                    status="Reading input...",
                    phase=TranslationPhase.EXTRACTING,
                ))

            if _is_pdf(paths[0]):
                mode, pages = self._prepare_pdf_pages(paths[0], allow_ocr)
            else:
                mode, pages = ProcessingMode.OCR, self._prepare_image_pages(paths)
            pages_total = len(pages)
            logger.info("Processing %d pages (%s)", pages_total, mode.value)

            texts = self._translate_pages(pages, progress_callback)

            if progress_callback:
                progress_callback(TranslationProgress(
                    current=pages_total,
                    total=pages_total,
                    status="Generating PDF...",
                    phase=TranslationPhase.GENERATING,
                ))

            overflow_pages: list[int] = []

            def record_page(page_number: int, plan: LayoutPlan) -> None:
                if plan.overflow > 0:
                    overflow_pages.append(page_number)

            self.pdf_processor.generate_pdf(texts, output_path, on_page=record_page)

            warnings = [
                f"Page {n}: content exceeds the page at minimum scale" for n in overflow_pages
            ]
            if progress_callback:
                progress_callback(TranslationProgress(
                    current=pages_total,
                    total=pages_total,
                    status="Complete",
                    phase=TranslationPhase.COMPLETE,
                ))

            return TranslationResult(
                status=TranslationStatus.COMPLETED,
                output_path=output_path,
                mode=mode,
                pages_translated=pages_total,
                pages_total=pages_total,
                overflow_pages=overflow_pages,
                duration_seconds=time.time() - start_time,
                warnings=warnings,
            )

        except TranslationCancelledError:
            logger.info("Translation cancelled after %d/%d pages", self._pages_done, pages_total)
            return TranslationResult(
                status=TranslationStatus.CANCELLED,
                mode=mode,
                pages_translated=self._pages_done,
                pages_total=pages_total,
                duration_seconds=time.time() - start_time,
            )
        except (
            ScannedPdfError,
            PageLimitExceededError,
            PdfReadError,
            PageTranslationError,
            TranslationBackendError,
            MeasurementError,
            OSError,
            ValueError,
        ) as e:
            # Catch specific exceptions for graceful error handling
            logger.exception("Translation failed: %s", e)
            return TranslationResult(
                status=TranslationStatus.FAILED,
                mode=mode,
                pages_translated=self._pages_done,
                pages_total=pages_total,
                error_message=str(e),
                duration_seconds=time.time() - start_time,
            )
