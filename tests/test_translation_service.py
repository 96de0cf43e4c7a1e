# tests/test_translation_service.py
"""Tests for techlingo.services.translation_service"""

import io
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pymupdf
import pytest
from PIL import Image

from techlingo.config.settings import AppSettings
from techlingo.models.types import ProcessingMode, TranslationPhase, TranslationStatus
from techlingo.processors.image_processor import ImageProcessor
from techlingo.processors.pdf_processor import PdfProcessor
from techlingo.services.exceptions import PageTranslationError
from techlingo.services.translation_service import MAX_IMAGES, TranslationService

LONG_TEXT = "Arrays in C are laid out contiguously in memory, element after element."


def make_pdf(path: Path, page_texts: list[str]) -> Path:
    doc = pymupdf.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontname="helv", fontsize=11)
    doc.save(str(path))
    doc.close()
    return path


def make_png(path: Path) -> Path:
    buffer = io.BytesIO()
    Image.new("RGB", (60, 30), (230, 230, 230)).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


def pdf_page_texts(path: Path) -> list[str]:
    with pymupdf.open(str(path)) as doc:
        return [page.get_text() for page in doc]


class FakeTranslator:
    """Records calls and returns a predictable translation per page."""

    def __init__(self, delays=None, text_for=None):
        self.calls = []
        self._lock = threading.Lock()
        self._delays = delays or {}
        self._text_for = text_for or (lambda page_number: f"Translated page {page_number}")

    def process_page(self, content, is_image, mime_type="image/jpeg", page_number=None):
        with self._lock:
            self.calls.append({
                "content": content, "is_image": is_image,
                "mime_type": mime_type, "page_number": page_number,
            })
        time.sleep(self._delays.get(page_number, 0))
        return self._text_for(page_number)


@pytest.fixture
def settings():
    return AppSettings(render_scale=1.0, max_workers=4)


@pytest.fixture
def pdf_processor(settings):
    return PdfProcessor(settings, image_processor=ImageProcessor(target_width=100))


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def service(translator, settings, pdf_processor):
    return TranslationService(translator, settings, pdf_processor)


class TestInputValidation:
    """Tests for input checks and mode detection"""

    def test_supported_extensions(self, service):
        assert service.get_supported_extensions() == ['.pdf', '.jpg', '.jpeg', '.png', '.webp']
        assert service.is_supported_file(Path("scan.PNG"))
        assert not service.is_supported_file(Path("notes.txt"))

    def test_detect_mode(self, service, tmp_path):
        searchable = make_pdf(tmp_path / "a.pdf", [LONG_TEXT])
        scanned = make_pdf(tmp_path / "b.pdf", [""])
        assert service.detect_mode(searchable) is ProcessingMode.TEXT_EXTRACTION
        assert service.detect_mode(scanned) is ProcessingMode.OCR
        assert service.detect_mode(Path("photo.jpg")) is ProcessingMode.OCR

    def test_detect_mode_unsupported(self, service):
        with pytest.raises(ValueError):
            service.detect_mode(Path("doc.docx"))

    def test_no_inputs(self, service):
        with pytest.raises(ValueError, match="No input"):
            service.validate_inputs([])

    def test_pdf_mixed_with_images(self, service, tmp_path):
        pdf = make_pdf(tmp_path / "a.pdf", [LONG_TEXT])
        png = make_png(tmp_path / "b.png")
        with pytest.raises(ValueError, match="on its own"):
            service.validate_inputs([pdf, png])

    def test_too_many_images(self, service, tmp_path):
        images = [make_png(tmp_path / f"{i}.png") for i in range(MAX_IMAGES + 1)]
        with pytest.raises(ValueError, match="Too many images"):
            service.validate_inputs(images)

    def test_max_images_allowed(self, service, tmp_path):
        images = [make_png(tmp_path / f"{i}.png") for i in range(MAX_IMAGES)]
        service.validate_inputs(images)

    def test_missing_file(self, service, tmp_path):
        with pytest.raises(FileNotFoundError):
            service.validate_inputs([tmp_path / "missing.pdf"])


class TestTranslateFile:
    """Tests for TranslationService.translate_file()"""

    def test_searchable_pdf(self, service, translator, tmp_path):
        pdf = make_pdf(tmp_path / "chapter.pdf", [LONG_TEXT, LONG_TEXT, LONG_TEXT])

        result = service.translate_file(pdf)

        assert result.status is TranslationStatus.COMPLETED
        assert result.mode is ProcessingMode.TEXT_EXTRACTION
        assert result.pages_translated == 3
        assert result.output_path == tmp_path / "chapter_translated.pdf"
        assert all(not call["is_image"] for call in translator.calls)
        assert "Arrays in C" in translator.calls[0]["content"]

        texts = pdf_page_texts(result.output_path)
        assert len(texts) == 3
        for number, text in enumerate(texts, start=1):
            assert f"Translated page {number}" in text

    def test_pages_reassembled_in_order(self, settings, pdf_processor, tmp_path):
        # Page 1 finishes last
        translator = FakeTranslator(delays={1: 0.2})
        service = TranslationService(translator, settings, pdf_processor)
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT] * 4)

        result = service.translate_file(pdf, tmp_path / "out.pdf")

        assert result.succeeded
        texts = pdf_page_texts(tmp_path / "out.pdf")
        for number, text in enumerate(texts, start=1):
            assert f"Translated page {number}" in text

    def test_images(self, service, translator, tmp_path):
        images = [make_png(tmp_path / "p1.png"), make_png(tmp_path / "p2.jpg")]

        result = service.translate_file(images, tmp_path / "out.pdf")

        assert result.status is TranslationStatus.COMPLETED
        assert result.mode is ProcessingMode.OCR
        assert sorted(c["page_number"] for c in translator.calls) == [1, 2]
        for call in translator.calls:
            assert call["is_image"]
            assert call["mime_type"] == "image/jpeg"
            assert call["content"][:2] == b"\xff\xd8"
        assert len(pdf_page_texts(tmp_path / "out.pdf")) == 2

    def test_scanned_pdf_uses_ocr(self, service, translator, tmp_path):
        pdf = make_pdf(tmp_path / "scan.pdf", ["", ""])

        result = service.translate_file(pdf)

        assert result.status is TranslationStatus.COMPLETED
        assert result.mode is ProcessingMode.OCR
        assert all(call["is_image"] for call in translator.calls)

    def test_scanned_pdf_without_ocr_fails(self, service, translator, tmp_path):
        pdf = make_pdf(tmp_path / "scan.pdf", [""])

        result = service.translate_file(pdf, allow_ocr=False)

        assert result.status is TranslationStatus.FAILED
        assert "OCR" in result.error_message
        assert translator.calls == []
        assert not (tmp_path / "scan_translated.pdf").exists()

    def test_invalid_input_fails_gracefully(self, service, tmp_path):
        result = service.translate_file([tmp_path / "notes.txt"])
        assert result.status is TranslationStatus.FAILED
        assert "Unsupported" in result.error_message

    def test_page_limit_fails(self, service, tmp_path):
        pdf = make_pdf(tmp_path / "long.pdf", [LONG_TEXT] * 11)
        result = service.translate_file(pdf)
        assert result.status is TranslationStatus.FAILED
        assert "11 pages" in result.error_message

    def test_page_error_fails_whole_job(self, settings, pdf_processor, tmp_path):
        translator = MagicMock()
        translator.process_page.side_effect = PageTranslationError("quota", page_number=1)
        service = TranslationService(translator, settings, pdf_processor)
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT])

        result = service.translate_file(pdf)

        assert result.status is TranslationStatus.FAILED
        assert result.error_message == "Page 1: quota"
        assert not (tmp_path / "doc_translated.pdf").exists()

    def test_cancel(self, pdf_processor, tmp_path):
        settings = AppSettings(max_workers=1)
        holder = {}

        def cancel_after_first(page_number):
            holder["service"].cancel()
            return "first"

        translator = FakeTranslator(text_for=cancel_after_first)
        service = TranslationService(translator, settings, pdf_processor)
        holder["service"] = service
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT] * 3)

        result = service.translate_file(pdf)

        assert result.status is TranslationStatus.CANCELLED
        assert len(translator.calls) == 1
        assert result.pages_translated <= 1
        assert result.pages_total == 3
        assert not (tmp_path / "doc_translated.pdf").exists()

    def test_cancel_state_reset_between_jobs(self, service, tmp_path):
        service.cancel()
        assert service.is_cancelled
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT])
        assert service.translate_file(pdf).succeeded

    def test_overflow_reported(self, settings, pdf_processor, tmp_path):
        long_page = "\n\n".join(["A long translated paragraph. " * 15] * 40)
        translator = FakeTranslator(text_for=lambda n: long_page if n == 2 else "short")
        service = TranslationService(translator, settings, pdf_processor)
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT, LONG_TEXT])

        result = service.translate_file(pdf)

        assert result.succeeded
        assert result.overflow_pages == [2]
        assert len(result.warnings) == 1
        assert "Page 2" in result.warnings[0]
        assert "minimum scale: 2" in result.get_summary()

    def test_progress_phases(self, service, tmp_path):
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT, LONG_TEXT])
        updates = []

        service.translate_file(pdf, progress_callback=updates.append)

        phases = [u.phase for u in updates]
        assert phases[0] is TranslationPhase.EXTRACTING
        assert phases.count(TranslationPhase.TRANSLATING) == 2
        assert phases[-2] is TranslationPhase.GENERATING
        assert phases[-1] is TranslationPhase.COMPLETE
        translating = [u for u in updates if u.phase is TranslationPhase.TRANSLATING]
        assert [u.current for u in translating] == [1, 2]

    def test_output_directory_setting(self, translator, pdf_processor, tmp_path):
        settings = AppSettings(output_directory=str(tmp_path / "exports"))
        service = TranslationService(translator, settings, pdf_processor)
        pdf = make_pdf(tmp_path / "doc.pdf", [LONG_TEXT])

        result = service.translate_file(pdf)

        assert result.output_path == tmp_path / "exports" / "doc_translated.pdf"
        assert result.output_path.exists()
