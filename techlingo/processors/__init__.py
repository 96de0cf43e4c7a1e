# techlingo/processors/__init__.py
"""
Document processors for TechLingo.

The text pipeline (cleaning, segmentation, tokenizing, layout) is pure
Python and imported eagerly. PDF and image processors pull in PyMuPDF,
pdfminer.six, pypdfium2, numpy and Pillow, so they are lazy-loaded.
Use explicit imports like:
    from techlingo.processors.pdf_processor import PdfProcessor
"""

# Fast imports - pure text pipeline
from .text_cleaner import clean
from .content_segmenter import segment
from .code_tokenizer import tokenize_line
from .layout_fitter import MeasurementError, fit
from .document_writer import DocumentWriter, make_measure_fn
from .page_compositor import compose_document, compose_page

# Lazy-loaded processors via __getattr__
_LAZY_IMPORTS = {
    'PdfProcessor': 'pdf_processor',
    'ScannedPdfError': 'pdf_processor',
    'PageLimitExceededError': 'pdf_processor',
    'PdfReadError': 'pdf_processor',
    'PdfDocumentWriter': 'pdf_writer',
    'FontRegistry': 'pdf_font_manager',
    'ImageProcessor': 'image_processor',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'text_cleaner', 'content_segmenter', 'code_tokenizer', 'layout_fitter',
               'page_compositor', 'document_writer', 'pdf_processor', 'pdf_writer',
               'pdf_font_manager', 'image_processor'}


def __getattr__(name: str):
    """Lazy-load heavy processor modules on first access."""
    import importlib
    # Support accessing submodules directly (for unittest.mock.patch)
    if name in _SUBMODULES:
        return importlib.import_module(f'.{name}', __package__)
    if name in _LAZY_IMPORTS:
        module_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(f'.{module_name}', __package__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'clean',
    'segment',
    'tokenize_line',
    'fit',
    'MeasurementError',
    'DocumentWriter',
    'make_measure_fn',
    'compose_document',
    'compose_page',
    'PdfProcessor',
    'ScannedPdfError',
    'PageLimitExceededError',
    'PdfReadError',
    'PdfDocumentWriter',
    'FontRegistry',
    'ImageProcessor',
]
