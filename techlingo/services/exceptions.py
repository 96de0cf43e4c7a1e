# techlingo/services/exceptions.py
"""
Shared exception types for the translation backend and service.

Kept free of SDK imports so callers can catch these without loading the
AI client.
"""

from typing import Optional


class TranslationCancelledError(Exception):
    """Raised when translation is cancelled by user."""

    pass


class TranslationBackendError(Exception):
    """Raised when the AI backend cannot be used at all (e.g. missing API key)."""

    def __init__(self, message: str = "Translation backend is not available"):
        self.message = message
        super().__init__(self.message)


class PageTranslationError(Exception):
    """Raised when one page fails to translate."""

    def __init__(self, message: str = "Failed to process page with AI",
                 page_number: Optional[int] = None):
        self.message = message
        self.page_number = page_number
        if page_number is not None:
            message = f"Page {page_number}: {message}"
        super().__init__(message)
