# techlingo/services/gemini_client.py
"""
Google Gemini page translator.

One request per page: extracted PDF text or a page image goes in, and
translated Markdown (prose plus fenced code) comes out. Uses the Google
Gen AI SDK (google-genai).
"""

import base64
import logging
import os
import time
from typing import Any, Optional, Union

from .exceptions import PageTranslationError, TranslationBackendError
from .prompt_builder import PromptBuilder

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Lazy Imports
# =============================================================================
_genai = None


def _get_genai():
    """
    Lazy import the Google Gen AI SDK.

    Returns:
        (genai, types, errors) modules
    """
    global _genai
    if _genai is None:
        from google import genai
        from google.genai import errors, types
        _genai = (genai, types, errors)
    return _genai


DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_REQUEST_TIMEOUT = 120   # seconds
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

# Rate limiting and transient server errors are retried
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY = 5.0       # seconds, doubled per attempt


def decode_data_url(data_url: str) -> tuple[str, bytes]:
    """
    Split a base64 data URL ("data:image/png;base64,...") into (mime, bytes).

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    header, sep, payload = data_url.partition(',')
    if not sep or not header.startswith('data:') or not header.endswith(';base64'):
        raise ValueError("Expected a base64 data URL")
    mime_type = header[len('data:'):-len(';base64')] or "application/octet-stream"
    return mime_type, base64.b64decode(payload)


def resolve_api_key(api_key: Optional[str] = None) -> Optional[str]:
    """Return the explicit key, else the first key found in the environment."""
    if api_key:
        return api_key
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


class GeminiPageTranslator:
    """
    Translates single pages with a Gemini model.

    Thread-safe for concurrent process_page() calls: the SDK client holds
    no per-request state.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: Optional[Any] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        request_timeout: int = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        """
        Args:
            api_key: Gemini API key (default: GEMINI_API_KEY / GOOGLE_API_KEY)
            model: Model name
            temperature: Sampling temperature (low for faithful output)
            client: Pre-built genai.Client (mainly for tests)
            prompt_builder: PromptBuilder (default: Brazilian Portuguese)
            request_timeout: Per-request timeout in seconds
            max_retries: Retries for rate-limit and transient server errors
            retry_delay: Initial retry delay in seconds

        Raises:
            TranslationBackendError: If no client is given and no API key is found
        """
        self.model = model
        self.temperature = temperature
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        if client is None:
            key = resolve_api_key(api_key)
            if not key:
                raise TranslationBackendError(
                    "Gemini API key not found. Pass --api-key or set "
                    + " / ".join(API_KEY_ENV_VARS)
                )
            genai, _, _ = _get_genai()
            client = genai.Client(api_key=key)
        self._client = client

    def _build_config(self):
        _, types, _ = _get_genai()
        return types.GenerateContentConfig(
            system_instruction=self.prompt_builder.system_prompt(),
            temperature=self.temperature,
            http_options=types.HttpOptions(timeout=self.request_timeout * 1000),
        )

    def _build_contents(self, content: Union[str, bytes], is_image: bool, mime_type: str) -> list:
        _, types, _ = _get_genai()
        if is_image:
            if isinstance(content, str):
                mime_type, content = decode_data_url(content)
            return [
                types.Part.from_bytes(data=content, mime_type=mime_type),
                self.prompt_builder.build_image_prompt(),
            ]
        if isinstance(content, bytes):
            content = content.decode('utf-8', errors='replace')
        return [self.prompt_builder.build_text_prompt(content)]

    def _is_retryable(self, error: Exception) -> bool:
        _, _, errors = _get_genai()
        return isinstance(error, errors.APIError) and error.code in RETRYABLE_STATUS_CODES

    def process_page(
        self,
        content: Union[str, bytes],
        is_image: bool,
        mime_type: str = "image/jpeg",
        page_number: Optional[int] = None,
    ) -> str:
        """
        Clean, translate and format one page.

        Args:
            content: Extracted page text, or encoded image bytes
            is_image: True when content is an image
            mime_type: Image MIME type (ignored for text)
            page_number: 1-based page number for logs and errors

        Returns:
            Markdown page text ("" if the model returned nothing)

        Raises:
            PageTranslationError: If the request fails after retries
        """
        config = self._build_config()
        contents = self._build_contents(content, is_image, mime_type)

        attempt = 0
        while True:
            try:
                response = self._client.models.generate_content(
                    model=self.model,
                    contents=contents,
                    config=config,
                )
                break
            except Exception as e:
                # The SDK raises APIError subclasses plus transport errors from httpx
                if attempt < self.max_retries and self._is_retryable(e):
                    delay = self.retry_delay * (2 ** attempt)
                    attempt += 1
                    logger.warning(
                        "Gemini request for page %s failed (%s); retry %d/%d in %.1fs",
                        page_number, e, attempt, self.max_retries, delay
                    )
                    time.sleep(delay)
                    continue
                logger.error("Gemini processing error on page %s: %s", page_number, e)
                raise PageTranslationError(
                    f"Failed to process page with AI: {e}", page_number=page_number
                ) from e

        text = getattr(response, 'text', None) or ""
        logger.debug(
            "Page %s processed (%s input): %d chars returned",
            page_number, "image" if is_image else "text", len(text)
        )
        return text
