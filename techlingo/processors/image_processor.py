# techlingo/processors/image_processor.py
"""
Image preprocessing before OCR.

Scanned pages and photos are upscaled and binarized (black text on white)
so the vision model reads small print and code reliably.
"""

import io
import logging
from typing import Any

# Module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Lazy Imports
# =============================================================================
_np = None
_pil_image = None


def _get_numpy():
    """Lazy import numpy."""
    global _np
    if _np is None:
        import numpy as np
        _np = np
    return _np


def _get_pil_image():
    """Lazy import Pillow's Image module."""
    global _pil_image
    if _pil_image is None:
        from PIL import Image
        _pil_image = Image
    return _pil_image


# =============================================================================
# Preprocessing Constants
# =============================================================================
TARGET_WIDTH = 2000          # px; narrower images are upscaled to this width
DEFAULT_CONTRAST = 60        # -255..255
DEFAULT_THRESHOLD = 128      # 0..255 after contrast
JPEG_QUALITY = 90

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def contrast_factor(contrast: float) -> float:
    """Standard contrast correction factor for a -255..255 contrast value."""
    return (259 * (contrast + 255)) / (255 * (259 - contrast))


class ImageProcessor:
    """
    OCR image preprocessing (upscale + grayscale + contrast + threshold).
    """

    def __init__(
        self,
        target_width: int = TARGET_WIDTH,
        contrast: float = DEFAULT_CONTRAST,
        threshold: int = DEFAULT_THRESHOLD,
        jpeg_quality: int = JPEG_QUALITY,
    ):
        self.target_width = target_width
        self.contrast = contrast
        self.threshold = threshold
        self.jpeg_quality = jpeg_quality

    def upscale(self, image: Any, target_width: int | None = None) -> Any:
        """
        Scale a PIL image up proportionally to target_width.

        Images already at least that wide are returned unchanged.
        """
        target = target_width or self.target_width
        width, height = image.size
        if width >= target or width == 0:
            return image
        new_height = max(1, round(height * target / width))
        Image = _get_pil_image()
        logger.debug("Upscaling image %dx%d -> %dx%d", width, height, target, new_height)
        return image.resize((target, new_height), Image.Resampling.LANCZOS)

    def binarize(self, array: Any, contrast: float | None = None,
                 threshold: int | None = None) -> Any:
        """
        Convert an RGB(A) or grayscale array to a black/white uint8 array.

        Returns a new 2-D array; the input is not modified.
        """
        np = _get_numpy()
        contrast = self.contrast if contrast is None else contrast
        threshold = self.threshold if threshold is None else threshold

        data = np.asarray(array, dtype=np.float32)
        if data.ndim == 3:
            r, g, b = LUMA_WEIGHTS
            gray = data[:, :, 0] * r + data[:, :, 1] * g + data[:, :, 2] * b
        else:
            gray = data

        adjusted = contrast_factor(contrast) * (gray - 128.0) + 128.0
        return np.where(adjusted > threshold, 255, 0).astype(np.uint8)

    def process_array(self, array: Any) -> Any:
        """Upscale and binarize an already rendered RGB bitmap."""
        np = _get_numpy()
        Image = _get_pil_image()
        image = Image.fromarray(np.asarray(array, dtype=np.uint8))
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        image = self.upscale(image)
        return self.binarize(np.asarray(image))

    def encode_jpeg(self, array: Any) -> bytes:
        """Encode a 2-D (grayscale) or RGB array as JPEG."""
        Image = _get_pil_image()
        buffer = io.BytesIO()
        Image.fromarray(array).save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()

    def process_image(self, data: bytes) -> bytes:
        """
        Preprocess encoded image bytes (PNG, JPEG, WebP) for OCR.

        Returns:
            JPEG bytes of the binarized image

        Raises:
            ValueError: If the data is not a readable image
        """
        Image = _get_pil_image()
        np = _get_numpy()
        try:
            with Image.open(io.BytesIO(data)) as image:
                rgb = image.convert("RGB")
        except (OSError, SyntaxError) as e:
            # PIL raises UnidentifiedImageError (an OSError) for unknown formats
            raise ValueError(f"Unreadable image data: {e}") from e

        binary = self.binarize(np.asarray(self.upscale(rgb)))
        return self.encode_jpeg(binary)
