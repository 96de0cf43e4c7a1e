# techlingo/models/types.py
"""
Core data types for TechLingo.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, NamedTuple, Optional


# =============================================================================
# Page content
# =============================================================================
class BlockKind(Enum):
    """Kind of a segmented content block"""
    PROSE = "prose"
    CODE = "code"


@dataclass(frozen=True)
class ContentBlock:
    """
    One typed block of page content, in page order.

    Produced by the content segmenter and never mutated afterwards.
    """
    kind: BlockKind
    raw_text: str
    language: Optional[str] = None   # Fence tag (e.g. "c"), informational only

    @property
    def is_code(self) -> bool:
        return self.kind is BlockKind.CODE


@dataclass(frozen=True)
class MeasuredBlock:
    """
    A ContentBlock wrapped at one specific font size.

    Only valid for the (font_size, line_height_factor) pair it was measured
    with; a new scale attempt always measures from scratch.
    """
    block: ContentBlock
    wrapped_lines: tuple[str, ...]
    rendered_height: float
    font_size: float

    @property
    def kind(self) -> BlockKind:
        return self.block.kind

    @property
    def is_code(self) -> bool:
        return self.block.is_code

    @property
    def raw_text(self) -> str:
        return self.block.raw_text


@dataclass(frozen=True)
class LayoutAttempt:
    """Outcome of measuring every block of a page at one scale factor."""
    scale: float
    measured_blocks: tuple[MeasuredBlock, ...]
    total_height: float
    max_height: float

    @property
    def fits(self) -> bool:
        return self.total_height <= self.max_height

    @property
    def overflow(self) -> float:
        """Points beyond the available height (0.0 when the page fits)"""
        return max(0.0, self.total_height - self.max_height)


@dataclass(frozen=True)
class LayoutPlan:
    """
    Final layout of one page.

    Produced once per page by the layout fitter and consumed once by the
    page compositor.
    """
    measured_blocks: tuple[MeasuredBlock, ...]
    prose_font_size: float
    code_font_size: float
    line_height_factor: float
    inter_block_spacing: float
    content_width: float = 0.0       # Width the lines were wrapped to
    scale: float = 1.0
    overflow: float = 0.0            # > 0 when content overflows at the scale floor

    @property
    def total_height(self) -> float:
        if not self.measured_blocks:
            return 0.0
        heights = sum(b.rendered_height for b in self.measured_blocks)
        return heights + self.inter_block_spacing * (len(self.measured_blocks) - 1)


# =============================================================================
# Syntax colouring
# =============================================================================
class ColorClass(Enum):
    """
    Semantic category of a code token.

    Each member carries its fixed RGB ink colour.
    """
    KEYWORD = (0, 0, 204)            # Dark blue (#0000CC)
    FUNCTION_NAME = (128, 0, 128)    # Purple (#800080)
    STRING_LITERAL = (0, 102, 0)     # Green (#006600)
    NUMBER_LITERAL = (204, 0, 0)     # Red (#CC0000)
    COMMENT = (102, 102, 102)        # Gray (#666666)
    DEFAULT = (0, 0, 0)              # Black

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.value


class Token(NamedTuple):
    """A lexical token of one code line"""
    text: str
    color_class: ColorClass


# Wraps text at a font size: (text, is_code, font_size) -> wrapped lines
MeasureFn = Callable[[str, bool, float], list[str]]


# =============================================================================
# Files and translation jobs
# =============================================================================
class FileType(Enum):
    """Supported input file types"""
    PDF = "pdf"
    IMAGE = "image"


class ProcessingMode(Enum):
    """How page text is obtained before translation"""
    TEXT_EXTRACTION = "text_extraction"  # Searchable PDF: embedded text
    OCR = "ocr"                          # Images or scanned PDF pages


class TranslationStatus(Enum):
    """Translation job status"""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TranslationPhase(Enum):
    """Translation process phases for detailed progress tracking"""
    EXTRACTING = "extracting"    # Reading text or rendering pages
    TRANSLATING = "translating"  # Sending pages to the AI backend
    GENERATING = "generating"    # Composing the output PDF
    COMPLETE = "complete"


@dataclass
class FileInfo:
    """
    Input file metadata.
    """
    path: Path
    file_type: FileType
    size_bytes: int
    page_count: int = 1

    @property
    def size_display(self) -> str:
        """Human-readable file size"""
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"
        elif self.size_bytes < 1024 * 1024:
            return f"{self.size_bytes / 1024:.1f} KB"
        else:
            return f"{self.size_bytes / (1024 * 1024):.1f} MB"


@dataclass
class TranslationProgress:
    """
    Progress information for a running translation.

    `current` is clamped into [0, total]; `percentage` is derived.
    """
    current: int                     # Pages finished
    total: int                       # Total pages
    status: str                      # Status message
    percentage: float = 0.0          # 0.0 - 1.0
    phase: Optional[TranslationPhase] = None
    phase_detail: Optional[str] = None  # e.g., "Page 3/10"

    def __post_init__(self):
        if self.current < 0:
            self.current = 0

        if self.total < 0:
            raise ValueError(f"total must be non-negative, got {self.total}")

        if self.total > 0:
            if self.current > self.total:
                self.current = self.total
            self.percentage = self.current / self.total
        else:
            self.percentage = 0.0


@dataclass
class TranslationResult:
    """
    Result of a document translation.
    """
    status: TranslationStatus
    output_path: Optional[Path] = None
    mode: Optional[ProcessingMode] = None
    pages_translated: int = 0
    pages_total: int = 0
    overflow_pages: list[int] = field(default_factory=list)  # 1-based, content beyond scale floor
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is TranslationStatus.COMPLETED

    def get_summary(self) -> str:
        """Get a human-readable summary of the translation."""
        if self.status is TranslationStatus.CANCELLED:
            return f"Cancelled: {self.pages_translated}/{self.pages_total} pages translated"
        if self.status is TranslationStatus.FAILED:
            return f"Failed: {self.error_message or 'unknown error'}"
        summary = f"Success: {self.pages_translated}/{self.pages_total} pages translated"
        if self.overflow_pages:
            pages = ", ".join(str(p) for p in self.overflow_pages)
            summary += f" (content exceeds page at minimum scale: {pages})"
        return summary


# Callback types
ProgressCallback = Callable[[TranslationProgress], None]
