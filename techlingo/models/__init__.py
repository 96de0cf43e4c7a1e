# techlingo/models/__init__.py
"""
Data models for TechLingo.
"""

from .types import (
    BlockKind,
    ContentBlock,
    MeasuredBlock,
    LayoutAttempt,
    LayoutPlan,
    ColorClass,
    Token,
    MeasureFn,
    FileType,
    ProcessingMode,
    TranslationStatus,
    TranslationPhase,
    FileInfo,
    TranslationProgress,
    TranslationResult,
    ProgressCallback,
)

__all__ = [
    'BlockKind',
    'ContentBlock',
    'MeasuredBlock',
    'LayoutAttempt',
    'LayoutPlan',
    'ColorClass',
    'Token',
    'MeasureFn',
    'FileType',
    'ProcessingMode',
    'TranslationStatus',
    'TranslationPhase',
    'FileInfo',
    'TranslationProgress',
    'TranslationResult',
    'ProgressCallback',
]
