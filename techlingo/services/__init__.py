# techlingo/services/__init__.py
"""
Service layer for TechLingo.

Heavy service imports are lazy-loaded for faster startup.
Use explicit imports like:
    from techlingo.services.gemini_client import GeminiPageTranslator
"""

# Fast imports - basic types
from .exceptions import PageTranslationError, TranslationBackendError, TranslationCancelledError
from .prompt_builder import PromptBuilder

# Lazy-loaded services via __getattr__
_LAZY_IMPORTS = {
    'GeminiPageTranslator': 'gemini_client',
    'TranslationService': 'translation_service',
    'PageInput': 'translation_service',
}

# Submodules that can be accessed via __getattr__ (for patching support)
_SUBMODULES = {'gemini_client', 'translation_service', 'prompt_builder', 'exceptions'}


def __getattr__(name: str):
    """Lazy-load heavy service modules on first access."""
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
    'PromptBuilder',
    'PageTranslationError',
    'TranslationBackendError',
    'TranslationCancelledError',
    'GeminiPageTranslator',
    'TranslationService',
    'PageInput',
]
