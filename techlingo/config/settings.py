# techlingo/config/settings.py
"""
Application settings management for TechLingo.

Settings are split across two files:
- settings.template.json: developer defaults (overwritten on update)
- user_settings.json: only the settings a user changed
On load the template is read first and user settings are applied on top.

Cache:
- _settings_cache keys AppSettings instances by path
- load() prefers the cache and reloads when either file's mtime changes
- save() refreshes the cache
- invalidate_settings_cache() clears it explicitly
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Module logger
logger = logging.getLogger(__name__)

# Settings cache: path -> (mtime_template, mtime_user, AppSettings)
_settings_cache: dict[str, tuple[float, float, "AppSettings"]] = {}
_settings_cache_lock = threading.Lock()

# Settings a user may override (saved to user_settings.json)
USER_SETTINGS_KEYS = {
    "target_language",
    "gemini_model",
    "max_workers",
    "output_directory",
    "prose_font_size",
    "code_font_size",
}


@dataclass
class AppSettings:
    """Application settings"""

    # Output (always a separate file with a _translated suffix)
    output_directory: Optional[str] = None  # None = same as input

    # Page layout (points)
    page_margin: float = 71.0           # ~1 inch
    prose_font_size: float = 11.0       # Base size at scale 1.0
    code_font_size: float = 9.5         # Base size at scale 1.0
    line_height_factor: float = 1.35
    block_spacing: float = 14.0         # Scaled together with the fonts
    min_scale: float = 0.65             # Below this, overflow is accepted
    scale_step: float = 0.05

    # Translation backend
    gemini_model: str = "gemini-2.5-flash"
    temperature: float = 0.2
    target_language: str = "Brazilian Portuguese"
    request_timeout: int = 120          # Seconds per page request
    max_workers: int = 4                # Pages translated concurrently

    # OCR rendering
    render_scale: float = 3.0           # PDF page render scale for OCR input

    @classmethod
    def load(cls, path: Path, use_cache: bool = True) -> "AppSettings":
        """Load settings from template and user settings files.

        1. Defaults from settings.template.json
        2. Overrides from user_settings.json (USER_SETTINGS_KEYS only)

        Args:
            path: Settings path (config/settings.json); only its directory
                  is used to find the template and user settings files.
            use_cache: Prefer the cached instance while file mtimes match.
        """
        config_dir = path.parent
        template_path = config_dir / "settings.template.json"
        user_settings_path = config_dir / "user_settings.json"

        cache_key = str(path.resolve())

        template_mtime = template_path.stat().st_mtime if template_path.exists() else 0.0
        user_mtime = user_settings_path.stat().st_mtime if user_settings_path.exists() else 0.0

        if use_cache:
            with _settings_cache_lock:
                if cache_key in _settings_cache:
                    cached_template_mtime, cached_user_mtime, cached_settings = _settings_cache[cache_key]
                    if cached_template_mtime == template_mtime and cached_user_mtime == user_mtime:
                        logger.debug("Using cached settings for: %s", path)
                        return cached_settings

        data = {}

        # 1. Template (developer defaults)
        if template_path.exists():
            try:
                with open(template_path, 'r', encoding='utf-8-sig') as f:
                    data = json.load(f)
                    logger.debug("Loaded template settings from: %s", template_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load template settings: %s", e)
            if not isinstance(data, dict):
                logger.warning("Ignoring settings template that is not a JSON object: %s", template_path)
                data = {}

        # 2. User overrides
        if user_settings_path.exists():
            try:
                with open(user_settings_path, 'r', encoding='utf-8-sig') as f:
                    user_data = json.load(f)
                if not isinstance(user_data, dict):
                    logger.warning("Ignoring user settings that are not a JSON object: %s", user_settings_path)
                    user_data = {}
                for key in USER_SETTINGS_KEYS:
                    if key in user_data:
                        data[key] = user_data[key]
                logger.debug("Loaded user settings from: %s", user_settings_path)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning("Failed to load user settings: %s", e)

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        settings = cls(**filtered_data)
        settings._validate()

        with _settings_cache_lock:
            _settings_cache[cache_key] = (template_mtime, user_mtime, settings)

        return settings

    def _validate(self) -> None:
        """Validate and normalize setting values.

        Out-of-range values are reset to defaults with a warning.
        """
        # Font sizes
        if not 4.0 <= self.prose_font_size <= 72.0:
            logger.warning("prose_font_size out of range (%.1f), resetting to 11.0", self.prose_font_size)
            self.prose_font_size = 11.0
        if not 4.0 <= self.code_font_size <= 72.0:
            logger.warning("code_font_size out of range (%.1f), resetting to 9.5", self.code_font_size)
            self.code_font_size = 9.5

        if not 1.0 <= self.line_height_factor <= 3.0:
            logger.warning("line_height_factor out of range (%.2f), resetting to 1.35", self.line_height_factor)
            self.line_height_factor = 1.35

        if self.block_spacing < 0:
            logger.warning("block_spacing negative (%.1f), resetting to 14.0", self.block_spacing)
            self.block_spacing = 14.0

        # Scale search
        if not 0.0 < self.min_scale <= 1.0:
            logger.warning("min_scale out of range (%.2f), resetting to 0.65", self.min_scale)
            self.min_scale = 0.65
        if not 0.0 < self.scale_step <= 0.5:
            logger.warning("scale_step out of range (%.2f), resetting to 0.05", self.scale_step)
            self.scale_step = 0.05

        if not 0.0 <= self.page_margin <= 200.0:
            logger.warning("page_margin out of range (%.1f), resetting to 71.0", self.page_margin)
            self.page_margin = 71.0

        # Backend
        if self.max_workers < 1:
            logger.warning("max_workers too small (%d), resetting to 4", self.max_workers)
            self.max_workers = 4
        elif self.max_workers > 16:
            logger.warning("max_workers too large (%d), resetting to 4", self.max_workers)
            self.max_workers = 4

        if self.request_timeout < 10:
            logger.warning("request_timeout too small (%d), resetting to 120", self.request_timeout)
            self.request_timeout = 120
        elif self.request_timeout > 1800:
            logger.warning("request_timeout too large (%d), resetting to 120", self.request_timeout)
            self.request_timeout = 120

        if not 0.0 <= self.temperature <= 2.0:
            logger.warning("temperature out of range (%.2f), resetting to 0.2", self.temperature)
            self.temperature = 0.2

        if not 1.0 <= self.render_scale <= 6.0:
            logger.warning("render_scale out of range (%.1f), resetting to 3.0", self.render_scale)
            self.render_scale = 3.0

    def save(self, path: Path) -> None:
        """Save user settings to user_settings.json.

        Only USER_SETTINGS_KEYS are written; the template is never modified.

        Args:
            path: Settings path (config/settings.json); the file actually
                  written is config/user_settings.json.
        """
        config_dir = path.parent
        user_settings_path = config_dir / "user_settings.json"
        template_path = config_dir / "settings.template.json"

        config_dir.mkdir(parents=True, exist_ok=True)

        data = {}
        for key in USER_SETTINGS_KEYS:
            if hasattr(self, key):
                data[key] = getattr(self, key)

        with open(user_settings_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        logger.debug("Saved user settings to: %s", user_settings_path)

        cache_key = str(path.resolve())
        template_mtime = template_path.stat().st_mtime if template_path.exists() else 0.0
        user_mtime = user_settings_path.stat().st_mtime if user_settings_path.exists() else 0.0
        with _settings_cache_lock:
            _settings_cache[cache_key] = (template_mtime, user_mtime, self)

    def get_output_directory(self, input_path: Path) -> Path:
        """
        Get output directory for the translated file.
        Returns the input file's directory if output_directory is None.
        """
        if self.output_directory:
            return Path(self.output_directory)
        return input_path.parent

    def get_output_path(self, input_path: Path) -> Path:
        """Get `<stem>_translated.pdf` in the output directory."""
        return self.get_output_directory(input_path) / f"{input_path.stem}_translated.pdf"


def get_default_settings_path() -> Path:
    """Get default settings file path"""
    return Path(__file__).parent.parent.parent / "config" / "settings.json"


def invalidate_settings_cache(path: Optional[Path] = None) -> None:
    """Invalidate settings cache.

    Args:
        path: Clear only this path's entry; None clears everything.
    """
    with _settings_cache_lock:
        if path is None:
            _settings_cache.clear()
            logger.debug("Cleared all settings cache")
        else:
            cache_key = str(path.resolve())
            if cache_key in _settings_cache:
                del _settings_cache[cache_key]
                logger.debug("Cleared settings cache for: %s", path)
