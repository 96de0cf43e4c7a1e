from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the repo root importable when pytest runs from an installed entrypoint
# (e.g. `pip install -e .[test]` then `pytest`), where sys.path[0] is not the repo.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _fresh_settings_cache():
    """AppSettings.load() caches per path; start every test from disk."""
    from techlingo.config.settings import invalidate_settings_cache

    invalidate_settings_cache()
    yield
    invalidate_settings_cache()
