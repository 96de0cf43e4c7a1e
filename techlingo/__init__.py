# techlingo/__init__.py
"""
TechLingo - Technical Document Page Translator

Translates technical-document pages into a single-page-per-page PDF,
reflowing prose and rendering embedded source code with syntax colouring.
"""

from pathlib import Path


def _get_version() -> str:
    """
    Read the version from pyproject.toml.

    Falls back to the hard-coded version when the package is installed
    without its pyproject.toml (e.g. from a wheel).

    Returns:
        str: version string (e.g. "0.1.0")
    """
    try:
        import tomllib  # Python 3.11+ standard library

        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
            return data.get("project", {}).get("version", "0.0.0")
    except Exception:
        pass

    # Fallback: hard-coded version
    return "0.1.0"


__version__ = _get_version()
__app_name__ = "TechLingo"
