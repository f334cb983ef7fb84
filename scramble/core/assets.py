"""Helpers for locating packaged assets (tile distribution table).

Path is resolved relative to this module so the lookup does not depend on cwd.
"""

from __future__ import annotations

from pathlib import Path


def get_assets_path() -> Path:
    """Return the `assets/` directory of the package.

    Resolved relative to this module (`scramble/core/assets.py`).
    """

    return Path(__file__).resolve().parent.parent / "assets"


def get_tiles_path() -> str:
    """Full path to the builtin `tiles.json` distribution (as text)."""

    return str(get_assets_path() / "tiles.json")
