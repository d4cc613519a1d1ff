"""
Cross-platform utilities for Photo Sorter.

Centralises all OS-detection logic so every other module can import
a single canonical set of helpers rather than scattering ``sys.platform``
checks throughout the codebase.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from photo_sorter.errors import CacheDirError

# ---- platform flags ----------------------------------------------------

IS_WINDOWS: bool = sys.platform == "win32"
IS_MACOS: bool = sys.platform == "darwin"

# ---- directories -------------------------------------------------------

CACHE_SUBDIR = "photosorter"
SEEN_FILENAME = "seen"


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as exc:
        raise CacheDirError("Cannot determine the home directory") from exc


def get_cache_dir() -> Path:
    """
    Return the per-user cache base directory (not created).

    - Windows : ``%LOCALAPPDATA%``
    - macOS   : ``~/Library/Caches``
    - Linux   : ``$XDG_CACHE_HOME`` (default ``~/.cache``)

    Raises CacheDirError when no location can be determined.
    """
    if IS_WINDOWS:
        base = os.environ.get("LOCALAPPDATA", "")
        if not base:
            raise CacheDirError("%LOCALAPPDATA% is not defined")
        return Path(base)
    if IS_MACOS:
        return _home() / "Library" / "Caches"

    base = os.environ.get("XDG_CACHE_HOME", "")
    if base:
        if not os.path.isabs(base):
            raise CacheDirError(f"$XDG_CACHE_HOME is not absolute: {base}")
        return Path(base)
    home = os.environ.get("HOME", "")
    if not home:
        raise CacheDirError("Neither $XDG_CACHE_HOME nor $HOME is defined")
    return Path(home) / ".cache"


def get_seen_path() -> Path:
    """Return the path to the persisted seen-set file."""
    return get_cache_dir() / CACHE_SUBDIR / SEEN_FILENAME
