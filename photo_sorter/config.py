"""Configuration for Photo Sorter.

Settings come from built-in defaults, optionally overlaid by a JSON
settings file, then by command-line overrides.  A ``Config`` is built
once at startup and is read-only afterwards.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Bursts of events must never block the watchdog observer thread
MIN_SIGNAL_QUEUE_SIZE = 1024

DEFAULT_CONFIG: dict[str, Any] = {
    "source_folder": "",
    "target_folder": "",
    "log_level": "INFO",
    "log_file": "",  # blank = stderr only
    # ---- log rotation ----
    "max_log_size_mb": 10,  # rotate log when it exceeds this size
    "log_backup_count": 3,  # number of rotated log files to keep
    # ---- change signals ----
    "signal_queue_size": MIN_SIGNAL_QUEUE_SIZE,
    # ---- failed copies ----
    "retry_failed": False,  # leave failed copies out of the seen set
}


class Config:
    """Immutable configuration value backed by defaults and an optional JSON file."""

    def __init__(
        self,
        path: Path | None = None,
        overrides: dict[str, Any] | None = None,
    ):
        """Load *path* (if given) over the defaults, then apply *overrides*."""
        self._path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None:
            self._data.update(self._read(path))
        for key, value in (overrides or {}).items():
            if value is not None:
                self._data[key] = value

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        """Return the settings stored in *path*, or an empty dict on error."""
        try:
            with open(path, encoding="utf-8") as fh:
                stored = json.load(fh)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read settings (%s); using defaults.", exc)
            return {}
        if not isinstance(stored, dict):
            logger.warning("Settings file %s is not a JSON object; using defaults.", path)
            return {}
        unknown = sorted(set(stored) - set(DEFAULT_CONFIG))
        if unknown:
            logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))
        logger.info("Settings loaded from %s", path)
        return {k: v for k, v in stored.items() if k in DEFAULT_CONFIG}

    # ---- accessors ----

    @property
    def path(self) -> Path | None:
        """Return the settings file this configuration was read from."""
        return self._path

    @property
    def source_folder(self) -> Path:
        """Return the watched source folder."""
        return Path(self._data["source_folder"])

    @property
    def target_folder(self) -> Path:
        """Return the root under which year folders are created."""
        return Path(self._data["target_folder"])

    @property
    def log_level(self) -> str:
        """Return the logging level name."""
        return str(self._data.get("log_level", "INFO")).upper()

    @property
    def log_file(self) -> Path | None:
        """Return the rotating log file path, or None for stderr only."""
        value = self._data.get("log_file", "")
        return Path(value).expanduser() if value else None

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return max(1, int(self._data.get("max_log_size_mb", 10)))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return max(0, int(self._data.get("log_backup_count", 3)))

    @property
    def signal_queue_size(self) -> int:
        """Return the change-signal queue capacity."""
        value = int(self._data.get("signal_queue_size", MIN_SIGNAL_QUEUE_SIZE))
        return max(MIN_SIGNAL_QUEUE_SIZE, value)

    @property
    def retry_failed(self) -> bool:
        """Return whether failed copies are retried on the next pass."""
        return bool(self._data.get("retry_failed", False))

    # ---- convenience ----

    def is_configured(self) -> bool:
        """Return True when both source and target folders are set."""
        return bool(self._data["source_folder"]) and bool(self._data["target_folder"])
