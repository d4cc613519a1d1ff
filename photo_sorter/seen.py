"""Persistent record of the source files Photo Sorter has already handled.

The store is a plain text file with one filename per line.  Filenames
containing a newline cannot be represented and are not supported.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_DIR_MODE = 0o700
# Round-trip filenames that are not valid UTF-8, as os.listdir returns them;
# newline="\n" keeps a carriage return inside a name
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class SeenStore:
    """Loads and saves the seen set at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def prepare(self) -> None:
        """Create the store's parent directory if it does not exist yet."""
        parent = self.path.parent
        logger.info("Storing seen cache in: %s", parent)
        try:
            parent.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Could not create cache directory %s: %s", parent, exc)

    def load(self) -> set[str]:
        """Return the persisted seen set; empty if it cannot be read."""
        try:
            with open(self.path, encoding=_ENCODING, errors=_ERRORS, newline="\n") as fh:
                seen = {line.rstrip("\n") for line in fh}
        except OSError as exc:
            logger.debug("No seen cache loaded from %s (%s)", self.path, exc)
            return set()
        seen.discard("")
        logger.debug("Loaded %d seen file(s) from %s", len(seen), self.path)
        return seen

    def save(self, seen: set[str]) -> None:
        """Overwrite the persisted seen set with *seen*."""
        try:
            fh = open(self.path, "w", encoding=_ENCODING, errors=_ERRORS, newline="\n")
        except OSError as exc:
            logger.warning("Could not write seen cache %s: %s", self.path, exc)
            return
        try:
            with fh:
                for name in seen:
                    fh.write(name)
                    fh.write("\n")
        except OSError as exc:
            logger.warning("Failed writing seen cache %s: %s", self.path, exc)
