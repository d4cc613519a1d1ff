"""File system watcher for Photo Sorter.

Uses the watchdog library to monitor the source folder (not its
subfolders) and turns every change notification into a timestamp on a
bounded queue.  Deciding whether a timestamp warrants a new pass is left
to the run loop; the sync engine always rescans the whole folder, so a
dropped timestamp loses nothing.

watchdog also reports plain reads (opened, closed without writing).  These
are access notifications, not changes, and are not forwarded; the event
set is create, write, remove, rename and attribute changes, and every one
of those emits a timestamp whatever its kind.
"""

from __future__ import annotations

import logging
import os
import queue
import time
from collections.abc import Callable
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

# Read-only access, not a change: reported when the sorter itself reads files
_ACCESS_EVENTS = frozenset({"opened", "closed_no_write"})


class ChangeSignalHandler(FileSystemEventHandler):
    """Watchdog handler that emits the current time for every change."""

    def __init__(
        self,
        signals: queue.Queue,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__()
        self._signals = signals
        self._clock = clock
        self.dropped = 0

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Queue a change signal, dropping it if the queue is full."""
        if event.event_type in _ACCESS_EVENTS:
            return
        try:
            self._signals.put_nowait(self._clock())
        except queue.Full:
            self.dropped += 1
            logger.debug("Signal queue full; dropped %s event", event.event_type)


class FolderWatcher:
    """Watches one folder non-recursively and feeds a signal queue.

    Usage:
        watcher = FolderWatcher(source, signals)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(self, source_folder: str | os.PathLike, signals: queue.Queue):
        self.source_folder = str(source_folder)
        self._handler = ChangeSignalHandler(signals)
        self._observer: Any | None = None

    # ---- lifecycle ----

    def start(self) -> None:
        """Start watching the source folder."""
        if not os.path.isdir(self.source_folder):
            logger.error("Source folder does not exist: %s", self.source_folder)
            raise FileNotFoundError(
                f"Source folder does not exist: {self.source_folder}"
            )

        observer = Observer()
        self._observer = observer
        observer.schedule(self._handler, self.source_folder, recursive=False)
        observer.start()
        logger.info("Watching '%s'", self.source_folder)

    def stop(self) -> None:
        """Stop watching and release resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("Watcher stopped.")

    @property
    def is_running(self) -> bool:
        """Return whether the watcher is currently active."""
        return self._observer is not None and self._observer.is_alive()

    @property
    def dropped_signals(self) -> int:
        """Return how many signals were dropped because the queue was full."""
        return self._handler.dropped
